"""Descriptor compilers for ``aws_cdk.aws_iam``.

- principal: Principal descriptors to ``IPrincipal`` objects
- policy: Statement descriptors and policy templates to ``PolicyStatement``
"""

from cdk_common.iam.policy import (
    assume_role_statement,
    build_statement,
    build_statement_from_template,
    build_statements,
    normalize_effect,
    policy_document,
    policy_statements,
)
from cdk_common.iam.principal import resolve_principal, resolve_principals

__all__ = [
    "assume_role_statement",
    "build_statement",
    "build_statement_from_template",
    "build_statements",
    "normalize_effect",
    "policy_document",
    "policy_statements",
    "resolve_principal",
    "resolve_principals",
]
