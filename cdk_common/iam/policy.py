"""Policy statement builder: descriptors and templates to ``aws_iam`` statements.

Two entry styles:

- ``build_statement`` / ``build_statements`` compile statement
  descriptors that already carry every field.
- ``build_statement_from_template`` and ``policy_statements`` resolve a
  policy template first, then map the text onto statement records.
  Principals never come from the template; they are supplied by the
  caller's configuration.

Batch operations are one-to-one and keep input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from aws_cdk import aws_iam as iam
from pydantic import BaseModel

from cdk_common.core.exceptions import UnknownEffectError
from cdk_common.iam.principal import resolve_principal, resolve_principals
from cdk_common.models.statement import (
    BucketPolicyConf,
    PolicyConf,
    PolicyDocumentConf,
    PolicyStatementConf,
)
from cdk_common.serialization.mapper import Mapper
from cdk_common.serialization.template import TemplateResolver, get_resolver

if TYPE_CHECKING:
    from constructs import Construct

    from cdk_common.core.context import DeploymentContext

logger = logging.getLogger("cdk_common.iam.policy")

ASSUME_ROLE_ACTION = "sts:AssumeRole"

_EFFECTS = {
    "ALLOW": iam.Effect.ALLOW,
    "DENY": iam.Effect.DENY,
}

_DOCUMENT_KEYS = frozenset({"Statement", "statements", "Version", "version"})


def normalize_effect(effect: object) -> iam.Effect:
    """Map ``allow``/``deny`` (any letter case) to ``iam.Effect``.

    Raises:
        UnknownEffectError: For any other value.
    """
    if isinstance(effect, str):
        resolved = _EFFECTS.get(effect.strip().upper())
        if resolved is not None:
            return resolved
    raise UnknownEffectError(effect)


def build_statement(
    descriptor: PolicyStatementConf,
    principals: Sequence[iam.IPrincipal] | None = None,
) -> iam.PolicyStatement:
    """Compile one statement descriptor.

    Args:
        descriptor: The statement record.
        principals: Already-resolved principals; when omitted the
            descriptor's own principal descriptors are resolved.

    Raises:
        UnknownEffectError: If the effect is neither ALLOW nor DENY.
        UnknownPrincipalKindError: If a principal kind is not handled.
    """
    effect = normalize_effect(descriptor.effect)
    if principals is None:
        principals = resolve_principals(descriptor.principals)

    statement = iam.PolicyStatement(
        sid=descriptor.sid,
        effect=effect,
        actions=list(descriptor.actions),
        resources=list(descriptor.resources),
        conditions=dict(descriptor.conditions),
        principals=list(principals),
    )
    logger.debug(
        "statement built [sid: %s effect: %s actions: %d resources: %d principals: %d]",
        descriptor.sid,
        descriptor.effect,
        len(descriptor.actions),
        len(descriptor.resources),
        len(principals),
    )
    return statement


def build_statements(descriptors: Iterable[PolicyStatementConf]) -> list[iam.PolicyStatement]:
    """Compile *descriptors* one-to-one, keeping input order."""
    return [build_statement(descriptor) for descriptor in descriptors]


def build_statement_from_template(
    scope: Construct | DeploymentContext,
    conf: BucketPolicyConf,
    resolver: TemplateResolver | None = None,
) -> iam.PolicyStatement:
    """Resolve a single-statement template and attach the configured principals.

    Raises:
        TemplateNotFoundError: If the template does not exist.
        MalformedConfigError: If the resolved text is not a statement.
        UnknownEffectError: If the template's effect is unknown.
    """
    logger.debug("statement template [name: %s policy: %s]", conf.name, conf.policy)
    text = (resolver or get_resolver()).parse(scope, conf.policy, conf.mappings)
    descriptor = Mapper.get().parse(text, PolicyStatementConf)
    return build_statement(descriptor, resolve_principals(conf.principals))


def policy_statements(
    scope: Construct | DeploymentContext,
    conf: PolicyConf,
    resolver: TemplateResolver | None = None,
) -> list[iam.PolicyStatement]:
    """Resolve a policy template into its statements, in document order.

    The template may be a list of statements, a single statement or an
    IAM policy document with a ``Statement`` key.
    """
    logger.debug("policy template [name: %s policy: %s]", conf.name, conf.policy)
    text = (resolver or get_resolver()).parse(scope, conf.policy, conf.mappings)
    mapper = Mapper.get()
    data = mapper.load(text, PolicyDocumentConf)
    if isinstance(data, list):
        descriptors = mapper.convert(data, list[PolicyStatementConf])
    elif isinstance(data, dict) and not data.keys() & _DOCUMENT_KEYS:
        descriptors = [mapper.convert(data, PolicyStatementConf)]
    else:
        descriptors = mapper.convert(data, PolicyDocumentConf).statements
    return build_statements(descriptors)


def policy_document(
    scope: Construct | DeploymentContext,
    conf: PolicyConf,
    resolver: TemplateResolver | None = None,
) -> iam.PolicyDocument:
    """Wrap ``policy_statements`` in an ``iam.PolicyDocument``."""
    return iam.PolicyDocument(statements=policy_statements(scope, conf, resolver))


def assume_role_statement(principals: Sequence[Any]) -> iam.PolicyStatement:
    """Return an ALLOW ``sts:AssumeRole`` statement for *principals*.

    Entries may be principal descriptors or ready ``IPrincipal`` objects
    (roles, for instance).
    """
    resolved = [resolve_principal(p) if isinstance(p, (Mapping, BaseModel)) else p for p in principals]
    return iam.PolicyStatement(
        effect=iam.Effect.ALLOW,
        actions=[ASSUME_ROLE_ACTION],
        principals=resolved,
    )
