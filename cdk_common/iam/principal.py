"""Principal resolver: descriptors to ``aws_iam`` principals.

Resolution is a pure function of the descriptor:

1. Build the base principal for the variant's kind.
2. If ``composite`` is non-empty, wrap the base principal and every
   (recursively resolved) member in one ``CompositePrincipal``.
3. If ``conditions`` is non-empty, attach them to the result.

Provider identifier syntax (FEDERATED) is not pre-validated; whatever
the CDK primitive rejects surfaces unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from aws_cdk import aws_iam as iam

from cdk_common.core.exceptions import UnknownPrincipalKindError
from cdk_common.models.principal import (
    AccountPrincipalConf,
    ArnPrincipalConf,
    FederatedPrincipalConf,
    ServicePrincipalConf,
    WildcardPrincipalConf,
    principal_conf,
)

logger = logging.getLogger("cdk_common.iam.principal")


def resolve_principal(descriptor: Any) -> iam.IPrincipal:
    """Resolve a principal descriptor (model or raw mapping).

    Raises:
        UnknownPrincipalKindError: If the descriptor, or any composite
            member, has a kind this resolver does not handle.
        MalformedConfigError: If a raw mapping does not validate, for
            example a composite member carrying its own conditions.
    """
    conf = principal_conf(descriptor) if isinstance(descriptor, Mapping) else descriptor
    principal = _base_principal(conf)

    if conf.composite:
        members = [resolve_principal(member) for member in conf.composite]
        principal = iam.CompositePrincipal(principal, *members)

    if conf.conditions:
        principal = principal.with_conditions(conf.conditions)

    logger.debug(
        "principal resolved [kind: %s value: %s composite: %d conditions: %s]",
        conf.kind.value,
        conf.value,
        len(conf.composite),
        sorted(conf.conditions),
    )
    return principal


def resolve_principals(descriptors: Iterable[Any]) -> list[iam.IPrincipal]:
    """Resolve *descriptors* one-to-one, keeping input order."""
    return [resolve_principal(descriptor) for descriptor in descriptors]


def _base_principal(conf: Any) -> iam.PrincipalBase:
    match conf:
        case ServicePrincipalConf():
            return iam.ServicePrincipal(conf.value)
        case AccountPrincipalConf():
            return iam.AccountPrincipal(conf.value)
        case ArnPrincipalConf():
            return iam.ArnPrincipal(conf.value)
        case FederatedPrincipalConf(action=str() as action) if action:
            return iam.FederatedPrincipal(conf.value, assume_role_action=action)
        case FederatedPrincipalConf():
            return iam.FederatedPrincipal(conf.value)
        case WildcardPrincipalConf():
            return iam.StarPrincipal()
        case _:
            raise UnknownPrincipalKindError(getattr(conf, "kind", type(conf).__name__))
