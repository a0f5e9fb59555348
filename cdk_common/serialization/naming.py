"""Naming helpers for construct ids, resource names and exports.

- ``id``: dotted internal construct identifiers (``"eks.cluster.main"``).
- ``name``: hyphenated externally visible names (``"eks-cluster-main"``).
- ``describe``: ``"{organization} {environment} {text}"`` descriptions.
- ``exported`` / ``named``: export names built from the deployment
  context, prefixed by the synthesizer name when one is configured.

``id`` and ``name`` are strict inverses for parts that do not mix the
two separators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cdk_common.core.constants import ID, SYNTHESIZER_NAME
from cdk_common.core.context import DeploymentContext, context_of

if TYPE_CHECKING:
    from constructs import Construct

    from cdk_common.models.common import Common


def id(*parts: str) -> str:  # noqa: A001
    """Join *parts* with ``.`` and turn every ``-`` into ``.``."""
    return ".".join(parts).replace("-", ".")


def name(*parts: str) -> str:
    """Join *parts* with ``-`` and turn every ``.`` into ``-``."""
    return id(*parts).replace(".", "-")


def describe(common: Common, *parts: str) -> str:
    """Return a human-readable description for a resource."""
    return f"{common.organization} {common.environment} {' '.join(parts)}"


def exported(scope: Construct | DeploymentContext, suffix: str) -> str:
    """Return ``{prefix}{hosted id}{suffix}`` for CloudFormation exports.

    Raises:
        MissingKeyError: If neither the synthesizer name nor ``host:id``
            is set, or if ``hosted:id`` is not set.
    """
    prefix, hosted_id = _export_parts(context_of(scope))
    return f"{prefix}{hosted_id}{suffix}"


def named(scope: Construct | DeploymentContext, suffix: str) -> str:
    """Return ``{prefix}-{hosted id}-{suffix}`` for human-facing names."""
    prefix, hosted_id = _export_parts(context_of(scope))
    return f"{prefix}-{hosted_id}-{suffix}"


def _export_parts(context: DeploymentContext) -> tuple[str, str]:
    synthesizer = context.secondary.get(SYNTHESIZER_NAME)
    if synthesizer is not None:
        prefix = str(synthesizer)
    else:
        prefix = str(context.primary_value(ID))
    return prefix, str(context.secondary_value(ID))
