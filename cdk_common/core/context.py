"""Deployment context store.

A deployment is described by two namespaces of identity facts:

- **primary** (``host:*``): the deployment doing the hosting.
- **secondary** (``hosted:*``): the deployment being hosted inside it.

A secondary value shadows the primary value of the same key; a key
present only in the primary namespace is still resolvable through
``resolve``.  The store is populated once per synth run (from a CDK
construct scope, a flat prefixed mapping or a context file) and is
read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from cdk_common.core.constants import (
    HOST_PREFIX,
    HOSTED_PREFIX,
    IDENTITY_KEYS,
    KEY_SEPARATOR,
    SYNTHESIZER_NAME,
    prefixed,
)
from cdk_common.core.exceptions import MalformedConfigError, MissingKeyError
from cdk_common.serialization.mapper import Mapper

if TYPE_CHECKING:
    from constructs import Construct

logger = logging.getLogger("cdk_common.core.context")

_MISSING = object()


@dataclass(frozen=True, slots=True)
class DeploymentContext:
    """Immutable two-level lookup of deployment identity facts.

    Attributes:
        primary: Unprefixed ``host`` values (e.g. ``{"id": "acme"}``).
        secondary: Unprefixed ``hosted`` values.
    """

    primary: Mapping[str, Any] = field(default_factory=dict)
    secondary: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary", MappingProxyType(dict(self.primary)))
        object.__setattr__(self, "secondary", MappingProxyType(dict(self.secondary)))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve(self, key: str) -> Any:
        """Return *key* from the secondary namespace, else the primary one.

        Raises:
            MissingKeyError: If neither namespace defines *key*.
        """
        value = self.secondary.get(key, _MISSING)
        if value is _MISSING:
            value = self.primary.get(key, _MISSING)
        if value is _MISSING:
            raise MissingKeyError(key, (HOSTED_PREFIX, HOST_PREFIX))
        return value

    def primary_value(self, key: str) -> Any:
        """Return *key* from the primary namespace only."""
        if key not in self.primary:
            raise MissingKeyError(prefixed(HOST_PREFIX, key), (HOST_PREFIX,))
        return self.primary[key]

    def secondary_value(self, key: str) -> Any:
        """Return *key* from the secondary namespace only."""
        if key not in self.secondary:
            raise MissingKeyError(prefixed(HOSTED_PREFIX, key), (HOSTED_PREFIX,))
        return self.secondary[key]

    def get(self, key: str, default: Any = None) -> Any:
        """Optional lookup with the same fallback rule as ``resolve``."""
        try:
            return self.resolve(key)
        except MissingKeyError:
            return default

    def as_flat(self) -> dict[str, Any]:
        """Return the store as a flat ``{"host:id": ..., "hosted:id": ...}`` dict."""
        flat = {prefixed(HOST_PREFIX, k): v for k, v in self.primary.items()}
        flat.update({prefixed(HOSTED_PREFIX, k): v for k, v in self.secondary.items()})
        return flat

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, flat: Mapping[str, Any]) -> DeploymentContext:
        """Split a flat prefixed mapping into the two namespaces.

        Keys that carry neither prefix are ignored.
        """
        host = f"{HOST_PREFIX}{KEY_SEPARATOR}"
        hosted = f"{HOSTED_PREFIX}{KEY_SEPARATOR}"
        primary: dict[str, Any] = {}
        secondary: dict[str, Any] = {}
        for key, value in flat.items():
            if value is None:
                continue
            if key.startswith(hosted):
                secondary[key[len(hosted) :]] = value
            elif key.startswith(host):
                primary[key[len(host) :]] = value
        return cls(primary=primary, secondary=secondary)

    @classmethod
    def from_scope(cls, scope: Construct) -> DeploymentContext:
        """Snapshot the identity keys visible from a CDK construct scope."""
        flat: dict[str, Any] = {}
        for key in IDENTITY_KEYS:
            for prefix in (HOST_PREFIX, HOSTED_PREFIX):
                name = prefixed(prefix, key)
                flat[name] = scope.node.try_get_context(name)
        name = prefixed(HOSTED_PREFIX, SYNTHESIZER_NAME)
        flat[name] = scope.node.try_get_context(name)
        context = cls.from_mapping(flat)
        logger.debug(
            "context snapshot [scope: %s host: %s hosted: %s]",
            scope.node.path,
            sorted(context.primary),
            sorted(context.secondary),
        )
        return context

    @classmethod
    def from_file(cls, path: str | Path) -> DeploymentContext:
        """Load a JSON or YAML context file such as ``cdk.context.json``.

        A top-level ``context`` object (the ``cdk.json`` layout) is
        unwrapped when present.

        Raises:
            MalformedConfigError: If the file is not a mapping.
            OSError: If the file cannot be read.
        """
        data = Mapper.get().load(Path(path).read_text(encoding="utf-8"), cls)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MalformedConfigError(
                "DeploymentContext",
                f"context root must be a mapping, got {type(data).__name__}",
            )
        nested = data.get("context")
        if isinstance(nested, dict):
            data = nested
        return cls.from_mapping(data)


def context_of(source: Construct | DeploymentContext) -> DeploymentContext:
    """Return *source* itself, or a snapshot of a construct scope's context."""
    if isinstance(source, DeploymentContext):
        return source
    return DeploymentContext.from_scope(source)
