"""Shared engine constants: single source of truth.

Centralises the deployment context key names and namespace prefixes
used by the context store, the naming helpers and the template
resolver.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Context namespaces
# ---------------------------------------------------------------------------

HOST_PREFIX: str = "host"
"""Prefix of the primary namespace (the deployment doing the hosting)."""

HOSTED_PREFIX: str = "hosted"
"""Prefix of the secondary namespace (the deployment being hosted)."""

KEY_SEPARATOR: str = ":"

# ---------------------------------------------------------------------------
# Context keys (unprefixed)
# ---------------------------------------------------------------------------

ID = "id"
ORGANIZATION = "organization"
ACCOUNT = "account"
REGION = "region"
NAME = "name"
ALIAS = "alias"
ENVIRONMENT = "environment"
VERSION = "version"
DOMAIN = "domain"

IDENTITY_KEYS: tuple[str, ...] = (
    ID,
    ORGANIZATION,
    ACCOUNT,
    REGION,
    NAME,
    ALIAS,
    ENVIRONMENT,
    VERSION,
    DOMAIN,
)
"""Keys every deployment context must define in both namespaces."""

SYNTHESIZER_NAME = "synthesizer:name"
"""Optional secondary key overriding the export name prefix."""


def prefixed(prefix: str, key: str) -> str:
    """Return the flat context key for *key* in namespace *prefix*.

    >>> prefixed(HOSTED_PREFIX, SYNTHESIZER_NAME)
    'hosted:synthesizer:name'
    """
    return f"{prefix}{KEY_SEPARATOR}{key}"
