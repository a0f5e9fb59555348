"""Unified resolution exception taxonomy.

Every failure raised by the engine inherits from ``ResolutionError``
and carries structured context fields so that a build aborted by a bad
reference reports exactly which key, template or literal was at fault.

Taxonomy categories
-------------------
- ``ContextError``: a deployment context key could not be resolved.
- ``TemplateError``: a template resource could not be located.
- ``ConfigError``: text or settings do not match the expected shape.
- ``PolicyError``: a principal kind or statement effect is unknown.

No category is retryable: an infrastructure definition is either
complete and correct or the build stops.

Every exception exposes ``to_error_dict()`` for a stable structured
payload suitable for logging.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
        stage: Engine stage where the error occurred
            (e.g. ``"context"``, ``"template"``).
        code: Machine-readable error code (e.g. ``"TEMPLATE_NOT_FOUND"``).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContextError):
            return "context"
        if isinstance(self, TemplateError):
            return "template"
        if isinstance(self, ConfigError):
            return "config"
        if isinstance(self, PolicyError):
            return "policy"
        return "resolution"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ContextError(ResolutionError):
    """Deployment context lookup failure."""


class TemplateError(ResolutionError):
    """Template resource resolution failure."""


class ConfigError(ResolutionError):
    """Structural configuration failure (text, records or settings)."""


class PolicyError(ResolutionError):
    """Principal or statement descriptor that cannot be compiled."""


# ---------------------------------------------------------------------------
# Concrete errors
# ---------------------------------------------------------------------------


class MissingKeyError(ContextError, KeyError):
    """Raised when a required context key is absent.

    Attributes:
        key: The key that could not be resolved.
        namespaces: The namespaces that were searched, in order.
    """

    default_stage = "context"
    default_code = "CONTEXT_KEY_MISSING"

    def __init__(self, key: str, namespaces: tuple[str, ...] = ()) -> None:
        self.key = key
        self.namespaces = namespaces
        searched = f" (searched: {', '.join(namespaces)})" if namespaces else ""
        ContextError.__init__(self, f"Missing context value for key {key!r}{searched}")


class TemplateNotFoundError(TemplateError):
    """Raised when a named template resource cannot be located.

    Attributes:
        template: The template reference that was requested.
        roots: The template roots that were searched.
    """

    default_stage = "template"
    default_code = "TEMPLATE_NOT_FOUND"

    def __init__(self, template: str, roots: tuple[str, ...] = ()) -> None:
        self.template = template
        self.roots = roots
        searched = f" (searched: {', '.join(roots)})" if roots else ""
        super().__init__(f"Template not found: {template!r}{searched}")


class MalformedConfigError(ConfigError):
    """Raised when resolved text cannot be mapped onto the target shape.

    Attributes:
        target: Name of the target type.
        field: Dotted location of the first offending field, or ``""``.
        detail: Description of the underlying parse failure.
    """

    default_stage = "mapper"
    default_code = "MALFORMED_CONFIG"

    def __init__(self, target: str, detail: str, field: str = "") -> None:
        self.target = target
        self.field = field
        self.detail = detail
        location = f" at {field!r}" if field else ""
        super().__init__(f"Cannot map configuration onto {target}{location}: {detail}")


class UnknownPrincipalKindError(PolicyError):
    """Raised when a principal descriptor names an unsupported kind."""

    default_stage = "principal"
    default_code = "UNKNOWN_PRINCIPAL_KIND"

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unknown principal kind: {kind!r}")


class UnknownEffectError(PolicyError):
    """Raised when a statement effect is neither ALLOW nor DENY."""

    default_stage = "statement"
    default_code = "UNKNOWN_EFFECT"

    def __init__(self, effect: object) -> None:
        self.effect = effect
        super().__init__(f"Unknown policy effect: {effect!r} (expected ALLOW or DENY)")
