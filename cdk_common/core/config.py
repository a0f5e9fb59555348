"""Engine configuration loaded from environment variables.

All values have sensible defaults so that a plain ``cdk synth`` run
works without any setup; the environment only needs to be touched to
point the template resolver somewhere else.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if a value is
    unusable, so a misconfigured build stops before any template is
    read.
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass

from cdk_common.core.exceptions import ConfigError

DEFAULT_TEMPLATE_PATH = "templates"
DEFAULT_TEMPLATE_ENCODING = "utf-8"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class ConfigValidationError(ConfigError):
    """Raised when configuration values are invalid.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration.

    Attributes:
        template_paths: Directories searched, in order, for template resources.
        template_encoding: Text encoding of template files.
        warn_unresolved: Log a warning for placeholders left unresolved.
    """

    template_paths: tuple[str, ...] = (DEFAULT_TEMPLATE_PATH,)
    template_encoding: str = DEFAULT_TEMPLATE_ENCODING
    warn_unresolved: bool = True

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load and validate configuration from environment variables.

        ``CDK_COMMON_TEMPLATE_PATH`` is split on ``os.pathsep``.

        Raises:
            ConfigValidationError: If a value is empty, names an unknown
                encoding or is not a recognised boolean.
        """
        raw_paths = os.getenv("CDK_COMMON_TEMPLATE_PATH", DEFAULT_TEMPLATE_PATH)
        config = cls(
            template_paths=tuple(p for p in raw_paths.split(os.pathsep) if p.strip()),
            template_encoding=os.getenv("CDK_COMMON_TEMPLATE_ENCODING", DEFAULT_TEMPLATE_ENCODING),
            warn_unresolved=_parse_bool(
                "CDK_COMMON_WARN_UNRESOLVED",
                os.getenv("CDK_COMMON_WARN_UNRESOLVED", "true"),
            ),
        )
        _validate(config)
        return config


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigValidationError(key, raw, "must be one of true/false/yes/no/on/off/1/0")


def _validate(config: EngineConfig) -> None:
    """Validate configuration values.  Raises ``ConfigValidationError``."""
    if not config.template_paths:
        raise ConfigValidationError(
            "CDK_COMMON_TEMPLATE_PATH",
            config.template_paths,
            "must name at least one directory",
        )

    try:
        codecs.lookup(config.template_encoding)
    except LookupError as exc:
        raise ConfigValidationError(
            "CDK_COMMON_TEMPLATE_ENCODING",
            config.template_encoding,
            "must be a known text encoding",
        ) from exc
