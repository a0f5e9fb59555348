"""Template resolution against the deployment context.

A template is a plain text resource (YAML, JSON, anything) addressed
by a path relative to one of the configured template roots.  It may
contain ``{{ key }}`` placeholders, where ``key`` is usually a context
key such as ``host:account`` or ``hosted:name``.

Resolution steps:

1. Build the default variable map from the deployment context
   (``host:*`` and ``hosted:*`` identity keys).
2. Merge caller overrides on top; an override always wins.
3. Load the template text from the first root that contains it.
4. Replace each placeholder whose key is in the merged map.  Unknown
   placeholders are left verbatim so that a missing variable shows up
   in the output (and in the log) instead of silently disappearing.

Usage::

    from cdk_common.serialization import template

    text = template.parse(scope, "s3/deny-delete.json", {"bucket": "logs"})
"""

from __future__ import annotations

import functools
import json
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cdk_common.core.config import EngineConfig
from cdk_common.core.constants import (
    HOST_PREFIX,
    HOSTED_PREFIX,
    IDENTITY_KEYS,
    SYNTHESIZER_NAME,
    prefixed,
)
from cdk_common.core.context import DeploymentContext, context_of
from cdk_common.core.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from constructs import Construct

logger = logging.getLogger("cdk_common.serialization.template")

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")
"""``{{ key }}`` with optional inner whitespace; keys contain no braces or spaces."""


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Token:
    """A slice of template text.

    Attributes:
        text: The raw text of the token, delimiters included.
        key: Placeholder key, or ``None`` for literal text.
    """

    text: str
    key: str | None = None


def tokenize(text: str) -> Iterator[Token]:
    """Split *text* into literal and placeholder tokens, in order."""
    position = 0
    for match in PLACEHOLDER_PATTERN.finditer(text):
        if match.start() > position:
            yield Token(text[position : match.start()])
        yield Token(match.group(0), match.group(1))
        position = match.end()
    if position < len(text):
        yield Token(text[position:])


def render_value(value: Any) -> str:
    """Render a variable for insertion into template text.

    Mappings and sequences render as JSON so they stay valid inside
    YAML and JSON templates.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def substitute(text: str, variables: Mapping[str, Any]) -> tuple[str, list[str]]:
    """Replace known placeholders in *text*.

    Returns:
        The substituted text and the keys of placeholders left untouched,
        in order of appearance.
    """
    parts: list[str] = []
    unresolved: list[str] = []
    for token in tokenize(text):
        if token.key is None:
            parts.append(token.text)
        elif token.key in variables:
            parts.append(render_value(variables[token.key]))
        else:
            parts.append(token.text)
            unresolved.append(token.key)
    return "".join(parts), unresolved


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TemplateResolver:
    """Loads template resources and substitutes context variables.

    Instances hold only their immutable search configuration and are
    safe to share between callers.
    """

    def __init__(
        self,
        roots: Sequence[str | Path] | None = None,
        *,
        encoding: str | None = None,
        warn_unresolved: bool | None = None,
    ) -> None:
        if roots is None or encoding is None or warn_unresolved is None:
            config = EngineConfig.from_env()
            roots = config.template_paths if roots is None else roots
            encoding = config.template_encoding if encoding is None else encoding
            warn_unresolved = config.warn_unresolved if warn_unresolved is None else warn_unresolved
        self._roots = tuple(Path(root) for root in roots)
        self._encoding = encoding
        self._warn_unresolved = warn_unresolved

    @property
    def roots(self) -> tuple[Path, ...]:
        """Template roots in search order."""
        return self._roots

    def defaults(self, scope: Construct | DeploymentContext) -> dict[str, Any]:
        """Return the default variable map for *scope*.

        ``host:*`` values come from the primary namespace only;
        ``hosted:*`` values fall back to the primary namespace when the
        secondary one does not define them.

        Raises:
            MissingKeyError: If a required identity key is not defined.
        """
        context = context_of(scope)
        variables: dict[str, Any] = {}
        for key in IDENTITY_KEYS:
            variables[prefixed(HOST_PREFIX, key)] = context.primary_value(key)
        for key in IDENTITY_KEYS:
            variables[prefixed(HOSTED_PREFIX, key)] = context.resolve(key)
        synthesizer = context.secondary.get(SYNTHESIZER_NAME)
        if synthesizer is not None:
            variables[prefixed(HOSTED_PREFIX, SYNTHESIZER_NAME)] = synthesizer
        return variables

    def locate(self, template_ref: str) -> Path:
        """Return the file backing *template_ref*.

        Absolute references and references escaping a root are never
        found.

        Raises:
            TemplateNotFoundError: If no root contains the template.
        """
        ref = Path(template_ref)
        if template_ref and not ref.is_absolute():
            for root in self._roots:
                base = root.resolve()
                candidate = (base / ref).resolve()
                if candidate.is_relative_to(base) and candidate.is_file():
                    return candidate
        raise TemplateNotFoundError(template_ref, tuple(str(root) for root in self._roots))

    def load(self, template_ref: str) -> str:
        """Return the raw text of *template_ref*."""
        return self.locate(template_ref).read_text(encoding=self._encoding)

    def parse(
        self,
        scope: Construct | DeploymentContext,
        template_ref: str,
        overrides: Mapping[str, Any] | None = None,
    ) -> str:
        """Resolve *template_ref* against the context of *scope*.

        Args:
            scope: Construct scope (or prepared context) supplying defaults.
            template_ref: Template path relative to a template root.
            overrides: Variables taking precedence over the defaults.

        Returns:
            The template text with every known placeholder substituted.

        Raises:
            TemplateNotFoundError: If the template does not exist.
            MissingKeyError: If the context lacks a required identity key.
        """
        context = context_of(scope)
        text = self.load(template_ref)
        variables = {**self.defaults(context), **(overrides or {})}
        resolved, unresolved = substitute(text, variables)

        if unresolved and self._warn_unresolved:
            logger.warning(
                "template left placeholders unresolved [template: %s keys: %s]",
                template_ref,
                ", ".join(dict.fromkeys(unresolved)),
            )
        logger.debug(
            "template resolved [template: %s overrides: %s]",
            template_ref,
            sorted(overrides or {}),
        )
        return resolved


# ---------------------------------------------------------------------------
# Shared resolver
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=1)
def get_resolver() -> TemplateResolver:
    """Return the process-wide resolver built from ``EngineConfig.from_env()``.

    Call ``get_resolver.cache_clear()`` after changing the environment.
    """
    return TemplateResolver()


def parse(
    scope: Construct | DeploymentContext,
    template_ref: str,
    overrides: Mapping[str, Any] | None = None,
) -> str:
    """Resolve *template_ref* with the shared resolver."""
    return get_resolver().parse(scope, template_ref, overrides)


def defaults(scope: Construct | DeploymentContext) -> dict[str, Any]:
    """Return the default variable map with the shared resolver."""
    return get_resolver().defaults(scope)
