"""Structural mapper: resolved text to typed configuration trees.

Text is decoded as JSON first and as YAML when that fails, so strict
JSON (tab indentation included, which YAML forbids) and YAML both
work.  The data is then validated with a pydantic ``TypeAdapter`` for
the requested target.  Any type pydantic understands is a valid
target, including parameterized ones::

    statements = Mapper.get().parse(text, list[PolicyStatementConf])
    values = Mapper.get().parse(text, dict[str, Any])

The mapper is a process-wide singleton without per-call state; the
only shared data is the ``TypeAdapter`` cache, which is populated
lazily and never mutated after an entry is built.
"""

from __future__ import annotations

import contextlib
import functools
import json
import logging
import types
from dataclasses import dataclass
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

import yaml
from pydantic import BaseModel, TypeAdapter, ValidationError

from cdk_common.core.exceptions import MalformedConfigError

logger = logging.getLogger("cdk_common.serialization.mapper")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class TypeName:
    """``Annotated`` metadata naming a target in error messages.

    ``Annotated[Union[A, B], Discriminator(...), TypeName("AorB")]``
    is reported as ``AorB`` instead of its full expansion.
    """

    name: str


@functools.lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable Annotated metadata
        return TypeAdapter(target)


def target_name(target: Any) -> str:
    """Return a readable name for a target type (``list[Foo]``, ``Foo``)."""
    origin = get_origin(target)
    if origin is Annotated:
        for meta in target.__metadata__:
            if isinstance(meta, TypeName):
                return meta.name
        return target_name(get_args(target)[0])
    if origin is Union or origin is types.UnionType:
        return " | ".join(target_name(arg) for arg in get_args(target))
    if origin is not None:
        args = ", ".join(target_name(arg) for arg in get_args(target))
        return f"{getattr(origin, '__name__', repr(origin))}[{args}]"
    if isinstance(target, type):
        return target.__name__
    return repr(target).replace("typing.", "")


def _error_field(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ""
    return ".".join(str(part) for part in errors[0].get("loc", ()))


class Mapper:
    """Deserializes text into instances of a target type."""

    @staticmethod
    @functools.cache
    def get() -> Mapper:
        """Return the shared mapper instance."""
        return Mapper()

    def load(self, text: str, target: Any = Any) -> Any:
        """Parse *text* into plain Python data (no validation)."""
        with contextlib.suppress(json.JSONDecodeError):
            return json.loads(text)
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise MalformedConfigError(target_name(target), f"invalid YAML/JSON: {exc}") from exc

    def convert(self, data: Any, target: type[T] | Any) -> T:
        """Validate already-loaded *data* against *target*.

        Raises:
            MalformedConfigError: If the data does not match the target.
        """
        try:
            return _adapter(target).validate_python(data)
        except ValidationError as exc:
            first = exc.errors()[0] if exc.errors() else {}
            raise MalformedConfigError(
                target_name(target),
                str(first.get("msg", exc)),
                _error_field(exc),
            ) from exc

    def parse(self, text: str, target: type[T] | Any) -> T:
        """Deserialize *text* into an instance of *target*.

        Raises:
            MalformedConfigError: On syntax errors, schema mismatches or
                unknown enumeration literals.
        """
        data = self.load(text, target)
        value = self.convert(data, target)
        logger.debug("mapped configuration [target: %s]", target_name(target))
        return value

    def dump(self, value: Any, *, indent: int | None = None) -> str:
        """Serialize a configuration tree (or plain data) to JSON."""
        if isinstance(value, BaseModel):
            return value.model_dump_json(indent=indent, by_alias=True)
        return json.dumps(_adapter(type(value)).dump_python(value, mode="json"), indent=indent)
