"""Principal descriptors: who a trust policy or resource policy admits.

A principal descriptor is a closed tagged union with one frozen
pydantic variant per kind:

- ``ServicePrincipalConf``: ``SERVICE``
- ``AccountPrincipalConf``: ``ACCOUNT`` and ``AWS_ACCOUNT``
- ``ArnPrincipalConf``: ``ARN``
- ``FederatedPrincipalConf``: ``FEDERATED`` (the only variant with ``action``)
- ``WildcardPrincipalConf``: ``WILDCARD``

The tag is read from ``kind`` (or ``type``) and matched
case-insensitively; the legacy literals ``AWS`` and ``STAR`` are
accepted as ``AWS_ACCOUNT`` and ``WILDCARD``.  Every variant may carry
nested ``composite`` descriptors and a ``conditions`` block; the
members of a composite may not carry conditions of their own.

Example (YAML)::

    kind: service
    value: lambda.amazonaws.com
    composite:
      - kind: service
        value: edgelambda.amazonaws.com
    conditions:
      StringEquals:
        aws:SourceAccount: "123456789012"
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)

from cdk_common.core.exceptions import UnknownPrincipalKindError
from cdk_common.serialization.mapper import Mapper, TypeName


class PrincipalKind(enum.Enum):
    """Accepted principal descriptor tags."""

    SERVICE = "SERVICE"
    ACCOUNT = "ACCOUNT"
    AWS_ACCOUNT = "AWS_ACCOUNT"
    ARN = "ARN"
    FEDERATED = "FEDERATED"
    WILDCARD = "WILDCARD"

    @classmethod
    def of(cls, value: object) -> PrincipalKind:
        """Parse a tag case-insensitively.

        Raises:
            UnknownPrincipalKindError: If *value* is not a known tag.
        """
        kind = cls.lookup(value)
        if kind is None:
            raise UnknownPrincipalKindError(value)
        return kind

    @classmethod
    def lookup(cls, value: object) -> PrincipalKind | None:
        """Like ``of`` but return ``None`` for unknown tags."""
        if isinstance(value, PrincipalKind):
            return value
        if not isinstance(value, str):
            return None
        literal = value.strip().upper()
        literal = _LEGACY_KINDS.get(literal, literal)
        try:
            return cls(literal)
        except ValueError:
            return None


_LEGACY_KINDS = {"AWS": "AWS_ACCOUNT", "STAR": "WILDCARD"}


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class _PrincipalBase(BaseModel):
    """Fields shared by every principal variant."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid", coerce_numbers_to_str=True)

    kinds: ClassVar[tuple[PrincipalKind, ...]] = ()

    kind: PrincipalKind = Field(validation_alias=AliasChoices("kind", "type"))
    value: str
    composite: list[PrincipalConf] = Field(default_factory=list)
    conditions: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: object) -> PrincipalKind:
        kind = PrincipalKind.lookup(value)
        if kind is None:
            msg = f"unknown principal kind {value!r}"
            raise ValueError(msg)
        return kind

    @field_validator("composite", "conditions", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any, info: Any) -> Any:
        if value is None:
            return [] if info.field_name == "composite" else {}
        return value

    @model_validator(mode="after")
    def _check_kind(self) -> _PrincipalBase:
        if self.kind not in self.kinds:
            expected = ", ".join(k.value for k in self.kinds)
            msg = f"{type(self).__name__} accepts kind {expected}, got {self.kind.value}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _check_composite(self) -> _PrincipalBase:
        # CompositePrincipal rejects members that carry conditions
        for position, member in enumerate(self.composite):
            if member.conditions:
                msg = f"composite member {position} ({member.value}) must not carry conditions"
                raise ValueError(msg)
        return self


class ServicePrincipalConf(_PrincipalBase):
    """A service identity such as ``lambda.amazonaws.com``."""

    kinds: ClassVar[tuple[PrincipalKind, ...]] = (PrincipalKind.SERVICE,)

    kind: PrincipalKind = Field(
        default=PrincipalKind.SERVICE, validation_alias=AliasChoices("kind", "type")
    )


class AccountPrincipalConf(_PrincipalBase):
    """An account id; ``ACCOUNT`` and ``AWS_ACCOUNT`` share this shape."""

    kinds: ClassVar[tuple[PrincipalKind, ...]] = (
        PrincipalKind.ACCOUNT,
        PrincipalKind.AWS_ACCOUNT,
    )

    kind: PrincipalKind = Field(
        default=PrincipalKind.ACCOUNT, validation_alias=AliasChoices("kind", "type")
    )


class ArnPrincipalConf(_PrincipalBase):
    """A fully qualified ARN (user, role, ...)."""

    kinds: ClassVar[tuple[PrincipalKind, ...]] = (PrincipalKind.ARN,)

    kind: PrincipalKind = Field(
        default=PrincipalKind.ARN, validation_alias=AliasChoices("kind", "type")
    )


class FederatedPrincipalConf(_PrincipalBase):
    """An identity provider (OIDC or SAML).

    Attributes:
        action: Assume action used instead of the provider default,
            e.g. ``sts:AssumeRoleWithSAML``.
    """

    kinds: ClassVar[tuple[PrincipalKind, ...]] = (PrincipalKind.FEDERATED,)

    kind: PrincipalKind = Field(
        default=PrincipalKind.FEDERATED, validation_alias=AliasChoices("kind", "type")
    )
    action: str | None = None


class WildcardPrincipalConf(_PrincipalBase):
    """Any identity; ``value`` is conventionally ``"*"`` and never read."""

    kinds: ClassVar[tuple[PrincipalKind, ...]] = (PrincipalKind.WILDCARD,)

    kind: PrincipalKind = Field(
        default=PrincipalKind.WILDCARD, validation_alias=AliasChoices("kind", "type")
    )
    value: str = "*"


_VARIANTS: dict[PrincipalKind, type[_PrincipalBase]] = {
    PrincipalKind.SERVICE: ServicePrincipalConf,
    PrincipalKind.ACCOUNT: AccountPrincipalConf,
    PrincipalKind.AWS_ACCOUNT: AccountPrincipalConf,
    PrincipalKind.ARN: ArnPrincipalConf,
    PrincipalKind.FEDERATED: FederatedPrincipalConf,
    PrincipalKind.WILDCARD: WildcardPrincipalConf,
}


def _principal_tag(value: Any) -> str | None:
    if isinstance(value, _PrincipalBase):
        return type(value).__name__
    if isinstance(value, Mapping):
        kind = PrincipalKind.lookup(value.get("kind", value.get("type")))
        if kind is not None:
            return _VARIANTS[kind].__name__
    return None


PrincipalConf = Annotated[
    Union[
        Annotated[ServicePrincipalConf, Tag("ServicePrincipalConf")],
        Annotated[AccountPrincipalConf, Tag("AccountPrincipalConf")],
        Annotated[ArnPrincipalConf, Tag("ArnPrincipalConf")],
        Annotated[FederatedPrincipalConf, Tag("FederatedPrincipalConf")],
        Annotated[WildcardPrincipalConf, Tag("WildcardPrincipalConf")],
    ],
    Discriminator(
        _principal_tag,
        custom_error_type="unknown_principal_kind",
        custom_error_message="Unknown principal kind",
    ),
    TypeName("PrincipalConf"),
]
"""Any principal variant, selected by its (case-insensitive) kind tag."""

for _model in (_PrincipalBase, *set(_VARIANTS.values())):
    _model.model_rebuild()


def principal_conf(data: Mapping[str, Any] | _PrincipalBase) -> _PrincipalBase:
    """Build a principal descriptor from a raw mapping.

    Unlike plain validation, an unknown kind anywhere in the descriptor
    (including nested ``composite`` entries) raises
    ``UnknownPrincipalKindError`` rather than a validation error.
    """
    if isinstance(data, _PrincipalBase):
        return data
    _check_kinds(data)
    return Mapper.get().convert(dict(data), PrincipalConf)


def _check_kinds(data: Mapping[str, Any]) -> None:
    PrincipalKind.of(data.get("kind", data.get("type")))
    for member in data.get("composite") or ():
        if isinstance(member, Mapping):
            _check_kinds(member)
