"""Policy statement and policy template records.

``PolicyStatementConf`` accepts both snake_case keys and the IAM JSON
keys used in policy-document templates (``Sid``, ``Effect``, ``Action``,
``Resource``, ``Condition``).  A scalar ``Action`` or ``Resource`` is
treated as a one-element list, as IAM itself does.

The effect is kept as written; it is normalised (and rejected if it is
neither ALLOW nor DENY) when the statement is built.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from cdk_common.models.principal import PrincipalConf  # noqa: TC001


class PolicyStatementConf(BaseModel):
    """A single allow/deny rule.

    Attributes:
        sid: Optional statement identifier.
        effect: ``allow`` or ``deny`` in any letter case.
        actions: Actions in input order (no de-duplication).
        resources: Resource ARNs or patterns in input order.
        conditions: ``{operator: {condition key: value}}`` block.
        principals: Principal descriptors; never read from templates.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid", coerce_numbers_to_str=True)

    sid: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sid", "Sid"),
        serialization_alias="Sid",
    )
    effect: str = Field(
        validation_alias=AliasChoices("effect", "Effect"),
        serialization_alias="Effect",
    )
    actions: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("actions", "Action"),
        serialization_alias="Action",
    )
    resources: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("resources", "Resource"),
        serialization_alias="Resource",
    )
    conditions: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("conditions", "Condition"),
        serialization_alias="Condition",
    )
    principals: list[PrincipalConf] = Field(default_factory=list)

    @field_validator("actions", "resources", mode="before")
    @classmethod
    def _scalar_to_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("conditions", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class PolicyDocumentConf(BaseModel):
    """An IAM policy document: ``{"Version": ..., "Statement": [...]}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid", coerce_numbers_to_str=True)

    version: str | None = Field(
        default=None,
        validation_alias=AliasChoices("version", "Version"),
        serialization_alias="Version",
    )
    statements: list[PolicyStatementConf] = Field(
        default_factory=list,
        validation_alias=AliasChoices("statements", "Statement"),
        serialization_alias="Statement",
    )

    @field_validator("statements", mode="before")
    @classmethod
    def _single_statement(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [value]
        return value


class PolicyConf(BaseModel):
    """An inline policy whose statements live in a template.

    Attributes:
        name: Policy name (the inline policy key on the role).
        policy: Template reference, relative to a template root.
        mappings: Template variables overriding the context defaults.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str
    policy: str
    mappings: dict[str, Any] = Field(default_factory=dict)


class BucketPolicyConf(BaseModel):
    """A resource-policy statement template plus its principals.

    The template describes what may be done; ``principals`` says who
    may do it and is supplied per deployment.

    Attributes:
        name: Statement name, used for logging and construct ids.
        principals: Principal descriptors attached to the statement.
        policy: Template reference for a single statement.
        mappings: Template variables overriding the context defaults.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str
    principals: list[PrincipalConf] = Field(default_factory=list)
    policy: str
    mappings: dict[str, Any] = Field(default_factory=dict)
