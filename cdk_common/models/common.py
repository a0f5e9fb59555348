"""Deployment identity record shared by every construct configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from cdk_common.core.constants import IDENTITY_KEYS
from cdk_common.utils.helpers import merge_maps

if TYPE_CHECKING:
    from cdk_common.core.context import DeploymentContext


class Common(BaseModel):
    """Who and where a deployment is.

    Attributes:
        id: Short deployment identifier (used as an export prefix).
        account: AWS account id.
        region: AWS region.
        organization: Owning organization, first word of descriptions.
        name: Deployment name.
        alias: Short alias.
        environment: Environment label (``prototype``, ``production``...).
        version: Deployment version.
        domain: Base DNS domain.
        tags: Tags applied to every resource of the deployment.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = ""
    account: str = ""
    region: str = ""
    organization: str = ""
    name: str = ""
    alias: str = ""
    environment: str = ""
    version: str = ""
    domain: str = ""
    tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_context(
        cls,
        context: DeploymentContext,
        tags: dict[str, str] | None = None,
    ) -> Common:
        """Build the record for the hosted deployment of *context*.

        Each field uses the secondary value, falling back to the primary one.

        Raises:
            MissingKeyError: If an identity key is defined in neither namespace.
        """
        values = {key: str(context.resolve(key)) for key in IDENTITY_KEYS}
        return cls(**values, tags=dict(tags or {}))

    def with_tags(self, *extra: dict[str, str] | None) -> dict[str, str]:
        """Return the deployment tags merged with *extra* (later maps win)."""
        return merge_maps(self.tags, *extra)
