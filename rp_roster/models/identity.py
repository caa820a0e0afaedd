from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Cards with this display name are the board's copy-me template, never a member
TEMPLATE_CARD_NAME = "Template"


class ExtractedIdentity(BaseModel):
    """A member card reduced to its display name and unresolved identity token."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    identity_token: str
    extra_properties: Optional[Dict[str, str]] = None

    @field_validator("display_name")
    @classmethod
    def _real_member_name(cls, value: str) -> str:
        if not value or value == TEMPLATE_CARD_NAME:
            raise ValueError("display_name must be non-empty and not the template")
        return value

    @field_validator("identity_token")
    @classmethod
    def _non_empty_token(cls, value: str) -> str:
        if not value:
            raise ValueError("identity_token must be non-empty")
        return value


class ResolvedIdentity(BaseModel):
    """One entry of the identity service's batched lookup response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    requested_token: str = Field(..., alias="requestedUsername")
    canonical_username: str = Field(..., alias="name")
    external_id: str = Field(..., alias="id")

    @field_validator("external_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)


class MergedRecord(BaseModel):
    """A roster entry: card data joined with its resolved platform identity."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    display_name: str
    canonical_username: str
    external_id: str
    extra_properties: Optional[Dict[str, str]] = None

    def to_json(self) -> Dict[str, Any]:
        """Wire shape: camelCase keys, `extraProperties` omitted when absent."""
        return self.model_dump(by_alias=True, exclude_none=True)
