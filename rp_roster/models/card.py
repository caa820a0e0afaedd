from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CardField(BaseModel):
    """A single structured `{name, value}` field attached to a card."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    value: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Optional[str]:
        # The power-up API returns numbers and booleans as-is for some field types
        if value is None or isinstance(value, str):
            return value
        return str(value)


class RawCard(BaseModel):
    """One card as returned by the board API, narrowed to what the roster needs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = None
    desc: Optional[str] = None
    card_fields: List[CardField] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _lift_amazing_fields(cls, data: Any) -> Any:
        """Pull structured fields out of `amazingFields.fields` (or a bare `fields` list)."""
        if not isinstance(data, dict) or "card_fields" in data:
            return data
        raw_fields = data.get("fields")
        amazing_fields = data.get("amazingFields")
        if raw_fields is None and isinstance(amazing_fields, dict):
            raw_fields = amazing_fields.get("fields")
        if not isinstance(raw_fields, list):
            raw_fields = []
        card_fields = [
            field
            for field in raw_fields
            if isinstance(field, dict) and isinstance(field.get("name"), str)
        ]
        return {**data, "card_fields": card_fields}
