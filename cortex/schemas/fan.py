import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from cortex.schemas.labels import PURCHASE_KINDS
from cortex.utils.timestamps import finite_or_zero, parse_date, timestamp_from_id


def _optional_finite(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    sender: str = Field(default="", validation_alias=AliasChoices("from", "sender"))
    text: str = ""
    kind: Optional[str] = None
    intent_key: Optional[str] = None
    intent_confidence: Optional[float] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value: Any) -> Optional[datetime]:
        return parse_date(value)

    @field_validator("sender", mode="before")
    @classmethod
    def normalize_sender(cls, value: Any) -> str:
        return (value or "").strip().lower() if isinstance(value, str) else ""

    @field_validator("text", mode="before")
    @classmethod
    def normalize_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("intent_confidence", mode="before")
    @classmethod
    def drop_non_finite(cls, value: Any) -> Any:
        return _optional_finite(value)

    @property
    def is_fan(self) -> bool:
        return self.sender == "fan"

    @property
    def is_creator(self) -> bool:
        return self.sender == "creator"

    def timestamp(self) -> Optional[datetime]:
        if self.created_at is not None:
            return self.created_at
        return timestamp_from_id(self.id)


class Purchase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    created_at: datetime
    amount: float = 0.0
    kind: str = "EXTRA"

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value: Any) -> Any:
        parsed = parse_date(value)
        return parsed if parsed is not None else value

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, value: Any) -> float:
        return finite_or_zero(value)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, value: Any) -> str:
        kind = value.strip().upper() if isinstance(value, str) else ""
        return kind if kind in PURCHASE_KINDS else "EXTRA"


_DATETIME_FIELDS = (
    "last_seen_at",
    "next_action_at",
    "last_inbound_at",
    "last_purchase_at",
)


class FanSnapshot(BaseModel):
    """Flat bag of fan attributes read from one consistent snapshot."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    days_left: Optional[int] = None
    last_seen_at: Optional[datetime] = None
    extras_count: int = 0
    extras_spent_total: float = 0.0
    lifetime_spend: float = Field(
        default=0.0,
        validation_alias=AliasChoices("lifetime_spend", "lifetime_value"),
    )
    active_grant_types: List[str] = Field(default_factory=list)
    follow_up_tag: Optional[str] = None
    is_new: Optional[bool] = None
    is_high_priority: bool = False
    customer_tier: Optional[str] = None
    membership_status: Optional[str] = None

    last_intent_key: Optional[str] = None
    next_action: Optional[str] = None
    next_action_note: Optional[str] = None
    next_action_at: Optional[datetime] = None

    last_inbound_at: Optional[datetime] = None
    last_inbound_text: Optional[str] = None
    last_purchase_at: Optional[datetime] = None

    language: Optional[str] = None
    preferred_language: Optional[str] = None
    locale: Optional[str] = None

    temperature_bucket: Optional[str] = None
    temperature_score: Optional[float] = None
    heat_score: Optional[float] = None

    messages: List[Message] = Field(default_factory=list)

    @field_validator(*_DATETIME_FIELDS, mode="before")
    @classmethod
    def parse_datetimes(cls, value: Any) -> Optional[datetime]:
        return parse_date(value)

    @field_validator("extras_count", mode="before")
    @classmethod
    def normalize_count(cls, value: Any) -> int:
        return int(finite_or_zero(value))

    @field_validator("extras_spent_total", "lifetime_spend", mode="before")
    @classmethod
    def normalize_money(cls, value: Any) -> float:
        return finite_or_zero(value)

    @field_validator("days_left", mode="before")
    @classmethod
    def normalize_days_left(cls, value: Any) -> Any:
        value = _optional_finite(value)
        if isinstance(value, float):
            return math.floor(value)
        return value

    @field_validator("temperature_score", "heat_score", mode="before")
    @classmethod
    def normalize_scores(cls, value: Any) -> Any:
        return _optional_finite(value)

    @field_validator("active_grant_types", mode="before")
    @classmethod
    def normalize_grants(cls, value: Any) -> List[str]:
        if not value:
            return []
        return [str(t or "").lower() for t in value]

    @field_validator("customer_tier", mode="before")
    @classmethod
    def normalize_tier(cls, value: Any) -> Optional[str]:
        return value.strip().lower() if isinstance(value, str) else None
