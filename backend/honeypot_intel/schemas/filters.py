# backend/honeypot_intel/schemas/filters.py
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TimePreset(str, Enum):
    LAST_15M = "15m"
    LAST_1H = "1h"
    LAST_24H = "24h"
    LAST_7D = "7d"
    LAST_14D = "14d"
    LAST_30D = "30d"
    ALL = "all"
    CUSTOM = "custom"


class TimeRange(BaseModel):
    """Inclusive [from, to] window. Naive datetimes are taken as UTC."""
    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(..., alias="from")
    to: datetime
    preset: Optional[TimePreset] = None

    @field_validator("from_", "to")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def span_seconds(self) -> float:
        return (self.to - self.from_).total_seconds()


class Filters(BaseModel):
    """
    Conjunction of disjunctions: values inside one list are OR-ed, fields
    are AND-ed. Empty lists / empty strings mean "no constraint".
    """
    sensors: List[str] = Field(default_factory=list)
    protocols: List[str] = Field(default_factory=list)
    countries: List[str] = Field(
        default_factory=list,
        description="ISO2, ISO3 or country names; normalized at match time.",
    )
    event_types: List[str] = Field(default_factory=list)

    ip_address: Optional[str] = None
    username_query: Optional[str] = None
    password_query: Optional[str] = None
    # Deprecated: combined username/password substring, kept for old clients
    credentials_query: Optional[str] = None
    query: Optional[str] = None

    @field_validator("sensors", "protocols", "countries", "event_types")
    @classmethod
    def _drop_blank(cls, values: List[str]) -> List[str]:
        # `?sensors=` arrives as [""]; a blank value is no constraint
        return [v.strip() for v in values if v and v.strip()]

    @property
    def has_user_filters(self) -> bool:
        return bool(self.countries or self.sensors or self.protocols or self.query)
