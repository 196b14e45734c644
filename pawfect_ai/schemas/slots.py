"""
Slot Schemas

Owner preferences, booking history, candidate time slots and sitter
availability windows.

Dates are ISO "YYYY-MM-DD" strings and times are "HH:MM" strings, the same
shape the external suggestion provider answers in.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pawfect_ai.schemas.booking import TimeRange, as_utc


class SlotSource(str, Enum):
    HISTORICAL = "historical"
    EXTERNAL_INSIGHT = "external-insight"
    FALLBACK = "fallback"


PreferredTime = Literal["morning", "afternoon", "evening", "flexible"]


class OwnerPreferences(BaseModel):
    """
    Owner constraints applied to candidate slots.

    duration accepts a number of hours or a string such as "8 hours".
    """
    duration: Optional[float] = Field(None, gt=0, le=24, description="Requested duration in hours")
    preferred_time: Optional[PreferredTime] = Field(None, description="Preferred start band")
    budget: Optional[float] = Field(None, ge=0)
    special_requirements: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, value: Any) -> Any:
        if isinstance(value, str):
            match = re.match(r"\s*(\d+(?:\.\d+)?)", value)
            return float(match.group(1)) if match else None
        return value

    @field_validator("preferred_time", mode="before")
    @classmethod
    def normalize_preferred_time(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


class HistoricalBooking(BaseModel):
    """Outcome of a past booking between one pet and one sitter."""
    start_time: datetime
    duration_hours: float = Field(..., ge=0)
    success: bool = Field(..., description="Booking completed without incident")
    rating: Optional[float] = Field(None, ge=0, le=5)

    @field_validator("start_time", mode="after")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def start_hour(self) -> int:
        return self.start_time.hour

    @property
    def day_of_week(self) -> int:
        """Monday is 0."""
        return self.start_time.weekday()


START_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
END_TIME_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"


class ExternalSlotSuggestion(BaseModel):
    """
    Slot proposed by the external insight provider.

    Times are wall-clock HH:MM (hours 00-23, minutes 00-59); an end of
    24:00 means the following midnight.
    """
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    start_time: str = Field(..., pattern=START_TIME_PATTERN)
    end_time: str = Field(..., pattern=END_TIME_PATTERN)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""

    @field_validator("date", mode="after")
    @classmethod
    def calendar_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value


class TimeSlotCandidate(BaseModel):
    """Scored, dated window proposed for a booking."""
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    duration_hours: float = Field(..., ge=0)
    score: float = Field(..., ge=0.0, le=1.0)
    source: SlotSource
    reasoning: str = ""

    @property
    def start_hour(self) -> int:
        return int(self.start_time.split(":")[0])

    @property
    def end_hour(self) -> int:
        return int(self.end_time.split(":")[0])

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time)


def minutes_of_day(hhmm: str) -> int:
    """Minutes since midnight of an "HH:MM" string; "24:00" is 1440."""
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


class RankedTimeSlot(TimeSlotCandidate):
    rank: int = Field(..., ge=1)
    confidence: Literal["high", "medium", "low"]


class SlotSuggestionResult(BaseModel):
    """Ranked suggestions for one pet/sitter pair."""
    pet_id: str
    sitter_id: str
    suggestions: List[RankedTimeSlot] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    factors: List[str] = Field(default_factory=list)
    generated_at: datetime


class AvailabilityWindow(BaseModel):
    """
    One day of a sitter's calendar.

    existing_bookings are the blocking bookings overlapping the day, ordered
    by start; free_slots are the open-hour intervals not covered by them.
    """
    sitter_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    open_hour: int = Field(..., ge=0, le=23)
    close_hour: int = Field(..., ge=1, le=24)
    existing_bookings: List[TimeRange] = Field(default_factory=list)
    free_slots: List[TimeRange] = Field(default_factory=list)


class SlotSuggestRequest(BaseModel):
    """POST /api/slots/suggest body."""
    pet_id: str = Field(..., min_length=1)
    sitter_id: str = Field(..., min_length=1)
    preferences: OwnerPreferences = Field(default_factory=OwnerPreferences)
    date_range_days: int = Field(7, ge=1, le=31)
