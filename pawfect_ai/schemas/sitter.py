"""
Sitter Schemas

Read-only view of a sitter record as stored by the marketplace backend.

Parsing is lenient: missing, null or malformed values fall back to the field
default (0 for counts and rates, False for flags, empty for lists) so that
feature extraction never fails on a partially filled profile.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pawfect_ai.schemas.booking import as_utc


class Review(BaseModel):
    """Single owner review of a sitter."""
    text: str = Field("", description="Review body")
    rating: Optional[float] = Field(None, description="Star rating (0-5)")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def accept_comment_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("text") and data.get("comment"):
            data = {**data, "text": data["comment"]}
        return data

    @field_validator("text", mode="before")
    @classmethod
    def text_or_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("rating", mode="before")
    @classmethod
    def rating_or_none(cls, value: Any) -> Optional[float]:
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None


class SitterBooking(BaseModel):
    """Past booking entry on a sitter profile, used for consistency analysis."""
    id: Optional[str] = None
    start_time: datetime = Field(..., description="Booking start")
    end_time: Optional[datetime] = Field(None, description="Booking end")
    status: str = Field("completed", description="Outcome status (lowercase)")

    model_config = ConfigDict(extra="allow")

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def is_completed(self) -> bool:
        return self.status.lower() == "completed"


class WorkingHours(BaseModel):
    """Daily open/close hours a sitter accepts bookings in."""
    open_hour: int = Field(..., ge=0, le=23)
    close_hour: int = Field(..., ge=1, le=24)

    @model_validator(mode="after")
    def open_before_close(self) -> "WorkingHours":
        if self.open_hour >= self.close_hour:
            raise ValueError("open_hour must precede close_hour")
        return self


def _parse_items(model: type, value: Any) -> list:
    """Validate each list entry, dropping the ones that do not parse."""
    if not isinstance(value, list):
        return []
    parsed = []
    for item in value:
        try:
            parsed.append(model.model_validate(item))
        except ValueError:
            continue
    return parsed


_NUMERIC_FIELDS = (
    "response_time_hours",
    "completion_rate",
    "experience_years",
    "on_time_rate",
    "cancellation_rate",
    "communication_score",
)


class SitterRecord(BaseModel):
    """
    Sitter identity plus aggregate performance fields.

    Rates:
    - completion_rate is a percentage (0-100)
    - on_time_rate and cancellation_rate are fractions (0-1)
    - communication_score is on a 0-5 scale
    """
    id: str = Field(..., description="Sitter identifier")
    name: Optional[str] = None
    reviews: List[Review] = Field(default_factory=list)
    bookings: List[SitterBooking] = Field(default_factory=list, description="Past bookings")
    total_bookings: Optional[int] = Field(None, description="Stored booking count")
    avg_rating: Optional[float] = Field(None, description="Stored average rating")
    response_time_hours: float = 0.0
    completion_rate: float = 0.0
    verification_status: bool = False
    background_check: bool = False
    insurance: bool = False
    certifications: List[str] = Field(default_factory=list)
    emergency_contacts: List[str] = Field(default_factory=list)
    experience_years: float = 0.0
    on_time_rate: float = 0.0
    cancellation_rate: float = 0.0
    communication_score: float = 0.0
    hourly_rate: Optional[float] = Field(None, ge=0)
    working_hours: Optional[WorkingHours] = None

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def lenient_number(cls, value: Any) -> float:
        if isinstance(value, bool):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("verification_status", "background_check", "insurance", mode="before")
    @classmethod
    def lenient_flag(cls, value: Any) -> bool:
        return value is True

    @field_validator("certifications", "emergency_contacts", mode="before")
    @classmethod
    def lenient_str_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("reviews", mode="before")
    @classmethod
    def lenient_reviews(cls, value: Any) -> List[Review]:
        return _parse_items(Review, value)

    @field_validator("bookings", mode="before")
    @classmethod
    def lenient_bookings(cls, value: Any) -> List[SitterBooking]:
        return _parse_items(SitterBooking, value)

    @field_validator("total_bookings", mode="before")
    @classmethod
    def lenient_count(cls, value: Any) -> Optional[int]:
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return None

    @field_validator("avg_rating", mode="before")
    @classmethod
    def lenient_rating(cls, value: Any) -> Optional[float]:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("working_hours", mode="before")
    @classmethod
    def lenient_hours(cls, value: Any) -> Any:
        if isinstance(value, dict):
            try:
                return WorkingHours(**value)
            except ValueError:
                return None
        return value

    @property
    def booking_count(self) -> int:
        """Stored total, or the number of listed bookings when none is stored."""
        if self.total_bookings is not None:
            return self.total_bookings
        return len(self.bookings)

    @property
    def average_rating(self) -> float:
        """Stored average, or the mean of rated reviews, or 0."""
        if self.avg_rating is not None:
            return self.avg_rating
        ratings = [r.rating for r in self.reviews if r.rating is not None]
        if not ratings:
            return 0.0
        return sum(ratings) / len(ratings)
