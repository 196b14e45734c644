"""
Booking Schemas

Booking records, their status enum and the request bodies of the booking API.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Bookings in these states occupy the sitter's calendar
BLOCKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS})


def _unique_ids(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return list(dict.fromkeys(str(item) for item in value))
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Naive UTC form of an instant.

    Aware values are converted to UTC and stripped of their offset; naive
    values are taken to be UTC already. Every stored and compared instant
    goes through here, so naive and aware datetimes never meet.
    """
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TimeRange(BaseModel):
    """Half-open interval [start, end)."""
    start: datetime
    end: datetime

    @field_validator("start", "end", mode="after")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingDraft(BaseModel):
    """Fields of a booking about to be persisted; the store assigns the id."""
    owner_id: str
    sitter_id: str
    pet_ids: List[str] = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    status: BookingStatus = BookingStatus.PENDING
    total_amount: float = Field(..., ge=0)
    hourly_rate: float = Field(..., ge=0)
    special_instructions: Optional[str] = None
    ai_optimized: bool = False

    @field_validator("pet_ids", mode="before")
    @classmethod
    def dedupe_pet_ids(cls, value: Any) -> Any:
        return _unique_ids(value)

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def start_before_end(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must precede end_time")
        return self


class Booking(BookingDraft):
    """Persisted booking."""
    id: str = Field(..., description="Booking identifier")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    model_config = ConfigDict(extra="allow")

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES


# ==================== Request Bodies ====================

class CreateBookingRequest(BaseModel):
    """POST /api/bookings body. Time-range ordering is checked by the lifecycle."""
    owner_id: str = Field(..., min_length=1)
    sitter_id: str = Field(..., min_length=1)
    pet_ids: List[str] = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    hourly_rate: Optional[float] = Field(None, ge=0)
    special_instructions: Optional[str] = None
    ai_optimized: bool = False

    @field_validator("pet_ids", mode="before")
    @classmethod
    def dedupe_pet_ids(cls, value: Any) -> Any:
        return _unique_ids(value)

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class UpdateStatusRequest(BaseModel):
    status: BookingStatus


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class RescheduleRequest(BaseModel):
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


def booking_event_payload(booking: Booking, **extra: Any) -> Dict[str, Any]:
    """Notification payload describing a booking."""
    payload = {
        "booking_id": booking.id,
        "owner_id": booking.owner_id,
        "sitter_id": booking.sitter_id,
        "status": booking.status.value,
        "start_time": booking.start_time.isoformat(),
        "end_time": booking.end_time.isoformat(),
        "total_amount": booking.total_amount,
    }
    payload.update(extra)
    return payload
