"""
Availability Index

Answers "is sitter S free for [start, end)?" and enumerates free windows per
day. Only CONFIRMED and IN_PROGRESS bookings block the calendar.

is_available always reads the data store. free_windows may be served from an
AvailabilityCache, which booking writes invalidate per sitter.

Instants are compared as naive UTC; aware arguments are converted first.
"""

import logging
import time
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from pawfect_ai.algorithms.availability import day_bounds, days_in_range, free_intervals, overlapping, overlaps
from pawfect_ai.core.config import settings
from pawfect_ai.core.errors import ValidationError
from pawfect_ai.schemas.booking import Booking, TimeRange, as_utc
from pawfect_ai.schemas.slots import AvailabilityWindow
from pawfect_ai.services.signals import fetch_required
from pawfect_ai.tools.data_store import DataStore

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, date, date]


class AvailabilityCache:
    """
    TTL cache of free-window lookups keyed by (sitter_id, start_date, end_date).

    Owned by whoever builds the services and passed by reference to every
    component that reads or writes a sitter's calendar.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.AVAILABILITY_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, List[AvailabilityWindow]]] = {}

    def get(self, key: CacheKey) -> Optional[List[AvailabilityWindow]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, windows = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return [w.model_copy(deep=True) for w in windows]

    def put(self, key: CacheKey, windows: List[AvailabilityWindow]) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries[key] = (self._clock(), [w.model_copy(deep=True) for w in windows])

    def invalidate_sitter(self, sitter_id: str) -> None:
        stale = [key for key in self._entries if key[0] == sitter_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached availability entries for sitter {sitter_id}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class AvailabilityIndex:
    """Conflict detection and free-window enumeration for sitters."""

    def __init__(
        self,
        store: DataStore,
        cache: Optional[AvailabilityCache] = None,
        default_open_hour: Optional[int] = None,
        default_close_hour: Optional[int] = None
    ):
        self.store = store
        self.cache = cache
        self.default_open_hour = settings.DEFAULT_OPEN_HOUR if default_open_hour is None else default_open_hour
        self.default_close_hour = settings.DEFAULT_CLOSE_HOUR if default_close_hour is None else default_close_hour

    async def blocking_bookings(self, sitter_id: str, start: datetime, end: datetime) -> List[Booking]:
        """CONFIRMED / IN_PROGRESS bookings of the sitter overlapping [start, end), by start."""
        bookings = await fetch_required(
            self.store.get_bookings_for_sitter(sitter_id, as_utc(start), as_utc(end)), "sitter bookings"
        )
        return sorted((b for b in bookings if b.is_blocking), key=lambda b: b.start_time)

    async def find_conflict(
        self,
        sitter_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None
    ) -> Optional[Booking]:
        """First blocking booking overlapping [start, end), ignoring `exclude_booking_id`."""
        start, end = as_utc(start), as_utc(end)
        if start >= end:
            raise ValidationError("Start time must be before end time")

        for booking in await self.blocking_bookings(sitter_id, start, end):
            if booking.id == exclude_booking_id:
                continue
            if overlaps(booking.start_time, booking.end_time, start, end):
                return booking
        return None

    async def is_available(
        self,
        sitter_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None
    ) -> bool:
        """
        False iff a blocking booking satisfies existing.start < end and existing.end > start.

        Raises:
            ValidationError: start is not before end.
            DataUnavailableError: bookings could not be read.
        """
        return await self.find_conflict(sitter_id, start, end, exclude_booking_id) is None

    async def free_windows(self, sitter_id: str, start_date: date, end_date: date) -> List[AvailabilityWindow]:
        """
        One AvailabilityWindow per day in [start_date, end_date].

        Open hours come from the sitter's working hours, else the configured
        default preference window.
        """
        if end_date < start_date:
            raise ValidationError("End date must not precede start date")

        key = (sitter_id, start_date, end_date)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Availability cache hit for sitter {sitter_id}")
                return cached

        sitter = await fetch_required(self.store.get_sitter(sitter_id), "sitter")
        if sitter.working_hours is not None:
            open_hour, close_hour = sitter.working_hours.open_hour, sitter.working_hours.close_hour
        else:
            open_hour, close_hour = self.default_open_hour, self.default_close_hour

        range_start = datetime.combine(start_date, datetime.min.time())
        range_end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        bookings = await self.blocking_bookings(sitter_id, range_start, range_end)
        busy = [b.time_range for b in bookings]

        windows = []
        for day in days_in_range(start_date, end_date):
            opening, closing = day_bounds(day, open_hour, close_hour)
            day_start, day_end = day_bounds(day, 0, 24)
            windows.append(AvailabilityWindow(
                sitter_id=sitter_id,
                date=day.isoformat(),
                open_hour=open_hour,
                close_hour=close_hour,
                existing_bookings=overlapping(busy, day_start, day_end),
                free_slots=free_intervals(opening, closing, busy),
            ))

        if self.cache is not None:
            self.cache.put(key, windows)

        return windows

    def invalidate(self, sitter_id: str) -> None:
        if self.cache is not None:
            self.cache.invalidate_sitter(sitter_id)

    @staticmethod
    def as_ranges(bookings: List[Booking]) -> List[TimeRange]:
        return [b.time_range for b in bookings]
