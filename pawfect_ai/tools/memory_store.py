"""
In-Memory Data Store

Dict-backed DataStore for local runs and tests. Records are copied on the way
in and out so callers never share mutable state with the store.
"""

import asyncio
import itertools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pawfect_ai.algorithms.availability import overlaps
from pawfect_ai.core.errors import NotFoundError
from pawfect_ai.schemas.booking import Booking, BookingDraft, BookingStatus
from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import HistoricalBooking

logger = logging.getLogger(__name__)


class InMemoryDataStore:
    """
    DataStore kept in process memory.

    Args:
        io_delay: Seconds each call sleeps before answering, to let tests
            interleave concurrent operations.
    """

    def __init__(
        self,
        sitters: Iterable[SitterRecord] = (),
        pets: Iterable[Pet] = (),
        bookings: Iterable[Booking] = (),
        io_delay: float = 0.0
    ):
        self.sitters: Dict[str, SitterRecord] = {s.id: s for s in sitters}
        self.pets: Dict[str, Pet] = {p.id: p for p in pets}
        self.bookings: Dict[str, Booking] = {b.id: b for b in bookings}
        self.history: Dict[tuple, List[HistoricalBooking]] = {}
        self.io_delay = io_delay
        self._ids = itertools.count(len(self.bookings) + 1)

    async def _pause(self) -> None:
        # sleep(0) still yields to other tasks
        await asyncio.sleep(self.io_delay)

    # ==================== Seeding ====================

    def add_sitter(self, sitter: SitterRecord) -> None:
        self.sitters[sitter.id] = sitter

    def add_pet(self, pet: Pet) -> None:
        self.pets[pet.id] = pet

    def add_booking(self, booking: Booking) -> None:
        self.bookings[booking.id] = booking

    def add_history(self, pet_id: str, sitter_id: str, outcomes: Iterable[HistoricalBooking]) -> None:
        self.history.setdefault((pet_id, sitter_id), []).extend(outcomes)

    # ==================== Reads ====================

    async def get_sitter(self, sitter_id: str) -> SitterRecord:
        await self._pause()
        if sitter_id not in self.sitters:
            raise NotFoundError("Sitter not found", details={"sitter_id": sitter_id})
        return self.sitters[sitter_id].model_copy(deep=True)

    async def get_bookings_for_sitter(
        self, sitter_id: str, start: datetime, end: datetime
    ) -> List[Booking]:
        await self._pause()
        found = [
            b.model_copy(deep=True) for b in self.bookings.values()
            if b.sitter_id == sitter_id and overlaps(b.start_time, b.end_time, start, end)
        ]
        return sorted(found, key=lambda b: b.start_time)

    async def get_bookings_for_pet_sitter_pair(
        self, pet_id: str, sitter_id: str
    ) -> List[HistoricalBooking]:
        await self._pause()
        return [h.model_copy() for h in self.history.get((pet_id, sitter_id), [])]

    async def get_booking(self, booking_id: str) -> Booking:
        await self._pause()
        return self._require_booking(booking_id).model_copy(deep=True)

    async def get_pets_by_owner(self, owner_id: str) -> List[Pet]:
        await self._pause()
        return [p.model_copy(deep=True) for p in self.pets.values() if p.owner_id == owner_id]

    async def get_pet(self, pet_id: str) -> Pet:
        await self._pause()
        if pet_id not in self.pets:
            raise NotFoundError("Pet not found", details={"pet_id": pet_id})
        return self.pets[pet_id].model_copy(deep=True)

    # ==================== Writes ====================

    async def create_booking(self, draft: BookingDraft) -> Booking:
        await self._pause()
        now = datetime.now(timezone.utc)
        booking = Booking(
            **draft.model_dump(),
            id=f"bk-{next(self._ids)}",
            created_at=now,
            updated_at=now,
        )
        self.bookings[booking.id] = booking
        logger.debug(f"Stored booking {booking.id}")
        return booking.model_copy(deep=True)

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        return await self.update_booking(booking_id, {"status": status})

    async def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> Booking:
        await self._pause()
        current = self._require_booking(booking_id)
        data = current.model_dump()
        data.update(fields)
        data["updated_at"] = datetime.now(timezone.utc)
        updated = Booking.model_validate(data)
        self.bookings[booking_id] = updated
        return updated.model_copy(deep=True)

    def _require_booking(self, booking_id: str) -> Booking:
        booking: Optional[Booking] = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"booking_id": booking_id})
        return booking
