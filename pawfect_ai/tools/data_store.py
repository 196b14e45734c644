"""
Data Store Interface

Async record access the trust, slot and booking components depend on.
Implementations: BackendDataStore (HTTP backend) and InMemoryDataStore.

Error contract:
- unknown record id -> NotFoundError
- any read/write failure -> DataUnavailableError
"""

from datetime import datetime
from typing import Any, Dict, List, Protocol, runtime_checkable

from pawfect_ai.schemas.booking import Booking, BookingDraft, BookingStatus
from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import HistoricalBooking


@runtime_checkable
class DataStore(Protocol):

    async def get_sitter(self, sitter_id: str) -> SitterRecord:
        ...

    async def get_bookings_for_sitter(
        self, sitter_id: str, start: datetime, end: datetime
    ) -> List[Booking]:
        """Bookings of any status for the sitter that overlap [start, end)."""
        ...

    async def get_bookings_for_pet_sitter_pair(
        self, pet_id: str, sitter_id: str
    ) -> List[HistoricalBooking]:
        ...

    async def create_booking(self, draft: BookingDraft) -> Booking:
        ...

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        ...

    async def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> Booking:
        ...

    async def get_booking(self, booking_id: str) -> Booking:
        ...

    async def get_pets_by_owner(self, owner_id: str) -> List[Pet]:
        ...

    async def get_pet(self, pet_id: str) -> Pet:
        ...
