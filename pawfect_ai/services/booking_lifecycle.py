"""
Booking Lifecycle

State machine for booking status plus the authorization rules for who may
move a booking along it.

    PENDING     -> CONFIRMED, CANCELLED
    CONFIRMED   -> IN_PROGRESS, CANCELLED
    IN_PROGRESS -> COMPLETED
    COMPLETED   -> (terminal)
    CANCELLED   -> (terminal)

Every write holds the sitter's lock from the moment the booking or calendar is
read until the store write returns, so a status change is applied to the
status it was checked against.
The lock is per process; several processes still need an exclusion
constraint in the data store.

Notifications are sent after the write and never fail the operation.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from pawfect_ai.constants.roles import ADMIN, ANON, normalize_role
from pawfect_ai.core.config import settings
from pawfect_ai.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from pawfect_ai.schemas.booking import Booking, BookingDraft, BookingStatus, as_utc, booking_event_payload
from pawfect_ai.services.availability import AvailabilityIndex
from pawfect_ai.services.signals import fetch_required
from pawfect_ai.tools.data_store import DataStore
from pawfect_ai.tools.notifier import (
    BOOKING_CANCELLED,
    BOOKING_CREATED,
    BOOKING_RESCHEDULED,
    BOOKING_STATUS_UPDATED,
    Notifier,
)

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

CANCELLABLE = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
RESCHEDULABLE = CANCELLABLE


def is_valid_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return new in TRANSITIONS.get(current, frozenset())


def compute_total_amount(
    hourly_rate: float,
    start: datetime,
    end: datetime,
    pet_count: int,
    ai_optimized: bool = False
) -> float:
    """hourly rate x hours x max(1, pets), times the AI discount when requested."""
    hours = (end - start).total_seconds() / 3600
    amount = hourly_rate * hours * max(1, pet_count)
    if ai_optimized:
        amount *= settings.AI_DISCOUNT_FACTOR
    return round(amount, 2)


class SitterLockRegistry:
    """One asyncio.Lock per sitter id, shared by every lifecycle instance it is passed to."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock_for(self, sitter_id: str) -> asyncio.Lock:
        lock = self._locks.get(sitter_id)
        if lock is None:
            lock = self._locks[sitter_id] = asyncio.Lock()
        return lock


class BookingLifecycle:

    def __init__(
        self,
        store: DataStore,
        availability: AvailabilityIndex,
        notifier: Optional[Notifier] = None,
        locks: Optional[SitterLockRegistry] = None
    ):
        self.store = store
        self.availability = availability
        self.notifier = notifier
        self.locks = locks or SitterLockRegistry()

    # ==================== Helpers ====================

    async def _load(self, booking_id: str) -> Booking:
        if not booking_id:
            raise ValidationError("booking_id is required")
        return await fetch_required(self.store.get_booking(booking_id), "booking")

    @staticmethod
    def _is_party(booking: Booking, actor_id: str, actor_role: Optional[str]) -> bool:
        role = normalize_role(actor_role)
        if role == ADMIN:
            return True
        if role == ANON:
            return False
        return bool(actor_id) and actor_id in (booking.owner_id, booking.sitter_id)

    def _authorize(self, booking: Booking, actor_id: str, actor_role: Optional[str], action: str) -> None:
        if not self._is_party(booking, actor_id, actor_role):
            logger.warning(f"Actor {actor_id} ({actor_role}) denied {action} on booking {booking.id}")
            raise ForbiddenError(f"You do not have permission to {action} this booking")

    def _authorize_cancel(self, booking: Booking, actor_id: str, actor_role: Optional[str]) -> None:
        self._authorize(booking, actor_id, actor_role, "cancel")
        is_admin = normalize_role(actor_role) == ADMIN
        if not is_admin and actor_id == booking.sitter_id and actor_id != booking.owner_id:
            if booking.status != BookingStatus.PENDING:
                raise ForbiddenError("Sitters may only cancel bookings that are still pending")

    @staticmethod
    def _recipients(booking: Booking, actor_id: str, actor_role: Optional[str]) -> List[str]:
        """Counterparty of the actor; both parties when an admin acts."""
        if actor_id == booking.owner_id:
            return [booking.sitter_id]
        if actor_id == booking.sitter_id:
            return [booking.owner_id]
        return [booking.owner_id, booking.sitter_id]

    async def _notify(self, event: str, recipients: Iterable[str], payload: Dict[str, Any]) -> None:
        if self.notifier is None:
            return
        for recipient in recipients:
            try:
                await self.notifier.send(event, recipient, payload)
            except Exception as e:
                logger.warning(f"Notification {event} to {recipient} failed: {type(e).__name__}: {e}")

    async def _ensure_free(
        self,
        sitter_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None
    ) -> None:
        conflict = await self.availability.find_conflict(sitter_id, start, end, exclude_booking_id)
        if conflict is not None:
            logger.info(f"Sitter {sitter_id} busy {start.isoformat()}-{end.isoformat()} (booking {conflict.id})")
            raise ConflictError(
                "Sitter is not available for the selected time",
                details={"sitter_id": sitter_id, "conflicting_booking_id": conflict.id},
            )

    # ==================== Operations ====================

    async def create(
        self,
        owner_id: str,
        sitter_id: str,
        pet_ids: List[str],
        start: datetime,
        end: datetime,
        hourly_rate: Optional[float] = None,
        special_instructions: Optional[str] = None,
        ai_optimized: bool = False
    ) -> Booking:
        """
        Create a PENDING booking.

        Raises:
            ValidationError: missing ids, bad time range, or pets not owned by the owner.
            ConflictError: the sitter has a confirmed/in-progress booking overlapping the range.
            NotFoundError / DataUnavailableError: store failures.
        """
        if not owner_id or not sitter_id:
            raise ValidationError("owner_id and sitter_id are required")
        pet_ids = list(dict.fromkeys(pet_ids or []))
        if not pet_ids:
            raise ValidationError("At least one pet is required")
        start, end = as_utc(start), as_utc(end)
        if start >= end:
            raise ValidationError("Start time must be before end time")
        if hourly_rate is not None and hourly_rate < 0:
            raise ValidationError("hourly_rate must not be negative")

        pets = await fetch_required(self.store.get_pets_by_owner(owner_id), "owner pets")
        owned = {pet.id for pet in pets}
        foreign = [pet_id for pet_id in pet_ids if pet_id not in owned]
        if foreign:
            raise ValidationError("Pets do not belong to this owner", details={"pet_ids": foreign})

        if hourly_rate is None:
            sitter = await fetch_required(self.store.get_sitter(sitter_id), "sitter")
            hourly_rate = sitter.hourly_rate if sitter.hourly_rate is not None else settings.DEFAULT_HOURLY_RATE

        draft = BookingDraft(
            owner_id=owner_id,
            sitter_id=sitter_id,
            pet_ids=pet_ids,
            start_time=start,
            end_time=end,
            status=BookingStatus.PENDING,
            total_amount=compute_total_amount(hourly_rate, start, end, len(pet_ids), ai_optimized),
            hourly_rate=hourly_rate,
            special_instructions=special_instructions,
            ai_optimized=ai_optimized,
        )

        async with self.locks.lock_for(sitter_id):
            await self._ensure_free(sitter_id, start, end)
            booking = await fetch_required(self.store.create_booking(draft), "new booking")
            self.availability.invalidate(sitter_id)

        logger.info(f"Booking {booking.id} created for sitter {sitter_id} by owner {owner_id}, amount {booking.total_amount}")
        await self._notify(BOOKING_CREATED, [sitter_id], booking_event_payload(booking))
        return booking

    async def get(self, booking_id: str, actor_id: str, actor_role: Optional[str]) -> Booking:
        booking = await self._load(booking_id)
        self._authorize(booking, actor_id, actor_role, "view")
        return booking

    async def update_status(
        self,
        booking_id: str,
        actor_id: str,
        actor_role: Optional[str],
        new_status: Union[BookingStatus, str]
    ) -> Booking:
        """
        Move a booking along the transition table.

        Confirming re-checks the sitter's calendar, since pending bookings do
        not block it.

        Raises:
            ForbiddenError: actor is not a party or admin.
            InvalidTransitionError: transition not in the table; state unchanged.
            ConflictError: confirming would double-book the sitter.
        """
        try:
            new_status = BookingStatus(str(getattr(new_status, "value", new_status)).upper())
        except ValueError:
            raise ValidationError(f"Unknown booking status: {new_status}")

        if new_status == BookingStatus.CANCELLED:
            return await self.cancel(booking_id, actor_id, actor_role)

        booking = await self._load(booking_id)
        self._authorize(booking, actor_id, actor_role, "update")

        async with self.locks.lock_for(booking.sitter_id):
            booking = await self._load(booking_id)
            if not is_valid_transition(booking.status, new_status):
                raise InvalidTransitionError(
                    f"Cannot move booking from {booking.status.value} to {new_status.value}",
                    details={"booking_id": booking.id, "from": booking.status.value, "to": new_status.value},
                )
            if new_status == BookingStatus.CONFIRMED:
                await self._ensure_free(booking.sitter_id, booking.start_time, booking.end_time, booking.id)
            updated = await fetch_required(self.store.update_booking_status(booking.id, new_status), "booking")
            self.availability.invalidate(booking.sitter_id)

        logger.info(f"Booking {booking.id} moved {booking.status.value} -> {new_status.value} by {actor_id}")
        await self._notify(
            BOOKING_STATUS_UPDATED,
            self._recipients(booking, actor_id, actor_role),
            booking_event_payload(updated, previous_status=booking.status.value),
        )
        return updated

    async def cancel(
        self,
        booking_id: str,
        actor_id: str,
        actor_role: Optional[str],
        reason: Optional[str] = None
    ) -> Booking:
        """Cancel a PENDING or CONFIRMED booking. Sitters may cancel only while PENDING."""
        booking = await self._load(booking_id)
        self._authorize(booking, actor_id, actor_role, "cancel")

        async with self.locks.lock_for(booking.sitter_id):
            booking = await self._load(booking_id)
            self._authorize_cancel(booking, actor_id, actor_role)
            if booking.status not in CANCELLABLE:
                raise InvalidTransitionError(
                    "Booking cannot be cancelled at this time",
                    details={"booking_id": booking.id, "from": booking.status.value, "to": BookingStatus.CANCELLED.value},
                )
            updated = await fetch_required(
                self.store.update_booking(
                    booking.id, {"status": BookingStatus.CANCELLED, "cancellation_reason": reason}
                ),
                "booking",
            )
            self.availability.invalidate(booking.sitter_id)

        logger.info(f"Booking {booking.id} cancelled by {actor_id}")
        await self._notify(
            BOOKING_CANCELLED,
            self._recipients(booking, actor_id, actor_role),
            booking_event_payload(updated, previous_status=booking.status.value, reason=reason),
        )
        return updated

    async def reschedule(
        self,
        booking_id: str,
        actor_id: str,
        actor_role: Optional[str],
        start: datetime,
        end: datetime
    ) -> Booking:
        """
        Move a PENDING or CONFIRMED booking to a new time range.

        Uses the same overlap check as create, ignoring the booking itself, and
        recomputes the total from the stored hourly rate and pet count.
        """
        start, end = as_utc(start), as_utc(end)
        if start >= end:
            raise ValidationError("Start time must be before end time")

        booking = await self._load(booking_id)
        self._authorize(booking, actor_id, actor_role, "reschedule")

        async with self.locks.lock_for(booking.sitter_id):
            booking = await self._load(booking_id)
            if booking.status not in RESCHEDULABLE:
                raise InvalidTransitionError(
                    "Only pending or confirmed bookings can be rescheduled",
                    details={"booking_id": booking.id, "status": booking.status.value},
                )
            total = compute_total_amount(booking.hourly_rate, start, end, len(booking.pet_ids), booking.ai_optimized)
            await self._ensure_free(booking.sitter_id, start, end, booking.id)
            updated = await fetch_required(
                self.store.update_booking(
                    booking.id, {"start_time": start, "end_time": end, "total_amount": total}
                ),
                "booking",
            )
            self.availability.invalidate(booking.sitter_id)

        logger.info(f"Booking {booking.id} rescheduled to {start.isoformat()}-{end.isoformat()} by {actor_id}")
        await self._notify(
            BOOKING_RESCHEDULED,
            self._recipients(booking, actor_id, actor_role),
            booking_event_payload(
                updated,
                previous_start_time=booking.start_time.isoformat(),
                previous_end_time=booking.end_time.isoformat(),
            ),
        )
        return updated
