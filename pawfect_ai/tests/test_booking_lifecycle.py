"""
Booking Lifecycle Tests

Booking creation with the availability check, the status transition table,
authorization, notifications, rescheduling and per-sitter serialization.

Run: pytest pawfect_ai/tests/test_booking_lifecycle.py -v
"""

import asyncio
from datetime import timedelta, timezone

import pytest

from pawfect_ai.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from pawfect_ai.schemas.booking import BookingStatus
from pawfect_ai.services.availability import AvailabilityCache, AvailabilityIndex
from pawfect_ai.services.booking_lifecycle import TRANSITIONS, BookingLifecycle, compute_total_amount
from pawfect_ai.tests.factories import RecordingNotifier, at, make_booking
from pawfect_ai.tools.memory_store import InMemoryDataStore
from pawfect_ai.tools.notifier import (
    BOOKING_CANCELLED,
    BOOKING_CREATED,
    BOOKING_RESCHEDULED,
    BOOKING_STATUS_UPDATED,
)

OWNER = ("owner-1", "OWNER")
SITTER = ("sitter-1", "SITTER")
ADMIN = ("admin-1", "ADMIN")


# ==================== Create Tests ====================

@pytest.mark.asyncio
async def test_create_pending_booking(lifecycle, store, notifier):
    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1", "pet-2"], at(10), at(14))

    assert booking.status == BookingStatus.PENDING
    assert booking.total_amount == pytest.approx(20 * 4 * 2)
    assert booking.hourly_rate == 20
    assert booking.id in store.bookings
    assert notifier.events() == [(BOOKING_CREATED, "sitter-1")]


@pytest.mark.asyncio
async def test_ai_optimized_booking_is_discounted(lifecycle):
    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(10), at(14), ai_optimized=True)

    assert booking.total_amount == pytest.approx(20 * 4 * 0.95)
    assert booking.ai_optimized is True


@pytest.mark.asyncio
async def test_default_hourly_rate_when_sitter_has_none(lifecycle):
    booking = await lifecycle.create("owner-1", "sitter-2", ["pet-1"], at(10), at(12))

    assert booking.hourly_rate == 25.0
    assert booking.total_amount == pytest.approx(50.0)


@pytest.mark.asyncio
async def test_conflicting_create_persists_nothing(lifecycle, store, notifier):
    store.add_booking(make_booking("bk-existing", at(10), at(18)))

    with pytest.raises(ConflictError) as exc_info:
        await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(16), at(20))

    assert exc_info.value.details["conflicting_booking_id"] == "bk-existing"
    assert list(store.bookings) == ["bk-existing"]
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_booking_touching_existing_one_is_accepted(lifecycle, store):
    store.add_booking(make_booking("bk-existing", at(10), at(18)))

    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(18), at(20))

    assert booking.status == BookingStatus.PENDING
    assert len(store.bookings) == 2


@pytest.mark.asyncio
async def test_pending_booking_does_not_block_create(lifecycle, store):
    store.add_booking(make_booking("bk-pending", at(10), at(18), BookingStatus.PENDING))

    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(12), at(14))

    assert booking.id != "bk-pending"


@pytest.mark.asyncio
async def test_pets_of_another_owner_are_rejected(lifecycle, store):
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create("owner-1", "sitter-1", ["pet-1", "pet-3"], at(10), at(12))

    assert exc_info.value.details["pet_ids"] == ["pet-3"]
    assert store.bookings == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("start,end", [(at(12), at(12)), (at(14), at(12))])
async def test_invalid_time_range_is_rejected(lifecycle, start, end):
    with pytest.raises(ValidationError):
        await lifecycle.create("owner-1", "sitter-1", ["pet-1"], start, end)


@pytest.mark.asyncio
async def test_missing_pets_are_rejected(lifecycle):
    with pytest.raises(ValidationError):
        await lifecycle.create("owner-1", "sitter-1", [], at(10), at(12))


@pytest.mark.asyncio
async def test_unknown_sitter_is_not_found(lifecycle):
    with pytest.raises(NotFoundError):
        await lifecycle.create("owner-1", "nobody", ["pet-1"], at(10), at(12))


@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_create(store, availability):
    lifecycle = BookingLifecycle(store, availability, RecordingNotifier(fail=True))

    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(10), at(12))

    assert booking.id in store.bookings


def test_compute_total_amount_counts_at_least_one_pet():
    assert compute_total_amount(30.0, at(9), at(10, 30), 0) == pytest.approx(45.0)


# ==================== Transition Tests ====================

ALL_STATUSES = list(BookingStatus)


def test_terminal_states_have_no_transitions():
    assert TRANSITIONS[BookingStatus.COMPLETED] == frozenset()
    assert TRANSITIONS[BookingStatus.CANCELLED] == frozenset()


@pytest.mark.asyncio
@pytest.mark.parametrize("current", ALL_STATUSES)
@pytest.mark.parametrize("target", ALL_STATUSES)
async def test_transition_table_is_enforced(lifecycle, store, current, target):
    store.add_booking(make_booking("bk-t", at(10), at(12), current))

    if target in TRANSITIONS[current]:
        updated = await lifecycle.update_status("bk-t", *ADMIN, target)
        assert updated.status == target
        assert store.bookings["bk-t"].status == target
    else:
        with pytest.raises(InvalidTransitionError):
            await lifecycle.update_status("bk-t", *ADMIN, target)
        assert store.bookings["bk-t"].status == current


@pytest.mark.asyncio
async def test_full_happy_path(lifecycle, store):
    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1"], at(10), at(12))

    for status in ("CONFIRMED", "IN_PROGRESS", "COMPLETED"):
        booking = await lifecycle.update_status(booking.id, *SITTER, status)

    assert booking.status == BookingStatus.COMPLETED


@pytest.mark.asyncio
async def test_unknown_status_is_a_validation_error(lifecycle, store):
    store.add_booking(make_booking("bk-t", at(10), at(12), BookingStatus.PENDING))

    with pytest.raises(ValidationError):
        await lifecycle.update_status("bk-t", *ADMIN, "ARCHIVED")


@pytest.mark.asyncio
async def test_confirming_overlapping_pending_booking_conflicts(lifecycle, store):
    store.add_booking(make_booking("bk-a", at(10), at(14), BookingStatus.PENDING))
    store.add_booking(make_booking("bk-b", at(12), at(16), BookingStatus.PENDING))

    await lifecycle.update_status("bk-a", *SITTER, BookingStatus.CONFIRMED)

    with pytest.raises(ConflictError):
        await lifecycle.update_status("bk-b", *SITTER, BookingStatus.CONFIRMED)
    assert store.bookings["bk-b"].status == BookingStatus.PENDING


# ==================== Authorization and Notification Tests ====================

@pytest.mark.asyncio
async def test_stranger_cannot_touch_booking(lifecycle, store):
    store.add_booking(make_booking("bk-t", at(10), at(12), BookingStatus.PENDING))

    with pytest.raises(ForbiddenError):
        await lifecycle.update_status("bk-t", "owner-2", "OWNER", BookingStatus.CONFIRMED)
    with pytest.raises(ForbiddenError):
        await lifecycle.get("bk-t", "owner-2", "OWNER")
    with pytest.raises(ForbiddenError):
        await lifecycle.cancel("bk-t", "owner-1", "ANON")

    assert store.bookings["bk-t"].status == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_sitter_may_only_cancel_pending(lifecycle, store):
    store.add_booking(make_booking("bk-p", at(8), at(9), BookingStatus.PENDING))
    store.add_booking(make_booking("bk-c", at(10), at(12), BookingStatus.CONFIRMED))

    cancelled = await lifecycle.cancel("bk-p", *SITTER)
    assert cancelled.status == BookingStatus.CANCELLED

    with pytest.raises(ForbiddenError):
        await lifecycle.cancel("bk-c", *SITTER)
    with pytest.raises(ForbiddenError):
        await lifecycle.update_status("bk-c", *SITTER, BookingStatus.CANCELLED)
    assert store.bookings["bk-c"].status == BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_owner_cancel_records_reason_and_notifies_sitter(lifecycle, store, notifier):
    store.add_booking(make_booking("bk-c", at(10), at(12), BookingStatus.CONFIRMED))

    cancelled = await lifecycle.cancel("bk-c", *OWNER, reason="Trip cancelled")

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "Trip cancelled"
    event, recipient, payload = notifier.sent[-1]
    assert (event, recipient) == (BOOKING_CANCELLED, "sitter-1")
    assert payload["reason"] == "Trip cancelled"


@pytest.mark.asyncio
async def test_in_progress_booking_cannot_be_cancelled(lifecycle, store):
    store.add_booking(make_booking("bk-i", at(10), at(12), BookingStatus.IN_PROGRESS))

    with pytest.raises(InvalidTransitionError):
        await lifecycle.cancel("bk-i", *OWNER)


@pytest.mark.asyncio
async def test_status_update_notifies_counterparty(lifecycle, store, notifier):
    store.add_booking(make_booking("bk-t", at(10), at(12), BookingStatus.PENDING))

    await lifecycle.update_status("bk-t", *SITTER, BookingStatus.CONFIRMED)
    await lifecycle.update_status("bk-t", *ADMIN, BookingStatus.IN_PROGRESS)

    assert notifier.events() == [
        (BOOKING_STATUS_UPDATED, "owner-1"),
        (BOOKING_STATUS_UPDATED, "owner-1"),
        (BOOKING_STATUS_UPDATED, "sitter-1"),
    ]
    assert notifier.sent[0][2]["previous_status"] == "PENDING"


@pytest.mark.asyncio
async def test_get_booking(lifecycle, store):
    store.add_booking(make_booking("bk-t", at(10), at(12)))

    assert (await lifecycle.get("bk-t", *OWNER)).id == "bk-t"
    assert (await lifecycle.get("bk-t", *ADMIN)).id == "bk-t"
    with pytest.raises(NotFoundError):
        await lifecycle.get("missing", *ADMIN)


# ==================== Reschedule Tests ====================

@pytest.mark.asyncio
async def test_reschedule_recomputes_amount(lifecycle, store, notifier):
    booking = await lifecycle.create("owner-1", "sitter-1", ["pet-1", "pet-2"], at(10), at(12))

    moved = await lifecycle.reschedule(booking.id, *OWNER, at(13), at(16))

    assert (moved.start_time, moved.end_time) == (at(13), at(16))
    assert moved.total_amount == pytest.approx(20 * 3 * 2)
    event, recipient, payload = notifier.sent[-1]
    assert (event, recipient) == (BOOKING_RESCHEDULED, "sitter-1")
    assert payload["previous_start_time"] == at(10).isoformat()


@pytest.mark.asyncio
async def test_reschedule_ignores_own_slot(lifecycle, store):
    store.add_booking(make_booking("bk-c", at(10), at(12), BookingStatus.CONFIRMED))

    moved = await lifecycle.reschedule("bk-c", *SITTER, at(11), at(13))

    assert moved.start_time == at(11)


@pytest.mark.asyncio
async def test_reschedule_into_other_booking_conflicts(lifecycle, store):
    store.add_booking(make_booking("bk-a", at(10), at(12), BookingStatus.CONFIRMED))
    store.add_booking(make_booking("bk-b", at(14), at(16), BookingStatus.CONFIRMED))

    with pytest.raises(ConflictError):
        await lifecycle.reschedule("bk-b", *OWNER, at(11), at(15))
    assert store.bookings["bk-b"].start_time == at(14)


@pytest.mark.asyncio
async def test_completed_booking_cannot_be_rescheduled(lifecycle, store):
    store.add_booking(make_booking("bk-d", at(10), at(12), BookingStatus.COMPLETED))

    with pytest.raises(InvalidTransitionError):
        await lifecycle.reschedule("bk-d", *OWNER, at(13), at(15))


# ==================== Concurrency and Cache Tests ====================

@pytest.mark.asyncio
async def test_concurrent_confirms_of_overlapping_bookings_serialize():
    store = InMemoryDataStore(io_delay=0.01)
    store.add_booking(make_booking("bk-a", at(10), at(14), BookingStatus.PENDING))
    store.add_booking(make_booking("bk-b", at(12), at(16), BookingStatus.PENDING))
    lifecycle = BookingLifecycle(store, AvailabilityIndex(store))

    results = await asyncio.gather(
        lifecycle.update_status("bk-a", *ADMIN, BookingStatus.CONFIRMED),
        lifecycle.update_status("bk-b", *ADMIN, BookingStatus.CONFIRMED),
        return_exceptions=True,
    )

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    confirmed = [b for b in store.bookings.values() if b.status == BookingStatus.CONFIRMED]
    assert len(conflicts) == 1
    assert len(confirmed) == 1


@pytest.mark.asyncio
async def test_writes_invalidate_cached_availability(lifecycle, store, availability, cache):
    from datetime import date

    day = date(2026, 3, 2)
    store.add_booking(make_booking("bk-t", at(10), at(12), BookingStatus.PENDING))
    before = await availability.free_windows("sitter-1", day, day)

    await lifecycle.update_status("bk-t", *SITTER, BookingStatus.CONFIRMED)
    after = await availability.free_windows("sitter-1", day, day)

    assert before[0].existing_bookings == []
    assert len(after[0].existing_bookings) == 1


@pytest.mark.asyncio
async def test_cancel_racing_a_confirm_stays_cancelled():
    store = InMemoryDataStore(io_delay=0.01)
    store.add_booking(make_booking("bk-r", at(10), at(12), BookingStatus.PENDING))
    lifecycle = BookingLifecycle(store, AvailabilityIndex(store))

    async def confirm_shortly_after():
        await asyncio.sleep(0.005)
        return await lifecycle.update_status("bk-r", *SITTER, BookingStatus.CONFIRMED)

    cancelled, confirmed = await asyncio.gather(
        lifecycle.cancel("bk-r", *OWNER, reason="Plans changed"),
        confirm_shortly_after(),
        return_exceptions=True,
    )

    assert cancelled.status == BookingStatus.CANCELLED
    assert isinstance(confirmed, InvalidTransitionError)
    assert store.bookings["bk-r"].status == BookingStatus.CANCELLED


@pytest.mark.asyncio
async def test_status_change_is_checked_against_the_latest_status():
    store = InMemoryDataStore(io_delay=0.01)
    store.add_booking(make_booking("bk-s", at(10), at(12), BookingStatus.CONFIRMED))
    lifecycle = BookingLifecycle(store, AvailabilityIndex(store))

    async def start_shortly_after():
        await asyncio.sleep(0.005)
        return await lifecycle.update_status("bk-s", *SITTER, BookingStatus.IN_PROGRESS)

    results = await asyncio.gather(
        lifecycle.cancel("bk-s", *OWNER),
        start_shortly_after(),
        return_exceptions=True,
    )

    assert isinstance(results[1], InvalidTransitionError)
    assert store.bookings["bk-s"].status == BookingStatus.CANCELLED


@pytest.mark.asyncio
async def test_aware_times_are_stored_as_utc_and_conflict_with_naive_bookings(lifecycle, store):
    plus_two = timezone(timedelta(hours=2))
    store.add_booking(make_booking("bk-n", at(10), at(12)))

    with pytest.raises(ConflictError):
        await lifecycle.create(
            "owner-1", "sitter-1", ["pet-1"],
            at(13).replace(tzinfo=plus_two), at(15).replace(tzinfo=plus_two)
        )

    booking = await lifecycle.create(
        "owner-1", "sitter-1", ["pet-1"],
        at(12).replace(tzinfo=timezone.utc), at(14).replace(tzinfo=timezone.utc)
    )
    assert booking.start_time == at(12)
    assert booking.start_time.tzinfo is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
