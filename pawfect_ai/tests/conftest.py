import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so that "pawfect_ai" resolves without install
current_dir = Path(__file__).parent.absolute()
root_dir = current_dir.parent.parent
sys.path.insert(0, str(root_dir))

from pawfect_ai.schemas.pet import Pet  # noqa: E402
from pawfect_ai.schemas.sitter import SitterRecord  # noqa: E402
from pawfect_ai.services.availability import AvailabilityCache, AvailabilityIndex  # noqa: E402
from pawfect_ai.services.booking_lifecycle import BookingLifecycle  # noqa: E402
from pawfect_ai.tests.factories import RecordingNotifier  # noqa: E402
from pawfect_ai.tools.memory_store import InMemoryDataStore  # noqa: E402


@pytest.fixture
def sitter():
    """Verified, experienced sitter with positive reviews."""
    return SitterRecord(
        id="sitter-1",
        name="Sam",
        reviews=[
            {"text": "Great sitter, my dog loves her", "rating": 5},
            {"comment": "Excellent care and amazing updates", "rating": 4.5},
        ],
        total_bookings=24,
        response_time_hours=2,
        completion_rate=96,
        verification_status=True,
        background_check=True,
        insurance=True,
        certifications=["Pet First Aid"],
        emergency_contacts=["+1-555-0100"],
        experience_years=4,
        on_time_rate=0.95,
        cancellation_rate=0.05,
        communication_score=4.5,
        hourly_rate=20.0,
    )


@pytest.fixture
def store(sitter):
    return InMemoryDataStore(
        sitters=[sitter, SitterRecord(id="sitter-2", name="Alex")],
        pets=[
            Pet(id="pet-1", owner_id="owner-1", name="Rex", species="dog"),
            Pet(id="pet-2", owner_id="owner-1", name="Tom", species="cat"),
            Pet(id="pet-3", owner_id="owner-2", name="Bo", species="dog"),
        ],
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cache():
    return AvailabilityCache(ttl_seconds=60)


@pytest.fixture
def availability(store, cache):
    return AvailabilityIndex(store, cache, default_open_hour=8, default_close_hour=18)


@pytest.fixture
def lifecycle(store, availability, notifier):
    return BookingLifecycle(store, availability, notifier)
