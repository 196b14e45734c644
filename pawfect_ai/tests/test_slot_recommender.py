"""
Time Slot Recommender Tests

Suggestions for a pet/sitter pair with and without external insight,
owner filters, blocked bookings and hourly models.

Run: pytest pawfect_ai/tests/test_slot_recommender.py -v
"""

from datetime import date, datetime, timezone

import pytest

from pawfect_ai.core.errors import ExternalSignalUnavailableError, ValidationError
from pawfect_ai.schemas.slots import ExternalSlotSuggestion, HistoricalBooking, OwnerPreferences, SlotSource
from pawfect_ai.services.time_slot_recommender import TimeSlotRecommender
from pawfect_ai.tests.factories import at, make_booking
from pawfect_ai.tools.insight_provider import DeterministicInsightProvider

TODAY = date(2026, 3, 2)


class FixedHourlyModel:
    def __init__(self, scores):
        self.scores = scores
        self.series = None

    def predict(self, series):
        self.series = series
        return self.scores


class BrokenHourlyModel:
    def predict(self, series):
        raise RuntimeError("model not loaded")


# ==================== Pattern Path Tests ====================

@pytest.mark.asyncio
async def test_pattern_suggestions_score_above_threshold(store):
    recommender = TimeSlotRecommender(store)

    result = await recommender.suggest("pet-1", "sitter-1", today=TODAY)

    historical = [s for s in result.suggestions if s.source == SlotSource.HISTORICAL]
    assert historical
    for suggestion in historical:
        assert suggestion.score > 0.6
        assert 4 <= suggestion.duration_hours <= 12


@pytest.mark.asyncio
async def test_suggestions_are_ranked_by_score(store):
    result = await TimeSlotRecommender(store).suggest("pet-1", "sitter-1", today=TODAY)

    scores = [s.score for s in result.suggestions]
    assert scores == sorted(scores, reverse=True)
    assert [s.rank for s in result.suggestions] == list(range(1, len(scores) + 1))


@pytest.mark.asyncio
async def test_morning_eight_hour_preference_filters(store):
    preferences = OwnerPreferences(duration=8, preferred_time="morning")

    result = await TimeSlotRecommender(store).suggest("pet-1", "sitter-1", preferences, today=TODAY)

    assert result.suggestions
    for suggestion in result.suggestions:
        assert abs(suggestion.duration_hours - 8) <= 2
        assert suggestion.start_hour <= 12


# ==================== External Signal Tests ====================

@pytest.mark.asyncio
async def test_without_provider_fallback_covers_date_range(store):
    result = await TimeSlotRecommender(store).suggest("pet-1", "sitter-1", date_range_days=3, today=TODAY)

    fallback = [s for s in result.suggestions if s.source == SlotSource.FALLBACK]
    assert sorted(s.date for s in fallback) == ["2026-03-02", "2026-03-03", "2026-03-04"]
    assert all((s.start_time, s.end_time) == ("09:00", "17:00") for s in fallback)
    assert "AI-optimized timing" not in result.factors


@pytest.mark.asyncio
async def test_failing_provider_uses_standard_hours(store):
    provider = DeterministicInsightProvider(error=ExternalSignalUnavailableError("down"))

    result = await TimeSlotRecommender(store, provider=provider).suggest(
        "pet-1", "sitter-1", date_range_days=2, today=TODAY
    )

    fallback = [s for s in result.suggestions if s.source == SlotSource.FALLBACK]
    assert len(fallback) == 2
    assert provider.calls == ["suggest_time_slots"]


@pytest.mark.asyncio
async def test_external_suggestions_are_used(store):
    provider = DeterministicInsightProvider(slots=[
        ExternalSlotSuggestion(
            date="2026-03-03", start_time="07:00", end_time="15:00",
            confidence=0.95, reasoning="Quiet morning for an anxious dog"
        ),
    ])

    result = await TimeSlotRecommender(store, provider=provider).suggest("pet-1", "sitter-1", today=TODAY)

    top = result.suggestions[0]
    assert top.source == SlotSource.EXTERNAL_INSIGHT
    assert (top.date, top.start_time, top.end_time) == ("2026-03-03", "07:00", "15:00")
    assert top.confidence == "high"
    assert "AI-optimized timing" in result.factors
    assert not any(s.source == SlotSource.FALLBACK for s in result.suggestions)


# ==================== Blocked Booking Tests ====================

@pytest.mark.asyncio
async def test_candidates_overlapping_confirmed_bookings_are_dropped(store, availability):
    store.add_booking(make_booking("bk-a", at(8), at(20)))
    recommender = TimeSlotRecommender(store, availability)

    result = await recommender.suggest("pet-1", "sitter-1", date_range_days=2, today=TODAY)

    assert result.suggestions
    assert not any(s.date == "2026-03-02" for s in result.suggestions)


@pytest.mark.asyncio
async def test_pending_bookings_do_not_block_suggestions(store, availability):
    from pawfect_ai.schemas.booking import BookingStatus

    store.add_booking(make_booking("bk-a", at(8), at(20), BookingStatus.PENDING))

    result = await TimeSlotRecommender(store, availability).suggest(
        "pet-1", "sitter-1", date_range_days=1, today=TODAY
    )

    assert any(s.date == "2026-03-02" for s in result.suggestions)


@pytest.mark.asyncio
async def test_aware_confirmed_booking_blocks_every_suggestion(store, availability):
    store.add_booking(make_booking(
        "bk-w", datetime(2026, 3, 1, tzinfo=timezone.utc), datetime(2026, 3, 20, tzinfo=timezone.utc)
    ))

    result = await TimeSlotRecommender(store, availability).suggest(
        "pet-1", "sitter-1", date_range_days=7, today=TODAY
    )

    assert result.suggestions == []


# ==================== Malformed Provider Answer Tests ====================

@pytest.mark.asyncio
async def test_out_of_range_provider_times_fall_back(store, availability):
    store.add_booking(make_booking("bk-a", at(10), at(12)))
    provider = DeterministicInsightProvider(slots=[
        ExternalSlotSuggestion.model_construct(
            date="2026-03-02", start_time="25:00", end_time="27:00", confidence=0.9, reasoning=""
        ),
    ])

    result = await TimeSlotRecommender(store, availability, provider).suggest(
        "pet-1", "sitter-1", date_range_days=2, today=TODAY
    )

    sources = {s.source for s in result.suggestions}
    assert SlotSource.FALLBACK in sources
    assert SlotSource.EXTERNAL_INSIGHT not in sources
    assert not any(s.date == "2026-03-02" and s.source == SlotSource.FALLBACK for s in result.suggestions)


@pytest.mark.asyncio
async def test_half_hour_provider_slots_keep_their_minutes(store):
    provider = DeterministicInsightProvider(slots=[
        ExternalSlotSuggestion(date="2026-03-03", start_time="09:30", end_time="17:00", confidence=0.9),
        ExternalSlotSuggestion(date="2026-03-04", start_time="09:30", end_time="10:00", confidence=0.8),
    ])

    result = await TimeSlotRecommender(store, provider=provider).suggest("pet-1", "sitter-1", today=TODAY)

    external = {s.date: s.duration_hours for s in result.suggestions if s.source == SlotSource.EXTERNAL_INSIGHT}
    assert external == {"2026-03-03": 8.5, "2026-03-04": 0.5}


# ==================== Confidence Tests ====================

@pytest.mark.asyncio
async def test_history_raises_confidence(store):
    history = [
        HistoricalBooking(start_time=at(9, day=-7 * n), duration_hours=4, success=True, rating=5)
        for n in range(1, 6)
    ]
    store.add_history("pet-1", "sitter-1", history)

    result = await TimeSlotRecommender(store).suggest("pet-1", "sitter-1", today=TODAY)

    # 0.5 + 0.2 for five bookings + 0.6 * 0.2 from default patterns
    assert result.confidence == pytest.approx(0.82)


@pytest.mark.asyncio
async def test_unknown_pet_uses_default_patterns(store):
    result = await TimeSlotRecommender(store).suggest("ghost-pet", "sitter-1", today=TODAY)

    assert result.confidence == pytest.approx(0.62)
    assert result.suggestions


# ==================== Hourly Model Tests ====================

@pytest.mark.asyncio
async def test_hourly_model_receives_series(store):
    model = FixedHourlyModel([0.9] * 24)
    recommender = TimeSlotRecommender(store, hourly_model=model)

    result = await recommender.suggest("pet-1", "sitter-1", today=TODAY)

    assert len(model.series) == 24
    assert any(s.source == SlotSource.HISTORICAL for s in result.suggestions)


def test_broken_hourly_model_falls_back_to_heuristic(store):
    from pawfect_ai.algorithms.slot_recommender import heuristic_hourly_scores

    recommender = TimeSlotRecommender(store, hourly_model=BrokenHourlyModel())

    assert recommender.hourly_scores([]) == heuristic_hourly_scores()


def test_out_of_range_hourly_model_falls_back(store):
    from pawfect_ai.algorithms.slot_recommender import heuristic_hourly_scores

    recommender = TimeSlotRecommender(store, hourly_model=FixedHourlyModel([2.0] * 24))

    assert recommender.hourly_scores([]) == heuristic_hourly_scores()


# ==================== Validation Tests ====================

@pytest.mark.asyncio
async def test_missing_ids_are_rejected(store):
    with pytest.raises(ValidationError):
        await TimeSlotRecommender(store).suggest("", "sitter-1")


@pytest.mark.asyncio
async def test_empty_range_is_rejected(store):
    with pytest.raises(ValidationError):
        await TimeSlotRecommender(store).suggest("pet-1", "sitter-1", date_range_days=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
