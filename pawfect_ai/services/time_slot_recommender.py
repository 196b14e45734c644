"""
Time Slot Recommender

Suggests ranked booking windows for a pet/sitter pair.

Signals gathered concurrently, each with its own fallback:
- history: past outcomes for the pair (fallback: no history)
- patterns: the pet's care patterns (fallback: default profile)
- blocked: the sitter's confirmed/in-progress bookings (fallback: no filter)
- external: provider slot suggestions (fallback: 09:00-17:00 each day)

Usage:
    recommender = TimeSlotRecommender(store, availability, provider)
    result = await recommender.suggest("pet-1", "sitter-1", OwnerPreferences(duration=8))
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pawfect_ai.algorithms.slot_recommender import (
    HourlyScoreModel,
    external_candidates,
    fallback_suggestions,
    heuristic_hourly_scores,
    overlaps_any,
    pattern_candidates,
    prepare_hourly_series,
    rank_candidates,
    suggestion_confidence,
    suggestion_factors,
    validate_hourly_scores,
)
from pawfect_ai.constants.thresholds import PATTERN_DAYS
from pawfect_ai.core.errors import ExternalSignalUnavailableError, ValidationError
from pawfect_ai.schemas.pet import PetCarePatterns
from pawfect_ai.schemas.slots import (
    ExternalSlotSuggestion,
    HistoricalBooking,
    OwnerPreferences,
    SlotSource,
    SlotSuggestionResult,
)
from pawfect_ai.services.availability import AvailabilityIndex
from pawfect_ai.services.signals import bounded, gather_signals, resolve
from pawfect_ai.tools.data_store import DataStore
from pawfect_ai.tools.insight_provider import ExternalInsightProvider

logger = logging.getLogger(__name__)


class TimeSlotRecommender:

    def __init__(
        self,
        store: DataStore,
        availability: Optional[AvailabilityIndex] = None,
        provider: Optional[ExternalInsightProvider] = None,
        hourly_model: Optional[HourlyScoreModel] = None,
        timeout: Optional[float] = None
    ):
        self.store = store
        self.availability = availability
        self.provider = provider
        self.hourly_model = hourly_model
        self.timeout = timeout

    # ==================== Signals ====================

    async def _pet_patterns(self, pet_id: str) -> PetCarePatterns:
        pet = await self.store.get_pet(pet_id)
        return pet.care_patterns or PetCarePatterns()

    async def _external_slots(self, context: Dict[str, Any]) -> List[ExternalSlotSuggestion]:
        """Provider suggestions, re-validated; one bad slot rejects the whole reply."""
        slots = await bounded(self.provider.suggest_time_slots(context), self.timeout)
        try:
            return [ExternalSlotSuggestion.model_validate(dict(slot)) for slot in slots]
        except (TypeError, ValueError) as e:
            raise ExternalSignalUnavailableError("Malformed slot suggestion") from e

    def hourly_scores(self, history: List[HistoricalBooking]) -> List[float]:
        """Hourly model prediction, or the peak-hour heuristic when absent or failing."""
        if self.hourly_model is None:
            return heuristic_hourly_scores()
        try:
            return validate_hourly_scores(self.hourly_model.predict(prepare_hourly_series(history)))
        except Exception as e:
            logger.warning(f"Hourly model failed ({type(e).__name__}: {e}), using peak-hour heuristic")
            return heuristic_hourly_scores()

    # ==================== Suggest ====================

    async def suggest(
        self,
        pet_id: str,
        sitter_id: str,
        preferences: Optional[OwnerPreferences] = None,
        date_range_days: int = 7,
        today: Optional[date] = None
    ) -> SlotSuggestionResult:
        """
        Ranked time-slot suggestions.

        Args:
            pet_id: Pet to be cared for.
            sitter_id: Sitter to book.
            preferences: Owner duration / preferred band filters.
            date_range_days: Days covered by external and fallback suggestions.
            today: First suggested day (defaults to the current date).

        Raises:
            ValidationError: missing ids or a non-positive range.
        """
        if not pet_id or not sitter_id:
            raise ValidationError("pet_id and sitter_id are required")
        if date_range_days < 1:
            raise ValidationError("date_range_days must be at least 1")

        preferences = preferences or OwnerPreferences()
        today = today or date.today()
        logger.info(f"Getting time suggestions for pet {pet_id}, sitter {sitter_id}")

        range_start = datetime.combine(today, datetime.min.time())
        range_end = range_start + timedelta(days=max(date_range_days, PATTERN_DAYS))

        calls = {
            "history": self.store.get_bookings_for_pet_sitter_pair(pet_id, sitter_id),
            "patterns": self._pet_patterns(pet_id),
        }
        if self.availability is not None:
            calls["blocked"] = self.availability.blocking_bookings(sitter_id, range_start, range_end)
        if self.provider is not None:
            calls["external"] = self._external_slots({
                "pet_id": pet_id,
                "sitter_id": sitter_id,
                "start_date": today.isoformat(),
                "date_range_days": date_range_days,
                "preferences": preferences.model_dump(mode="json"),
            })

        results = await gather_signals(calls)

        history = resolve(results, "history", list).value
        patterns = resolve(results, "patterns", PetCarePatterns).value
        external, external_ok = (
            resolve(results, "external", lambda: None) if "external" in results else (None, False)
        )
        if not external_ok:
            external = fallback_suggestions(today, date_range_days)

        candidates = pattern_candidates(self.hourly_scores(history), patterns, today)
        candidates += external_candidates(
            external, SlotSource.EXTERNAL_INSIGHT if external_ok else SlotSource.FALLBACK
        )

        if "blocked" in results:
            blocked = resolve(results, "blocked", list).value
            if blocked:
                ranges = AvailabilityIndex.as_ranges(blocked)
                candidates = [c for c in candidates if not overlaps_any(c, ranges)]

        ranked = rank_candidates(candidates, preferences)
        logger.info(f"Generated {len(ranked)} time suggestions for pet {pet_id}, sitter {sitter_id}")

        return SlotSuggestionResult(
            pet_id=pet_id,
            sitter_id=sitter_id,
            suggestions=ranked,
            confidence=suggestion_confidence(len(history), patterns),
            factors=suggestion_factors(ranked),
            generated_at=datetime.now(timezone.utc),
        )
