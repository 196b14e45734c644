"""
Time Slot Recommendation Algorithm

Deterministic scoring of candidate booking windows for a pet/sitter pair.

Pipeline pieces (the async service wires them together):
- hourly scores: 24 values from an optional hourly model, else the peak-hour heuristic
- pattern windows: 4-12h windows starting 06:00-18:00, average hourly score
  plus pet pattern bonus, kept when > 0.6, top 3 per day
- external windows: suggestions from the insight provider (or the
  standard-hours fallback) turned into candidates
- owner filters, ranking, response confidence and factors

No randomness.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Protocol, Sequence, Tuple

from pawfect_ai.algorithms.availability import overlaps
from pawfect_ai.algorithms.features import clamp
from pawfect_ai.constants.thresholds import (
    AFTERNOON_EARLIEST_START,
    AFTERNOON_LATEST_START,
    BAND_BONUS_WEIGHT,
    DURATION_TOLERANCE_HOURS,
    EVENING_EARLIEST_START,
    EXTENDED_CARE_HOURS,
    FEEDING_BONUS_WEIGHT,
    HIGH_CONFIDENCE_SCORE,
    HISTORY_FOR_CONFIDENCE,
    HISTORY_FOR_HIGH_CONFIDENCE,
    MAX_WINDOW_HOURS,
    MIN_WINDOW_HOURS,
    MIN_WINDOW_SCORE,
    MORNING_LATEST_START,
    OFF_PEAK_HOUR_SCORE,
    PATTERN_CONFIDENCE_WEIGHT,
    PATTERN_DAYS,
    PEAK_HOUR_SCORE,
    PEAK_HOURS,
    SLOT_BASE_CONFIDENCE,
    STANDARD_CONFIDENCE,
    STANDARD_END,
    STANDARD_START,
    WINDOW_FIRST_START_HOUR,
    WINDOW_LAST_START_HOUR,
    WINDOWS_PER_DAY,
    confidence_label,
)
from pawfect_ai.schemas.booking import TimeRange
from pawfect_ai.schemas.pet import PetCarePatterns
from pawfect_ai.schemas.slots import (
    ExternalSlotSuggestion,
    HistoricalBooking,
    OwnerPreferences,
    RankedTimeSlot,
    SlotSource,
    TimeSlotCandidate,
    minutes_of_day,
)

logger = logging.getLogger(__name__)

PATTERN_REASONING = "Based on historical patterns and pet behavior"
STANDARD_REASONING = "Standard business hours - optimal for most pets and sitters"

# Columns of one row of the hourly series fed to an hourly model
SERIES_FEATURES = 7


class HourlyScoreModel(Protocol):
    """Trained sequence model: 24x7 hourly series in, 24 hourly scores out."""

    def predict(self, series: List[List[float]]) -> Sequence[float]:
        ...


# ============================================================================
# Hourly Scores
# ============================================================================

def heuristic_hourly_scores() -> List[float]:
    """0.8 for peak hours, 0.4 elsewhere."""
    return [PEAK_HOUR_SCORE if hour in PEAK_HOURS else OFF_PEAK_HOUR_SCORE for hour in range(24)]


def prepare_hourly_series(history: Iterable[HistoricalBooking]) -> List[List[float]]:
    """
    Encode booking history as 24 rows (one per hour) of 7 features.

    Row columns: booked, rating/5, duration/12, success, weekday/6, hour/23,
    history flag. Later bookings overwrite earlier ones for the same hour.
    """
    series = [[0.0] * SERIES_FEATURES for _ in range(24)]

    for booking in history:
        start_hour = booking.start_hour
        end_hour = min(24, start_hour + int(booking.duration_hours))
        for hour in range(start_hour, end_hour):
            series[hour] = [
                1.0,
                (booking.rating or 0.0) / 5,
                min(1.0, booking.duration_hours / 12),
                1.0 if booking.success else 0.0,
                booking.day_of_week / 6,
                hour / 23,
                1.0,
            ]

    return series


def validate_hourly_scores(values: Sequence[float]) -> List[float]:
    """Raise ValueError unless values are 24 numbers in [0, 1]."""
    scores = [float(v) for v in values]
    if len(scores) != 24:
        raise ValueError(f"expected 24 hourly scores, got {len(scores)}")
    if any(not 0.0 <= s <= 1.0 for s in scores):
        raise ValueError("hourly scores must lie in [0, 1]")
    return scores


# ============================================================================
# Pattern Windows
# ============================================================================

def band_overlap(start_hour: int, end_hour: int, band_start: int, band_end: int) -> float:
    """Fraction of [start_hour, end_hour) that falls inside the band."""
    duration = end_hour - start_hour
    if duration <= 0:
        return 0.0
    overlap = max(0, min(end_hour, band_end) - max(start_hour, band_start))
    return overlap / duration


def feeding_overlap(start_hour: int, end_hour: int, feeding_hours: Sequence[int]) -> float:
    """Fraction of feeding hours covered by [start_hour, end_hour)."""
    if not feeding_hours:
        return 0.0
    covered = sum(1 for hour in feeding_hours if start_hour <= hour < end_hour)
    return covered / len(feeding_hours)


def pattern_adjusted_score(
    average: float,
    start_hour: int,
    end_hour: int,
    patterns: PetCarePatterns
) -> float:
    score = average
    for band in patterns.bands:
        overlap = band_overlap(start_hour, end_hour, band.start_hour, band.end_hour)
        score += overlap * band.confidence * BAND_BONUS_WEIGHT
    score += feeding_overlap(start_hour, end_hour, patterns.feeding_hours) * FEEDING_BONUS_WEIGHT
    return min(1.0, score)


def best_windows(hourly: Sequence[float], patterns: PetCarePatterns) -> List[Tuple[int, int, float]]:
    """
    Top windows for one representative day.

    Returns:
        Up to 3 (start_hour, end_hour, score) tuples, best first. Every score
        is > 0.6 and every duration is 4-12 hours.
    """
    windows = []
    for start_hour in range(WINDOW_FIRST_START_HOUR, WINDOW_LAST_START_HOUR + 1):
        for duration in range(MIN_WINDOW_HOURS, MAX_WINDOW_HOURS + 1):
            end_hour = start_hour + duration
            if end_hour > 24:
                break
            average = sum(hourly[start_hour:end_hour]) / duration
            score = pattern_adjusted_score(average, start_hour, end_hour, patterns)
            if score > MIN_WINDOW_SCORE:
                windows.append((start_hour, end_hour, score))

    windows.sort(key=lambda w: w[2], reverse=True)
    return windows[:WINDOWS_PER_DAY]


def pattern_candidates(
    hourly: Sequence[float],
    patterns: PetCarePatterns,
    today: date,
    days: int = PATTERN_DAYS
) -> List[TimeSlotCandidate]:
    """Best windows repeated for each of the next `days` days."""
    windows = best_windows(hourly, patterns)
    candidates = []
    for offset in range(days):
        day = (today + timedelta(days=offset)).isoformat()
        for start_hour, end_hour, score in windows:
            candidates.append(TimeSlotCandidate(
                date=day,
                start_time=_hhmm(start_hour),
                end_time=_hhmm(end_hour),
                duration_hours=end_hour - start_hour,
                score=score,
                source=SlotSource.HISTORICAL,
                reasoning=PATTERN_REASONING,
            ))
    return candidates


# ============================================================================
# External Suggestions
# ============================================================================

def fallback_suggestions(today: date, days: int) -> List[ExternalSlotSuggestion]:
    """One standard 09:00-17:00 suggestion per day in range."""
    return [
        ExternalSlotSuggestion(
            date=(today + timedelta(days=offset)).isoformat(),
            start_time=STANDARD_START,
            end_time=STANDARD_END,
            confidence=STANDARD_CONFIDENCE,
            reasoning=STANDARD_REASONING,
        )
        for offset in range(days)
    ]


def external_candidates(
    suggestions: Iterable[ExternalSlotSuggestion],
    source: SlotSource
) -> List[TimeSlotCandidate]:
    """Turn provider suggestions into candidates, skipping empty or inverted windows."""
    candidates = []
    for suggestion in suggestions:
        minutes = minutes_of_day(suggestion.end_time) - minutes_of_day(suggestion.start_time)
        if minutes <= 0:
            logger.debug(f"Skipping suggestion {suggestion.date} {suggestion.start_time}-{suggestion.end_time}")
            continue
        candidates.append(TimeSlotCandidate(
            date=suggestion.date,
            start_time=suggestion.start_time,
            end_time=suggestion.end_time,
            duration_hours=minutes / 60,
            score=suggestion.confidence,
            source=source,
            reasoning=suggestion.reasoning,
        ))
    return candidates


# ============================================================================
# Filtering and Ranking
# ============================================================================

def matches_preferences(candidate: TimeSlotCandidate, preferences: OwnerPreferences) -> bool:
    """
    Owner filters: duration within 2h of the request, start hour inside the
    preferred band. "flexible" or no preference applies no band filter.
    """
    if preferences.duration:
        if abs(candidate.duration_hours - preferences.duration) > DURATION_TOLERANCE_HOURS:
            return False

    preferred = preferences.preferred_time
    start_hour = candidate.start_hour
    if preferred == "morning" and start_hour > MORNING_LATEST_START:
        return False
    if preferred == "afternoon" and not AFTERNOON_EARLIEST_START <= start_hour <= AFTERNOON_LATEST_START:
        return False
    if preferred == "evening" and start_hour < EVENING_EARLIEST_START:
        return False

    return True


def candidate_range(candidate: TimeSlotCandidate) -> TimeRange:
    """Absolute [start, end) of a candidate in naive UTC; an end of 24:00 is next midnight."""
    day = datetime.combine(date.fromisoformat(candidate.date), time(0))
    return TimeRange(
        start=day + timedelta(minutes=candidate.start_minutes),
        end=day + timedelta(minutes=candidate.end_minutes),
    )


def overlaps_any(candidate: TimeSlotCandidate, blocked: Sequence[TimeRange]) -> bool:
    window = candidate_range(candidate)
    return any(overlaps(existing.start, existing.end, window.start, window.end) for existing in blocked)


def rank_candidates(
    candidates: Iterable[TimeSlotCandidate],
    preferences: OwnerPreferences
) -> List[RankedTimeSlot]:
    """Filter by owner preferences, sort by score descending, number from 1."""
    kept = [c for c in candidates if matches_preferences(c, preferences)]
    kept.sort(key=lambda c: c.score, reverse=True)
    return [
        RankedTimeSlot(**candidate.model_dump(), rank=index + 1, confidence=confidence_label(candidate.score))
        for index, candidate in enumerate(kept)
    ]


def suggestion_confidence(history_count: int, patterns: PetCarePatterns) -> float:
    confidence = SLOT_BASE_CONFIDENCE
    if history_count >= HISTORY_FOR_CONFIDENCE:
        confidence += 0.2
    if history_count >= HISTORY_FOR_HIGH_CONFIDENCE:
        confidence += 0.1
    confidence += patterns.average_confidence * PATTERN_CONFIDENCE_WEIGHT
    return clamp(confidence)


def suggestion_factors(suggestions: Iterable[TimeSlotCandidate]) -> List[str]:
    """Labels triggered by the returned candidates, de-duplicated in first-seen order."""
    factors: List[str] = []
    for suggestion in suggestions:
        if suggestion.score >= HIGH_CONFIDENCE_SCORE:
            factors.append("High historical success rate")
        if suggestion.source == SlotSource.EXTERNAL_INSIGHT:
            factors.append("AI-optimized timing")
        if suggestion.duration_hours >= EXTENDED_CARE_HOURS:
            factors.append("Extended care period")
        if "pet behavior" in suggestion.reasoning.lower():
            factors.append("Pet behavior analysis")
    return list(dict.fromkeys(factors))


def _hhmm(hour: int, minute: int = 0) -> str:
    return f"{hour:02d}:{minute:02d}"
