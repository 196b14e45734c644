"""
Recommendation Orchestrator

Entry point that ranks candidate sitters for a pet and, optionally, attaches
time-slot suggestions for the best of them.

Ranking:
    combined = 0.6 * compatibility + 0.4 * trust score
    ties -> higher trust confidence, then sitter id ascending

Compatibility comes from a pluggable scorer; the service container wires the
local TraitCompatibilityScorer. When no scorer is configured, or it fails for
a sitter, that sitter gets 0.7.

Usage:
    orchestrator = RecommendationOrchestrator(trust_scorer, slot_recommender)
    recommendations = await orchestrator.recommend(pet, preferences, sitters, limit=5)
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Protocol, runtime_checkable

from pawfect_ai.algorithms.compatibility import trait_compatibility
from pawfect_ai.algorithms.matching import (
    combined_score,
    match_reasons,
    profile_insights,
    recommendation_insights,
)
from pawfect_ai.constants.thresholds import FALLBACK_COMPATIBILITY, TIMED_SITTERS, confidence_label
from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.recommend import SitterProfileAnalysis, SitterRecommendation, TimedRecommendations
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import OwnerPreferences, SlotSuggestionResult
from pawfect_ai.schemas.trust import TrustScoreResult
from pawfect_ai.services.signals import bounded, gather_signals, resolve
from pawfect_ai.services.time_slot_recommender import TimeSlotRecommender
from pawfect_ai.services.trust_scorer import TrustScorer

logger = logging.getLogger(__name__)


@runtime_checkable
class CompatibilityScorer(Protocol):

    async def compatibility(self, pet: Pet, sitter: SitterRecord, preferences: OwnerPreferences) -> float:
        """Pet/sitter compatibility in [0, 1]."""
        ...


class TraitCompatibilityScorer:
    """Local trait-vector scorer; see algorithms.compatibility."""

    async def compatibility(self, pet: Pet, sitter: SitterRecord, preferences: OwnerPreferences) -> float:
        return trait_compatibility(pet, sitter)


class RecommendationOrchestrator:

    def __init__(
        self,
        trust_scorer: TrustScorer,
        slot_recommender: TimeSlotRecommender,
        compatibility: Optional[CompatibilityScorer] = None,
        timeout: Optional[float] = None
    ):
        self.trust_scorer = trust_scorer
        self.slot_recommender = slot_recommender
        self.compatibility = compatibility
        self.timeout = timeout

    async def _compatibility_scores(
        self,
        pet: Pet,
        sitters: List[SitterRecord],
        preferences: OwnerPreferences
    ) -> Dict[str, float]:
        if self.compatibility is None:
            return {sitter.id: FALLBACK_COMPATIBILITY for sitter in sitters}

        results = await gather_signals({
            sitter.id: bounded(self.compatibility.compatibility(pet, sitter, preferences), self.timeout)
            for sitter in sitters
        })
        scores = {}
        for sitter in sitters:
            value = resolve(results, sitter.id, lambda: FALLBACK_COMPATIBILITY).value
            try:
                scores[sitter.id] = min(1.0, max(0.0, float(value)))
            except (TypeError, ValueError):
                logger.warning(f"Compatibility for sitter {sitter.id} is not a number, using {FALLBACK_COMPATIBILITY}")
                scores[sitter.id] = FALLBACK_COMPATIBILITY
        return scores

    async def _trust_scores(self, sitters: List[SitterRecord]) -> Dict[str, TrustScoreResult]:
        results = await gather_signals({
            sitter.id: self.trust_scorer.score(sitter.id, sitter) for sitter in sitters
        })
        scores = {}
        for sitter in sitters:
            trust, ok = resolve(results, sitter.id, lambda: None)
            if ok:
                scores[sitter.id] = trust
            else:
                logger.warning(f"Dropping sitter {sitter.id} from recommendations: trust score failed")
        return scores

    async def recommend(
        self,
        pet: Pet,
        preferences: Optional[OwnerPreferences],
        candidate_sitters: List[SitterRecord],
        limit: int = 10
    ) -> List[SitterRecommendation]:
        """
        Rank candidate sitters for a pet.

        Duplicate sitter ids keep their first record. An empty candidate list
        yields an empty result.
        """
        preferences = preferences or OwnerPreferences()
        unique: Dict[str, SitterRecord] = {}
        for sitter in candidate_sitters or []:
            unique.setdefault(sitter.id, sitter)
        sitters = list(unique.values())
        if not sitters or limit < 1:
            return []

        logger.info(f"Ranking {len(sitters)} sitters for pet {pet.id}")
        trust_scores = await self._trust_scores(sitters)
        compatibility = await self._compatibility_scores(pet, sitters, preferences)

        scored = []
        for sitter in sitters:
            trust = trust_scores.get(sitter.id)
            if trust is None:
                continue
            scored.append((combined_score(compatibility[sitter.id], trust.score), sitter, trust))

        scored.sort(key=lambda item: (-item[0], -item[2].confidence, item[1].id))

        return [
            SitterRecommendation(
                rank=rank,
                sitter=sitter,
                trust_score=trust,
                compatibility_score=compatibility[sitter.id],
                combined_score=combined,
                match_reasons=match_reasons(sitter),
                match_confidence=confidence_label(combined),
            )
            for rank, (combined, sitter, trust) in enumerate(scored[:limit], start=1)
        ]

    async def recommend_with_timing(
        self,
        pet: Pet,
        preferences: Optional[OwnerPreferences],
        candidate_sitters: List[SitterRecord],
        limit: int = 10,
        date_range_days: int = 7,
        today: Optional[date] = None
    ) -> TimedRecommendations:
        """
        recommend() plus slot suggestions for the top three sitters.

        Suggestions are requested concurrently; a sitter whose suggestion
        fails is left out of time_suggestions.
        """
        recommendations = await self.recommend(pet, preferences, candidate_sitters, limit)
        top = recommendations[:TIMED_SITTERS]

        time_suggestions: Dict[str, SlotSuggestionResult] = {}
        if top:
            results = await gather_signals({
                rec.sitter.id: self.slot_recommender.suggest(
                    pet.id, rec.sitter.id, preferences, date_range_days, today
                )
                for rec in top
            })
            for rec in top:
                suggestion, ok = resolve(results, rec.sitter.id, lambda: None)
                if ok:
                    time_suggestions[rec.sitter.id] = suggestion

        return TimedRecommendations(
            recommendations=recommendations,
            time_suggestions=time_suggestions,
            insights=recommendation_insights(
                [rec.combined_score for rec in recommendations], bool(time_suggestions)
            ),
        )

    async def analyze(self, sitter_id: str) -> SitterProfileAnalysis:
        """Trust result for one sitter plus readable insights."""
        trust = await self.trust_scorer.score(sitter_id)
        return SitterProfileAnalysis(
            sitter_id=sitter_id,
            trust_score=trust,
            insights=profile_insights(trust),
        )
