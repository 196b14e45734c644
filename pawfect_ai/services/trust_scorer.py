"""
Trust Scorer

Async sitter trust scoring: feature extraction with external sentiment,
external trustworthiness estimate, blend, base score, business rules,
confidence and factors.

The external insight calls are optional signals. Every one of them is bounded
by INSIGHT_TIMEOUT_SECONDS and replaced by a deterministic fallback on any
failure, so scoring never fails because of the provider. Only data store
failures propagate.

Usage:
    scorer = TrustScorer(store, provider=LLMInsightProvider())
    result = await scorer.score("sitter-1")
"""

import logging
from typing import Optional

from pawfect_ai.algorithms.features import build_feature_vector, clamp, review_texts
from pawfect_ai.algorithms.sentiment import keyword_sentiment
from pawfect_ai.algorithms.trust_scoring import (
    LinearTrustModel,
    apply_adjustments,
    base_score,
    blend_sentiment,
    trust_confidence,
    trust_factors,
)
from pawfect_ai.constants.thresholds import NEUTRAL_SIGNAL
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.trust import FeatureVector, TrustInsight, TrustScoreResult
from pawfect_ai.services.signals import bounded, fetch_required, gather_signals, resolve
from pawfect_ai.tools.data_store import DataStore
from pawfect_ai.tools.insight_provider import ExternalInsightProvider

logger = logging.getLogger(__name__)


def neutral_insight() -> TrustInsight:
    return TrustInsight(score=NEUTRAL_SIGNAL, strengths=[], risk_factors=[])


class FeatureExtractor:
    """
    Sitter record -> FeatureVector.

    Review sentiment comes from the provider when it answers within the time
    budget, else from local keyword counting. Never raises.
    """

    def __init__(
        self,
        provider: Optional[ExternalInsightProvider] = None,
        timeout: Optional[float] = None
    ):
        self.provider = provider
        self.timeout = timeout

    async def review_sentiment(self, sitter: SitterRecord) -> float:
        texts = review_texts(sitter)
        if not texts:
            return NEUTRAL_SIGNAL

        if self.provider is not None:
            try:
                score = await bounded(self.provider.judge_sentiment(texts), self.timeout)
                return clamp(float(score))
            except Exception as e:
                logger.warning(f"External sentiment unavailable for sitter {sitter.id} ({type(e).__name__}), using keyword sentiment")

        return keyword_sentiment(texts)

    async def extract(self, sitter: SitterRecord) -> FeatureVector:
        sentiment = await self.review_sentiment(sitter)
        return build_feature_vector(sitter, sentiment)


class TrustScorer:
    """Combines features and the optional external trust estimate into a TrustScoreResult."""

    def __init__(
        self,
        store: DataStore,
        provider: Optional[ExternalInsightProvider] = None,
        model: Optional[LinearTrustModel] = None,
        timeout: Optional[float] = None
    ):
        self.store = store
        self.provider = provider
        self.model = model
        self.timeout = timeout
        self.extractor = FeatureExtractor(provider, timeout)

    async def _external_trust(self, sitter: SitterRecord) -> TrustInsight:
        if self.provider is None:
            return neutral_insight()
        return await bounded(self.provider.judge_trustworthiness(sitter), self.timeout)

    async def score(self, sitter_id: str, sitter: Optional[SitterRecord] = None) -> TrustScoreResult:
        """
        Score one sitter.

        Args:
            sitter_id: Sitter to score.
            sitter: Record to score; loaded from the data store when omitted.

        Raises:
            NotFoundError / DataUnavailableError: the store lookup failed.
        """
        if sitter is None:
            sitter = await fetch_required(self.store.get_sitter(sitter_id), "sitter")

        results = await gather_signals({
            "features": self.extractor.extract(sitter),
            "trust": self._external_trust(sitter),
        })
        features = resolve(results, "features", lambda: build_feature_vector(sitter, keyword_sentiment(review_texts(sitter)))).value
        insight, external_ok = resolve(results, "trust", neutral_insight)
        external_used = external_ok and self.provider is not None

        blended = blend_sentiment(features, insight.score)
        score = apply_adjustments(base_score(blended, self.model), sitter)

        result = TrustScoreResult(
            sitter_id=sitter_id,
            score=score,
            confidence=trust_confidence(sitter),
            factors=trust_factors(features, insight.strengths),
            risk_factors=list(insight.risk_factors),
            features=list(blended),
            external_signal_used=external_used,
        )

        logger.info(
            f"Trust score {result.score:.3f} (confidence {result.confidence:.2f}) for sitter {sitter_id}"
            f"{'' if external_used else ' without external signal'}"
        )
        return result
