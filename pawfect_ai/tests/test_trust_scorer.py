"""
Trust Scorer Tests

Trust scoring with a deterministic insight provider, failing and slow
providers, and store failures.

Run: pytest pawfect_ai/tests/test_trust_scorer.py -v
"""

import pytest

from pawfect_ai.algorithms.features import review_texts
from pawfect_ai.algorithms.sentiment import keyword_sentiment
from pawfect_ai.algorithms.trust_scoring import apply_adjustments, base_score
from pawfect_ai.core.errors import DataUnavailableError, ExternalSignalUnavailableError, NotFoundError
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.trust import FeatureVector, TrustInsight
from pawfect_ai.services.trust_scorer import FeatureExtractor, TrustScorer
from pawfect_ai.tools.insight_provider import DeterministicInsightProvider
from pawfect_ai.tools.memory_store import InMemoryDataStore


class BrokenStore(InMemoryDataStore):
    async def get_sitter(self, sitter_id: str) -> SitterRecord:
        raise RuntimeError("connection reset")


# ==================== Fallback Tests ====================

@pytest.mark.asyncio
async def test_failing_provider_blends_keyword_sentiment_with_neutral(store, sitter):
    """Sentiment feature becomes 0.7 * keyword sentiment + 0.3 * 0.5."""
    provider = DeterministicInsightProvider(error=ExternalSignalUnavailableError("down"))
    scorer = TrustScorer(store, provider)

    result = await scorer.score("sitter-1")

    local = keyword_sentiment(review_texts(sitter))
    assert result.features[0] == pytest.approx(0.7 * local + 0.15)
    assert result.external_signal_used is False
    assert result.risk_factors == []
    assert 0.0 <= result.score <= 1.0
    assert set(provider.calls) == {"judge_sentiment", "judge_trustworthiness"}


@pytest.mark.asyncio
async def test_no_provider_matches_failing_provider(store):
    failing = TrustScorer(store, DeterministicInsightProvider(error=ExternalSignalUnavailableError("down")))
    absent = TrustScorer(store)

    with_failure = await failing.score("sitter-1")
    without_provider = await absent.score("sitter-1")

    assert without_provider.score == pytest.approx(with_failure.score)
    assert without_provider.features == pytest.approx(with_failure.features)
    assert without_provider.external_signal_used is False


@pytest.mark.asyncio
async def test_slow_provider_times_out_to_fallback(store, sitter):
    provider = DeterministicInsightProvider(
        sentiment=1.0,
        trust=TrustInsight(score=1.0),
        delay=0.5
    )
    scorer = TrustScorer(store, provider, timeout=0.01)

    result = await scorer.score("sitter-1")

    local = keyword_sentiment(review_texts(sitter))
    assert result.features[0] == pytest.approx(0.7 * local + 0.15)
    assert result.external_signal_used is False


# ==================== External Signal Tests ====================

@pytest.mark.asyncio
async def test_external_signals_are_blended_and_reported(store):
    provider = DeterministicInsightProvider(
        sentiment=0.9,
        trust=TrustInsight(score=0.8, strengths=["Punctual"], risk_factors=["New to the area"])
    )
    scorer = TrustScorer(store, provider)

    result = await scorer.score("sitter-1")

    assert result.features[0] == pytest.approx(0.7 * 0.9 + 0.3 * 0.8)
    assert result.external_signal_used is True
    assert result.factors[0] == "Excellent review sentiment"
    assert result.factors[-1] == "Punctual"
    assert result.risk_factors == ["New to the area"]


@pytest.mark.asyncio
async def test_score_applies_business_rules_to_blended_base(store, sitter):
    scorer = TrustScorer(store)

    result = await scorer.score("sitter-1")

    expected = apply_adjustments(base_score(FeatureVector(*result.features)), sitter)
    assert result.score == pytest.approx(expected)
    assert result.confidence == pytest.approx(0.9)


@pytest.mark.asyncio
async def test_scoring_is_deterministic(store):
    provider = DeterministicInsightProvider(sentiment=0.7, trust=TrustInsight(score=0.6))
    scorer = TrustScorer(store, provider)

    first = await scorer.score("sitter-1")
    second = await scorer.score("sitter-1")

    assert first.score == second.score
    assert first.features == second.features
    assert first.factors == second.factors


@pytest.mark.asyncio
async def test_sitter_without_reviews_skips_sentiment_call():
    provider = DeterministicInsightProvider(sentiment=0.1)
    extractor = FeatureExtractor(provider)

    features = await extractor.extract(SitterRecord(id="quiet"))

    assert features.sentiment == 0.5
    assert provider.calls == []


@pytest.mark.asyncio
async def test_scoring_a_supplied_record_skips_the_store():
    scorer = TrustScorer(BrokenStore())

    result = await scorer.score("inline", SitterRecord(id="inline", verification_status=True))

    assert result.sitter_id == "inline"
    assert 0.0 <= result.score <= 1.0


# ==================== Store Failure Tests ====================

@pytest.mark.asyncio
async def test_unknown_sitter_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await TrustScorer(store).score("nobody")


@pytest.mark.asyncio
async def test_store_failure_raises_data_unavailable():
    with pytest.raises(DataUnavailableError):
        await TrustScorer(BrokenStore()).score("sitter-1")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
