"""
External Insight Provider

Optional language-model judgements used as one input signal by the trust
scorer and the time-slot recommender.

Implementations:
- LLMInsightProvider: OpenAI-compatible chat completions endpoint over httpx
- DeterministicInsightProvider: fixed answers (or a fixed failure) for tests
  and offline runs

Every method may raise ExternalSignalUnavailableError; callers supply the
documented fallback. No retries.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from pawfect_ai.core.config import settings
from pawfect_ai.core.errors import ExternalSignalUnavailableError
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import ExternalSlotSuggestion
from pawfect_ai.schemas.trust import TrustInsight

logger = logging.getLogger(__name__)


@runtime_checkable
class ExternalInsightProvider(Protocol):

    async def judge_sentiment(self, texts: Sequence[str]) -> float:
        """Review sentiment in [0, 1]."""
        ...

    async def judge_trustworthiness(self, profile: SitterRecord) -> TrustInsight:
        ...

    async def suggest_time_slots(self, context: Dict[str, Any]) -> List[ExternalSlotSuggestion]:
        ...


# ============================================================================
# Module-level HTTP Client (Singleton with Connection Pooling)
# ============================================================================

_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    global _client

    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=settings.INSIGHT_TIMEOUT_SECONDS,
            limits=httpx.Limits(
                max_connections=settings.DEFAULT_CLIENT_MAX_CONNECTIONS,
                max_keepalive_connections=settings.DEFAULT_CLIENT_MAX_KEEPALIVE
            )
        )
        logger.info("Initialized insight provider httpx.AsyncClient")

    return _client


async def aclose_client() -> None:
    global _client

    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Closed insight provider httpx.AsyncClient")
        _client = None


# ============================================================================
# Prompts
# ============================================================================

SENTIMENT_SYSTEM = (
    "Analyze the sentiment of pet sitter reviews. Return a JSON object with "
    "'sentiment' (positive/negative/neutral) and 'score' (0-1, where 1 is very positive)."
)

TRUST_SYSTEM = (
    "You are an expert analyzing pet sitter trustworthiness. Provide objective, "
    "data-driven insights. Return a JSON object with 'trustworthiness' (0-1), "
    "'risk_factors' (array of strings) and 'strengths' (array of strings)."
)

TRUST_TEMPLATE = """Analyze this pet sitter's profile:
- Experience: {experience} years
- Total bookings: {bookings}
- Average rating: {rating:.2f}/5
- Completion rate: {completion}%
- Response time: {response} hours
- Verification: {verified}
- Background check: {background}"""

SLOTS_SYSTEM = (
    "You suggest optimal pet sitting booking times. Return a JSON object with "
    "'suggestions': an array of {date: YYYY-MM-DD, start_time: HH:MM, end_time: HH:MM, "
    "confidence: 0-1, reasoning: string}."
)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


# ============================================================================
# LLM Provider
# ============================================================================

class LLMInsightProvider:
    """
    Insight provider backed by an OpenAI-compatible chat completions API.

    Without an API key every call raises ExternalSignalUnavailableError
    immediately, so callers fall back without waiting on the network.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ):
        self.api_url = api_url or settings.INSIGHT_API_URL
        self.api_key = api_key if api_key is not None else settings.INSIGHT_API_KEY
        self.model = model or settings.INSIGHT_MODEL

        if not self.api_key:
            logger.warning("Insight API key not set; external insight disabled, local fallbacks apply")

    async def _chat(self, system: str, user: str) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalSignalUnavailableError("Insight provider not configured")

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0.3,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await get_client().post(self.api_url, json=body, headers=headers)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
            parsed = json.loads(content)
        except httpx.HTTPStatusError as e:
            raise ExternalSignalUnavailableError(
                "Insight provider error", details={"status": e.response.status_code}
            ) from e
        except httpx.HTTPError as e:
            raise ExternalSignalUnavailableError(f"Insight provider unreachable: {type(e).__name__}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ExternalSignalUnavailableError("Malformed insight response") from e

        if not isinstance(parsed, dict):
            raise ExternalSignalUnavailableError("Insight response is not a JSON object")
        return parsed

    async def judge_sentiment(self, texts: Sequence[str]) -> float:
        result = await self._chat(SENTIMENT_SYSTEM, "Analyze these reviews: " + " | ".join(texts))
        return _unit_interval(result.get("score"), "sentiment score")

    async def judge_trustworthiness(self, profile: SitterRecord) -> TrustInsight:
        prompt = TRUST_TEMPLATE.format(
            experience=profile.experience_years,
            bookings=profile.booking_count,
            rating=profile.average_rating,
            completion=profile.completion_rate,
            response=profile.response_time_hours,
            verified=_yes_no(profile.verification_status),
            background=_yes_no(profile.background_check),
        )
        result = await self._chat(TRUST_SYSTEM, prompt)
        return TrustInsight(
            score=_unit_interval(result.get("trustworthiness"), "trustworthiness"),
            strengths=_string_list(result.get("strengths")),
            risk_factors=_string_list(result.get("risk_factors")),
        )

    async def suggest_time_slots(self, context: Dict[str, Any]) -> List[ExternalSlotSuggestion]:
        result = await self._chat(SLOTS_SYSTEM, json.dumps(context, default=str))
        raw = result.get("suggestions")
        if not isinstance(raw, list):
            raise ExternalSignalUnavailableError("Insight response has no suggestions")
        try:
            return [
                ExternalSlotSuggestion.model_validate({
                    "date": item.get("date"),
                    "start_time": item.get("start_time") or item.get("startTime"),
                    "end_time": item.get("end_time") or item.get("endTime"),
                    "confidence": item.get("confidence"),
                    "reasoning": item.get("reasoning") or "",
                })
                for item in raw
            ]
        except (AttributeError, PydanticValidationError) as e:
            raise ExternalSignalUnavailableError("Malformed slot suggestion") from e


def _unit_interval(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExternalSignalUnavailableError(f"Missing {what}")
    if not 0.0 <= value <= 1.0:
        raise ExternalSignalUnavailableError(f"{what} out of range: {value}")
    return float(value)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


# ============================================================================
# Deterministic Provider
# ============================================================================

class DeterministicInsightProvider:
    """
    Provider with fixed answers.

    A None answer (or a configured `error`) makes the call raise
    ExternalSignalUnavailableError. `delay` sleeps before answering so tests
    can exercise the caller's timeout. Calls are recorded in `calls`.
    """

    def __init__(
        self,
        sentiment: Optional[float] = None,
        trust: Optional[TrustInsight] = None,
        slots: Optional[List[ExternalSlotSuggestion]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0
    ):
        self.sentiment = sentiment
        self.trust = trust
        self.slots = slots
        self.error = error
        self.delay = delay
        self.calls: List[str] = []

    async def _answer(self, name: str, value: Any) -> Any:
        self.calls.append(name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if value is None:
            raise ExternalSignalUnavailableError(f"No fixed answer for {name}")
        return value

    async def judge_sentiment(self, texts: Sequence[str]) -> float:
        return await self._answer("judge_sentiment", self.sentiment)

    async def judge_trustworthiness(self, profile: SitterRecord) -> TrustInsight:
        return await self._answer("judge_trustworthiness", self.trust)

    async def suggest_time_slots(self, context: Dict[str, Any]) -> List[ExternalSlotSuggestion]:
        return list(await self._answer("suggest_time_slots", self.slots))
