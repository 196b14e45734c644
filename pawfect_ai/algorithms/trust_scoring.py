"""
Trust Scoring Algorithm

Deterministic part of sitter trust scoring: base score, business-rule
adjustments, confidence and explanatory factors.

Adjustments are an ordered tuple of pure functions folded over the running
score; the score is clamped to [0, 1] after every step.

No randomness. The optional trained model is a plain linear model read from a
JSON weights file.
"""

import json
import logging
import math
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

from pawfect_ai.algorithms.features import clamp
from pawfect_ai.constants.thresholds import (
    BOOKINGS_FOR_CONFIDENCE,
    BOOKINGS_FOR_HIGH_CONFIDENCE,
    EXPERIENCE_BONUS,
    EXPERIENCE_BONUS_MIN_YEARS,
    EXTERNAL_TRUST_WEIGHT,
    HIGH_CANCELLATION_PENALTY,
    HIGH_CANCELLATION_RATE,
    LOCAL_SENTIMENT_WEIGHT,
    REVIEWS_FOR_CONFIDENCE,
    REVIEWS_FOR_HIGH_CONFIDENCE,
    SLOW_RESPONSE_HOURS,
    SLOW_RESPONSE_PENALTY,
    TRUST_BASE_CONFIDENCE,
    VERIFIED_BONUS,
)
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.trust import FEATURE_COUNT, FeatureVector

logger = logging.getLogger(__name__)

Adjustment = Callable[[float, SitterRecord], float]


# ============================================================================
# Blending and Base Score
# ============================================================================

def blend_sentiment(features: FeatureVector, external_estimate: float) -> FeatureVector:
    """sentiment := 0.7 * sentiment + 0.3 * external estimate; other features untouched."""
    blended = LOCAL_SENTIMENT_WEIGHT * features.sentiment + EXTERNAL_TRUST_WEIGHT * clamp(external_estimate)
    return features.with_sentiment(clamp(blended))


def sigmoid(z: float) -> float:
    """Logistic function that does not overflow for large |z|."""
    if z >= 0:
        return 1 / (1 + math.exp(-z))
    e = math.exp(z)
    return e / (1 + e)


class LinearTrustModel:
    """
    Trained linear trust model: sigmoid(weights . features + bias).

    Weights file format:
        {"weights": [15 floats], "bias": float, "version": "optional"}
    """

    def __init__(self, weights: Sequence[float], bias: float = 0.0, version: str = "unknown"):
        if len(weights) != FEATURE_COUNT:
            raise ValueError(f"expected {FEATURE_COUNT} weights, got {len(weights)}")
        self.weights = tuple(float(w) for w in weights)
        self.bias = float(bias)
        self.version = version

    def predict(self, features: FeatureVector) -> float:
        z = self.bias + sum(w * x for w, x in zip(self.weights, features))
        return sigmoid(z)


def load_trust_model(path: Optional[str]) -> Optional[LinearTrustModel]:
    """
    Load the linear trust model from a JSON file.

    Returns None (mean-of-vector proxy) when no path is configured or the
    file is missing or malformed.
    """
    if not path:
        return None

    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
        model = LinearTrustModel(
            weights=raw["weights"],
            bias=raw.get("bias", 0.0),
            version=str(raw.get("version", "unknown")),
        )
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Trust model at {path} unusable, using mean proxy: {e}")
        return None

    logger.info(f"Loaded trust model version={model.version} from {path}")
    return model


def base_score(features: FeatureVector, model: Optional[LinearTrustModel] = None) -> float:
    """Model prediction when a model is loaded, else the mean of the vector."""
    if model is None:
        return clamp(features.mean())
    return clamp(model.predict(features))


# ============================================================================
# Business-Rule Adjustments (applied in order)
# ============================================================================

def verified_bonus(score: float, sitter: SitterRecord) -> float:
    return score + VERIFIED_BONUS if sitter.verification_status else score


def experience_bonus(score: float, sitter: SitterRecord) -> float:
    return score + EXPERIENCE_BONUS if sitter.experience_years >= EXPERIENCE_BONUS_MIN_YEARS else score


def cancellation_penalty(score: float, sitter: SitterRecord) -> float:
    return score - HIGH_CANCELLATION_PENALTY if sitter.cancellation_rate > HIGH_CANCELLATION_RATE else score


def slow_response_penalty(score: float, sitter: SitterRecord) -> float:
    return score - SLOW_RESPONSE_PENALTY if sitter.response_time_hours > SLOW_RESPONSE_HOURS else score


ADJUSTMENTS: Tuple[Adjustment, ...] = (
    verified_bonus,
    experience_bonus,
    cancellation_penalty,
    slow_response_penalty,
)


def apply_adjustments(
    score: float,
    sitter: SitterRecord,
    adjustments: Sequence[Adjustment] = ADJUSTMENTS
) -> float:
    """
    Fold adjustments over the score, clamping after each one.

    Example:
        verified, 3 years experience, base 0.6 -> 0.6 + 0.10 + 0.05 = 0.75
    """
    return reduce(lambda running, adjust: clamp(adjust(running, sitter)), adjustments, clamp(score))


# ============================================================================
# Confidence and Factors
# ============================================================================

def trust_confidence(sitter: SitterRecord) -> float:
    """Confidence from data volume and verification, independent of the score."""
    confidence = TRUST_BASE_CONFIDENCE

    bookings = sitter.booking_count
    if bookings >= BOOKINGS_FOR_CONFIDENCE:
        confidence += 0.2
    if bookings >= BOOKINGS_FOR_HIGH_CONFIDENCE:
        confidence += 0.1

    reviews = len(sitter.reviews)
    if reviews >= REVIEWS_FOR_CONFIDENCE:
        confidence += 0.1
    if reviews >= REVIEWS_FOR_HIGH_CONFIDENCE:
        confidence += 0.1

    if sitter.verification_status:
        confidence += 0.1
    if sitter.background_check:
        confidence += 0.1

    return clamp(confidence)


# (feature, threshold, label) - a label applies when the feature exceeds the threshold
FACTOR_RULES: Tuple[Tuple[str, float, str], ...] = (
    ("sentiment", 0.8, "Excellent review sentiment"),
    ("response_time", 0.8, "Fast response time"),
    ("completion", 0.9, "High completion rate"),
    ("rating", 0.8, "High average rating"),
    ("reliability", 0.8, "Reliable booking patterns"),
    ("verification", 0.8, "Strong verification status"),
    ("experience", 0.7, "Significant experience"),
    ("booking_volume", 0.5, "High booking volume"),
)


def trust_factors(features: FeatureVector, strengths: Sequence[str] = ()) -> List[str]:
    """Feature labels in rule order, then external strengths. Duplicates kept."""
    factors = [
        label for name, threshold, label in FACTOR_RULES
        if getattr(features, name) > threshold
    ]
    factors.extend(s for s in strengths if isinstance(s, str) and s)
    return factors
