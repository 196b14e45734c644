"""
Pet / Sitter Compatibility

Local trait-vector matching used when no external compatibility service is
configured.

Both sides are encoded on the same axes:

    size, age, energy, special needs, baseline

The pet vector is what the pet demands on each axis, the sitter vector what
the sitter can cover. Sitter capability is capped at the pet's demand, so
over-qualification neither helps nor hurts, and the score is the cosine
similarity of the two vectors. All components are non-negative, so the
result lies in [0, 1] and a sitter covering every demand scores 1.0.
"""

import math
from typing import Any, List, Optional, Sequence

from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.sitter import SitterRecord

SIZE_LEVELS = {"small": 0.25, "medium": 0.5, "large": 0.75, "extra-large": 1.0, "xl": 1.0, "giant": 1.0}
ENERGY_LEVELS = {"low": 0.25, "medium": 0.5, "high": 0.75, "very-high": 1.0}

MAX_PET_AGE_YEARS = 20
SPECIAL_NEEDS_SCALE = 3
# Years of experience (and certifications) after which a sitter covers any demand
EXPERIENCE_SCALE_YEARS = 5
CERTIFICATIONS_SCALE = 2
# Anyone can look after a small, young pet
MIN_HANDLING = 0.25
BASELINE = 0.5


def normalize_size(size: Optional[str]) -> float:
    """
    Example:
        >>> normalize_size("Large")
        0.75
        >>> normalize_size(None)
        0.5
    """
    if not isinstance(size, str):
        return SIZE_LEVELS["medium"]
    return SIZE_LEVELS.get(size.strip().lower(), SIZE_LEVELS["medium"])


def normalize_age(age_years: Optional[float]) -> float:
    if not age_years:
        return 0.0
    return min(1.0, max(0.0, age_years / MAX_PET_AGE_YEARS))


def normalize_energy_level(level: Any) -> float:
    if not isinstance(level, str):
        return ENERGY_LEVELS["medium"]
    return ENERGY_LEVELS.get(level.strip().lower(), ENERGY_LEVELS["medium"])


def pet_traits(pet: Pet) -> List[float]:
    """Demand vector. Energy is read from an `energy_level` extra field when present."""
    extra = pet.model_extra or {}
    return [
        normalize_size(pet.size),
        normalize_age(pet.age_years),
        normalize_energy_level(extra.get("energy_level")),
        min(1.0, len(pet.special_needs) / SPECIAL_NEEDS_SCALE),
        BASELINE,
    ]


def sitter_traits(sitter: SitterRecord) -> List[float]:
    """Capability vector on the same axes as pet_traits."""
    extra = sitter.model_extra or {}
    handling = max(MIN_HANDLING, min(1.0, sitter.experience_years / EXPERIENCE_SCALE_YEARS))
    return [
        handling,
        handling,
        normalize_energy_level(extra.get("energy_level")),
        min(1.0, len(sitter.certifications) / CERTIFICATIONS_SCALE),
        BASELINE,
    ]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """0.0 when either vector has zero magnitude."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def trait_compatibility(pet: Pet, sitter: SitterRecord) -> float:
    demand = pet_traits(pet)
    covered = [min(capability, need) for capability, need in zip(sitter_traits(sitter), demand)]
    return round(min(1.0, max(0.0, cosine_similarity(demand, covered))), 4)
