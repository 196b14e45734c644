"""
Pet Schemas

Pet records and the care patterns the time-slot recommender rewards.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeBand(BaseModel):
    """Preferred care band with the owner's confidence in it."""
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=1, le=24)
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class PetCarePatterns(BaseModel):
    """
    Preferred morning/afternoon/evening bands and feeding hours.

    The defaults describe a typical pet: strongest in the morning, weakest in
    the evening, fed at 08:00, 12:00 and 18:00.
    """
    morning: TimeBand = Field(default_factory=lambda: TimeBand(start_hour=8, end_hour=12, confidence=0.8))
    afternoon: TimeBand = Field(default_factory=lambda: TimeBand(start_hour=12, end_hour=16, confidence=0.6))
    evening: TimeBand = Field(default_factory=lambda: TimeBand(start_hour=16, end_hour=20, confidence=0.4))
    feeding_hours: List[int] = Field(default_factory=lambda: [8, 12, 18])

    @property
    def bands(self) -> List[TimeBand]:
        return [self.morning, self.afternoon, self.evening]

    @property
    def average_confidence(self) -> float:
        return sum(band.confidence for band in self.bands) / 3


class Pet(BaseModel):
    """Pet owned by a single owner."""
    id: str = Field(..., description="Pet identifier")
    owner_id: str = Field(..., description="Owning user")
    name: Optional[str] = None
    species: Optional[str] = Field(None, description="dog, cat, ...")
    breed: Optional[str] = None
    size: Optional[str] = None
    age_years: Optional[float] = Field(None, ge=0)
    special_needs: List[str] = Field(default_factory=list)
    care_patterns: Optional[PetCarePatterns] = None

    model_config = ConfigDict(extra="allow")
