"""
Schemas for the generation service.

Defines the preference enumerations and the ephemeral GenerationRequest that
the job orchestrator assembles from collaborator-provided values.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Preference Enumerations
# =============================================================================


class Budget(str, Enum):
    BUDGET_CONSCIOUS = "budget_conscious"
    STANDARD = "standard"
    LUXURY = "luxury"


class Accommodation(str, Enum):
    HOTEL = "hotel"
    AIRBNB = "airbnb"
    HOSTEL = "hostel"
    RESORT = "resort"
    CAMPING = "camping"


class ActivityPreference(str, Enum):
    OUTDOORS = "outdoors"
    SIGHTSEEING = "sightseeing"
    CULTURAL = "cultural"
    RELAXATION = "relaxation"
    ADVENTURE = "adventure"
    NIGHTLIFE = "nightlife"
    SHOPPING = "shopping"


class EatingHabit(str, Enum):
    RESTAURANTS_ONLY = "restaurants_only"
    SELF_PREPARED = "self_prepared"
    MIX = "mix"


# =============================================================================
# Request Models
# =============================================================================


class TripFacts(BaseModel):
    """Trip facts supplied by the trip collaborator. Checked by input_validator."""

    destination: str = Field(description="Trip destination")
    start_date: date = Field(description="First day of the trip")
    end_date: date = Field(description="Last day of the trip")
    group_size: int = Field(description="Number of travelers")

    @property
    def duration_days(self) -> int:
        """Inclusive day count: a 15th-17th trip lasts 3 days."""
        return (self.end_date - self.start_date).days + 1


class Preferences(BaseModel):
    """User travel preferences. Every field is optional."""

    budget: Optional[Budget] = None
    accommodation: Optional[Accommodation] = None
    activities: List[ActivityPreference] = Field(default_factory=list)
    eating_habits: Optional[EatingHabit] = None

    def is_empty(self) -> bool:
        return (
            self.budget is None
            and self.accommodation is None
            and not self.activities
            and self.eating_habits is None
        )


class GenerationOptions(BaseModel):
    include_budget_breakdown: bool = True
    include_restaurants: bool = True


class GenerationRequest(BaseModel):
    """Everything the generation service needs for one attempt."""

    trip: TripFacts
    preferences: Preferences = Field(default_factory=Preferences)
    notes: List[str] = Field(default_factory=list)
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @property
    def duration_days(self) -> int:
        return self.trip.duration_days
