"""
Generated plan content contract.

Defines the structured itinerary that a successful generation produces and
that is stored on GeneratedPlan.content. The JSON schema sent to the model
(generation/schema_builder.py) mirrors these models field for field.

Range checks (ratings, costs, day numbering) are not field constraints here;
generation/plan_validator.py reports them as business validation failures.
"""

import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Meal(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class Activity(BaseModel):
    """A scheduled activity within a day."""

    model_config = ConfigDict(extra="forbid")

    time: str = Field(description='Start time (e.g., "10:00 AM")')
    name: str = Field(description="Activity name")
    duration_minutes: int = Field(description="Duration in minutes")
    estimated_cost_usd: float = Field(description="Total cost for all people")
    estimated_cost_per_person_usd: float = Field(description="Cost per person")
    rating: float = Field(description="Rating from 0.0 to 5.0")
    description: str = Field(description="Activity description")


class Restaurant(BaseModel):
    """A restaurant recommendation for one meal."""

    model_config = ConfigDict(extra="forbid")

    meal: Meal = Field(description="Meal type: breakfast, lunch, or dinner")
    name: str = Field(description="Restaurant name")
    cuisine: str = Field(description="Type of cuisine")
    estimated_cost_per_person_usd: float = Field(description="Cost per person")
    rating: float = Field(description="Rating from 0.0 to 5.0")


class DailyItinerary(BaseModel):
    """One day of the itinerary."""

    model_config = ConfigDict(extra="forbid")

    day: int = Field(description="Day number (1, 2, 3, etc.)")
    date: datetime.date = Field(description="Date in YYYY-MM-DD format")
    activities: List[Activity] = Field(default_factory=list)
    restaurants: List[Restaurant] = Field(default_factory=list)


class TripSummary(BaseModel):
    """Totals for the whole trip."""

    model_config = ConfigDict(extra="forbid")

    total_cost_usd: float = Field(description="Total estimated cost for all people")
    cost_per_person_usd: float = Field(description="Cost per person")
    duration_days: int = Field(description="Number of days")
    number_of_people: int = Field(description="Number of travelers")


class PlanContent(BaseModel):
    """
    Complete generated plan content (v1).

    This is the top-level structure stored on a completed GeneratedPlan.
    """

    model_config = ConfigDict(extra="forbid")

    summary: TripSummary
    daily_itinerary: List[DailyItinerary] = Field(default_factory=list)

    def to_json_string(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, json_string: str) -> "PlanContent":
        return cls.model_validate_json(json_string)
