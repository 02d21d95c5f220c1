"""Output contracts shared between the generation service and plan records."""

from tripgen.shared.contracts.plan_content import (
    Activity,
    DailyItinerary,
    Meal,
    PlanContent,
    Restaurant,
    TripSummary,
)

__all__ = ["Activity", "DailyItinerary", "Meal", "PlanContent", "Restaurant", "TripSummary"]
