"""Generated plan records, storage, collaborator data and inbound operations."""

from tripgen.plans.models import (
    GeneratedPlan,
    InvalidTransitionError,
    PlanNotFoundError,
    PlanStatus,
    RatingRejectedError,
)
from tripgen.plans.repository import GeneratedPlanRepository, InMemoryGeneratedPlanRepository
from tripgen.plans.service import GeneratedPlanService, GenerationAdmission, PreferencesMissing
from tripgen.plans.sources import InMemoryTripDataSource, TripDataSource, TripNotFoundError
from tripgen.plans.redis_store import RedisGeneratedPlanRepository, RedisTripDataSource

__all__ = [
    "GeneratedPlan",
    "InvalidTransitionError",
    "PlanNotFoundError",
    "PlanStatus",
    "RatingRejectedError",
    "GeneratedPlanRepository",
    "InMemoryGeneratedPlanRepository",
    "RedisGeneratedPlanRepository",
    "GeneratedPlanService",
    "GenerationAdmission",
    "PreferencesMissing",
    "TripDataSource",
    "InMemoryTripDataSource",
    "RedisTripDataSource",
    "TripNotFoundError",
]
