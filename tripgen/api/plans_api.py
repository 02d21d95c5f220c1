"""
FastAPI endpoints for generated plans.

Thin adapter over GeneratedPlanService: request a generation, read a plan,
rate a completed plan. Authentication is out of scope; callers pass the
user id explicitly.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from tripgen.container import AppContainer
from tripgen.generation.schemas import GenerationOptions
from tripgen.plans.models import GeneratedPlan, PlanNotFoundError, PlanStatus, RatingRejectedError
from tripgen.rate_limit.limiter import RateLimitExceeded


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generated_plans"])


# ============================================================================
# Request/Response Models
# ============================================================================


class CreateGeneratedPlanRequest(BaseModel):
    """Request to generate a new plan for a trip."""

    user_id: int = Field(description="Requesting user (trip owner)")
    include_budget_breakdown: bool = Field(default=True)
    include_restaurants: bool = Field(default=True)


class RateGeneratedPlanRequest(BaseModel):
    rating: int = Field(description="Rating from 1 to 10")


class GeneratedPlanResponse(BaseModel):
    id: int
    trip_id: int
    status: PlanStatus
    content: Optional[Dict[str, Any]] = Field(
        default=None, description="Plan content, present only when completed"
    )
    rating: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_plan(cls, plan: GeneratedPlan) -> "GeneratedPlanResponse":
        content = None
        if plan.status is PlanStatus.COMPLETED and plan.content is not None:
            content = plan.content.model_dump(mode="json")
        return cls(
            id=plan.id,
            trip_id=plan.trip_id,
            status=plan.status,
            content=content,
            rating=plan.rating,
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )


class CreateGeneratedPlanResponse(BaseModel):
    generated_plan: GeneratedPlanResponse
    message: str


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/trips/{trip_id}/generated_plans",
    response_model=CreateGeneratedPlanResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def create_generated_plan(
    trip_id: int,
    body: CreateGeneratedPlanRequest,
    container: AppContainer = Depends(get_container),
):
    """
    Initiate generation of a new travel plan.

    Returns 202 with the plan in 'pending' status; generation continues in
    the background.
    """
    _log = f"[trip={trip_id}] [user={body.user_id}] [api=create_generated_plan] "

    if container.sources.get_trip_owner(trip_id) != body.user_id:
        raise HTTPException(status_code=404, detail="Trip not found")

    admission = container.plans.request_generation(
        trip_id=trip_id,
        user_id=body.user_id,
        options=GenerationOptions(
            include_budget_breakdown=body.include_budget_breakdown,
            include_restaurants=body.include_restaurants,
        ),
        preferences_present=container.sources.get_preferences(body.user_id) is not None,
    )

    if not admission.allowed:
        denial = admission.denial
        logger.info(f"{_log}Denied | reason={type(denial).__name__}")
        if isinstance(denial, RateLimitExceeded):
            raise HTTPException(
                status_code=429,
                detail=str(denial),
                headers={"Retry-After": str(math.ceil(denial.retry_after_seconds))},
            )
        raise HTTPException(status_code=422, detail=str(denial))

    return CreateGeneratedPlanResponse(
        generated_plan=GeneratedPlanResponse.from_plan(admission.plan),
        message="Plan generation initiated. Please check back shortly.",
    )


@router.get("/generated_plans/{plan_id}", response_model=GeneratedPlanResponse)
async def get_generated_plan(
    plan_id: int,
    container: AppContainer = Depends(get_container),
):
    try:
        plan = container.plans.get_generated_plan(plan_id)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return GeneratedPlanResponse.from_plan(plan)


@router.patch("/generated_plans/{plan_id}", response_model=GeneratedPlanResponse)
async def rate_generated_plan(
    plan_id: int,
    body: RateGeneratedPlanRequest,
    container: AppContainer = Depends(get_container),
):
    """Rate a completed plan (1-10). Rejected with 422 for any other status."""
    try:
        plan = container.plans.rate_generated_plan(plan_id, body.rating)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RatingRejectedError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return GeneratedPlanResponse.from_plan(plan)
