"""
GeneratedPlan record and its status state machine.

pending -> generating -> completed | failed

completed and failed are terminal. Content is present exactly when the plan
is completed, and a rating (1-10) may only be set on a completed plan.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

from tripgen.shared.contracts.plan_content import PlanContent


MIN_RATING = 1
MAX_RATING = 10


class PlanStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: FrozenSet[PlanStatus] = frozenset({PlanStatus.COMPLETED, PlanStatus.FAILED})

ALLOWED_TRANSITIONS: Dict[PlanStatus, FrozenSet[PlanStatus]] = {
    PlanStatus.PENDING: frozenset({PlanStatus.GENERATING, PlanStatus.FAILED}),
    PlanStatus.GENERATING: frozenset({PlanStatus.COMPLETED, PlanStatus.FAILED}),
    PlanStatus.COMPLETED: frozenset(),
    PlanStatus.FAILED: frozenset(),
}


class PlanNotFoundError(LookupError):
    def __init__(self, plan_id: int):
        super().__init__(f"Generated plan {plan_id} not found")
        self.plan_id = plan_id


class InvalidTransitionError(Exception):
    def __init__(self, plan_id: int, from_status: PlanStatus, to_status: PlanStatus):
        super().__init__(
            f"Generated plan {plan_id} cannot move from {from_status.value} to {to_status.value}"
        )
        self.plan_id = plan_id
        self.from_status = from_status
        self.to_status = to_status


class RatingRejectedError(ValueError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeneratedPlan(BaseModel):
    """One generation attempt for a trip, and its result."""

    id: int
    trip_id: int
    status: PlanStatus = PlanStatus.PENDING
    content: Optional[PlanContent] = None
    rating: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def can_transition_to(self, status: PlanStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]

    def transitioned(self, status: PlanStatus, content: Optional[PlanContent] = None) -> "GeneratedPlan":
        """
        Return a copy moved to `status`.

        Raises:
            InvalidTransitionError: If the move is not allowed from the current status
            ValueError: If content is missing for completed, or given for any other status
        """
        if not self.can_transition_to(status):
            raise InvalidTransitionError(self.id, self.status, status)
        if status is PlanStatus.COMPLETED and content is None:
            raise ValueError("Content is required to complete a generated plan")
        if status is not PlanStatus.COMPLETED and content is not None:
            raise ValueError(f"Content may only be stored on completed plans, not {status.value}")

        return self.model_copy(update={"status": status, "content": content, "updated_at": utcnow()})

    def rated(self, rating: int) -> "GeneratedPlan":
        """
        Return a copy carrying `rating`.

        Raises:
            RatingRejectedError: Unless the plan is completed and 1 <= rating <= 10
        """
        if self.status is not PlanStatus.COMPLETED:
            raise RatingRejectedError("Rating can only be set for completed plans")
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise RatingRejectedError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")

        return self.model_copy(update={"rating": rating, "updated_at": utcnow()})
