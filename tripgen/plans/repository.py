"""
Storage for GeneratedPlan records.

GeneratedPlanRepository fixes the operations every backend offers. The
in-memory backend below serves a single process and the tests; the Redis
backend (redis_store.py) is shared by the API and the Celery workers.
Either way a status change is checked against the state machine and
written in one atomic step, and reads return copies.
"""

import itertools
import logging
import threading
from typing import Dict, List, Optional

from tripgen.plans.models import (
    GeneratedPlan,
    InvalidTransitionError,
    PlanNotFoundError,
    PlanStatus,
)
from tripgen.shared.contracts.plan_content import PlanContent
from tripgen.shared.logging.config import log_plan_transition


logger = logging.getLogger(__name__)


class GeneratedPlanRepository:
    def create(self, trip_id: int) -> GeneratedPlan:
        raise NotImplementedError

    def get(self, plan_id: int) -> Optional[GeneratedPlan]:
        raise NotImplementedError

    def list_for_trip(self, trip_id: int) -> List[GeneratedPlan]:
        raise NotImplementedError

    def transition(
        self,
        plan_id: int,
        status: PlanStatus,
        content: Optional[PlanContent] = None,
    ) -> GeneratedPlan:
        raise NotImplementedError

    def set_rating(self, plan_id: int, rating: int) -> GeneratedPlan:
        raise NotImplementedError

    def fail_if_open(self, plan_id: int) -> Optional[GeneratedPlan]:
        """
        Mark a non-terminal plan as failed; leave terminal plans untouched.

        Returns:
            The plan as stored afterwards, or None if it does not exist
        """
        try:
            return self.transition(plan_id, PlanStatus.FAILED)
        except PlanNotFoundError:
            return None
        except InvalidTransitionError:
            return self.get(plan_id)


class InMemoryGeneratedPlanRepository(GeneratedPlanRepository):
    def __init__(self) -> None:
        self._plans: Dict[int, GeneratedPlan] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, trip_id: int) -> GeneratedPlan:
        """Insert a new pending plan for `trip_id`."""
        with self._lock:
            plan = GeneratedPlan(id=next(self._ids), trip_id=trip_id)
            self._plans[plan.id] = plan
        logger.info(f"[plan={plan.id}] Created | trip={trip_id}, status={plan.status.value}")
        return plan.model_copy()

    def get(self, plan_id: int) -> Optional[GeneratedPlan]:
        with self._lock:
            plan = self._plans.get(plan_id)
            return plan.model_copy() if plan else None

    def list_for_trip(self, trip_id: int) -> List[GeneratedPlan]:
        """Plans for a trip, newest first."""
        with self._lock:
            plans = [p.model_copy() for p in self._plans.values() if p.trip_id == trip_id]
        return sorted(plans, key=lambda p: (p.created_at, p.id), reverse=True)

    def transition(
        self,
        plan_id: int,
        status: PlanStatus,
        content: Optional[PlanContent] = None,
    ) -> GeneratedPlan:
        """
        Move a plan to `status`, atomically.

        Raises:
            PlanNotFoundError: If the plan does not exist
            InvalidTransitionError: If the move is not allowed (e.g. out of a terminal state)
        """
        with self._lock:
            current = self._require(plan_id)
            updated = current.transitioned(status, content)
            self._plans[plan_id] = updated

        log_plan_transition(plan_id, current.status.value, updated.status.value)
        return updated.model_copy()

    def set_rating(self, plan_id: int, rating: int) -> GeneratedPlan:
        """
        The single write path for ratings.

        Raises:
            PlanNotFoundError: If the plan does not exist
            RatingRejectedError: Unless the plan is completed and the rating is 1-10
        """
        with self._lock:
            updated = self._require(plan_id).rated(rating)
            self._plans[plan_id] = updated
        logger.info(f"[plan={plan_id}] Rated | rating={rating}")
        return updated.model_copy()

    def _require(self, plan_id: int) -> GeneratedPlan:
        plan = self._plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan
