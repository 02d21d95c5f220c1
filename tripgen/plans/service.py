"""
Inbound operations on generated plans.

These are the only entry points the request-handling layer uses:
- request_generation: admit (rate limiter) -> create pending row -> enqueue job
- get_generated_plan: read-only lookup
- rate_generated_plan: guarded rating write
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from tripgen.generation.schemas import GenerationOptions
from tripgen.jobs.payload import GenerationJob
from tripgen.plans.models import GeneratedPlan, PlanNotFoundError
from tripgen.plans.repository import GeneratedPlanRepository
from tripgen.rate_limit.limiter import RateLimiter, RateLimitExceeded


logger = logging.getLogger(__name__)


class PreferencesMissing(Exception):
    def __init__(self, user_id: int):
        super().__init__(
            "Cannot generate plan without user preferences. Please set your preferences first."
        )
        self.user_id = user_id


class JobQueue(Protocol):
    def submit(self, job: GenerationJob) -> None:
        ...


@dataclass(frozen=True)
class GenerationAdmission:
    """Outcome of request_generation: a pending plan, or the reason for denial."""

    plan: Optional[GeneratedPlan] = None
    denial: Optional[Union[RateLimitExceeded, PreferencesMissing]] = None

    @property
    def allowed(self) -> bool:
        return self.plan is not None


class GeneratedPlanService:
    def __init__(
        self,
        repository: GeneratedPlanRepository,
        rate_limiter: RateLimiter,
        job_queue: JobQueue,
    ):
        self.repository = repository
        self.rate_limiter = rate_limiter
        self.job_queue = job_queue

    def request_generation(
        self,
        trip_id: int,
        user_id: int,
        options: Optional[GenerationOptions] = None,
        preferences_present: bool = True,
    ) -> GenerationAdmission:
        """
        Admit a generation request and hand it to the job queue.

        The rate limiter is consulted (and incremented) strictly before the
        plan row is created; a denied request creates no row and no job.

        Args:
            trip_id: Trip to plan
            user_id: Requesting user
            options: Generation options
            preferences_present: Collaborator's answer to "does this user have preferences?"

        Returns:
            GenerationAdmission with the pending plan, or the denial
        """
        options = options or GenerationOptions()
        _log = f"[trip={trip_id}] [user={user_id}] "

        if not preferences_present:
            logger.info(f"{_log}Generation denied | reason=preferences_missing")
            return GenerationAdmission(denial=PreferencesMissing(user_id))

        decision = self.rate_limiter.check_and_increment(user_id)
        if not decision.allowed:
            logger.info(f"{_log}Generation denied | reason=rate_limited, window={decision.exceeded.window}")
            return GenerationAdmission(denial=decision.exceeded)

        plan = self.repository.create(trip_id)
        job = GenerationJob(
            generated_plan_id=plan.id,
            user_id=user_id,
            include_budget_breakdown=options.include_budget_breakdown,
            include_restaurants=options.include_restaurants,
        )
        try:
            self.job_queue.submit(job)
        except Exception:
            logger.exception(f"{_log}[plan={plan.id}] Failed to enqueue generation job")
            self.repository.fail_if_open(plan.id)
            raise

        logger.info(f"{_log}[plan={plan.id}] Generation queued")
        return GenerationAdmission(plan=plan)

    def get_generated_plan(self, plan_id: int) -> GeneratedPlan:
        plan = self.repository.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def rate_generated_plan(self, plan_id: int, rating: int) -> GeneratedPlan:
        """
        Raises:
            PlanNotFoundError: If the plan does not exist
            RatingRejectedError: Unless the plan is completed and 1 <= rating <= 10
        """
        return self.repository.set_rating(plan_id, rating)
