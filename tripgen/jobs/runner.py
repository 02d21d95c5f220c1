"""
Generation job runner.

Runs the job graph for one GenerationJob under a hard wall-clock budget.
Whatever happens (timeout, unexpected exception, a graph that somehow ends
early) a plan that was started ends up completed or failed, never stuck in
generating. Failures are logged here and not re-raised.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from tripgen.graph.build import build_initial_state
from tripgen.graph.config import DEFAULT_CONFIG, JobConfig
from tripgen.jobs.payload import GenerationJob
from tripgen.plans.models import PlanStatus
from tripgen.plans.repository import GeneratedPlanRepository
from tripgen.shared.logging.config import log_job_event


logger = logging.getLogger(__name__)


class GenerationJobRunner:
    """
    Executes compiled job graphs with a per-job timeout.

    A timed-out graph run is abandoned rather than interrupted; any write it
    attempts afterwards is rejected by the repository's transition guard.

    Args:
        graph: Compiled graph from create_generation_job_graph
        repository: Generated plan storage (used to force failures)
        config: Execution limits. Uses DEFAULT_CONFIG if not provided.
    """

    def __init__(
        self,
        graph,
        repository: GeneratedPlanRepository,
        config: Optional[JobConfig] = None,
    ):
        self.graph = graph
        self.repository = repository
        self.config = config or DEFAULT_CONFIG
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_in_flight,
            thread_name_prefix="tripgen-generation",
        )

    def run(self, job: GenerationJob) -> Optional[PlanStatus]:
        """
        Run one job to completion or timeout.

        Returns:
            The plan's final status, or None if the plan does not exist
        """
        plan_id = job.generated_plan_id
        _log = f"[plan={plan_id}] [user={job.user_id}] [runner] "
        logger.info(f"{_log}Job starting | timeout={self.config.job_timeout_seconds}s")

        future = self._executor.submit(
            self.graph.invoke,
            build_initial_state(job),
            {"recursion_limit": self.config.recursion_limit},
        )

        try:
            final_state = future.result(timeout=self.config.job_timeout_seconds)
        except FutureTimeoutError:
            log_job_event(
                "generation_job_timed_out",
                plan_id,
                f"{_log}Job exceeded {self.config.job_timeout_seconds}s budget, failing plan",
                level=logging.ERROR,
                logger=logger,
                timeout_seconds=self.config.job_timeout_seconds,
            )
            return self._force_fail(plan_id)
        except Exception as e:
            logger.exception(f"{_log}Job crashed: {e}")
            return self._force_fail(plan_id)

        plan = self.repository.get(plan_id)
        if plan is None:
            logger.info(f"{_log}Job finished | plan missing")
            return None

        if final_state.get("aborted"):
            logger.info(f"{_log}Job skipped | status={plan.status.value}")
            return plan.status

        if not plan.status.is_terminal:
            logger.error(f"{_log}Job ended with plan still {plan.status.value}, failing plan")
            return self._force_fail(plan_id)

        errors = final_state.get("errors", [])
        log_job_event(
            "generation_job_finished",
            plan_id,
            f"{_log}Job finished | status={plan.status.value}, errors={len(errors)}",
            logger=logger,
            status=plan.status.value,
            errors=errors,
        )
        return plan.status

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    def _force_fail(self, plan_id: int) -> Optional[PlanStatus]:
        plan = self.repository.fail_if_open(plan_id)
        return plan.status if plan else None
