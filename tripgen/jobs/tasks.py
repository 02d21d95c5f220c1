"""
Celery tasks for generation jobs.

A worker process builds its GenerationJobRunner once, on the first task,
from the environment. The API process binds the runner it already built
(used when tasks run eagerly), and unbinds it on shutdown.
"""

import logging
import threading
import time
from typing import Optional

from tripgen.jobs.celery_app import celery_app
from tripgen.jobs.payload import GenerationJob
from tripgen.jobs.runner import GenerationJobRunner


logger = logging.getLogger(__name__)

_runner: Optional[GenerationJobRunner] = None
_runner_lock = threading.Lock()


def bind_runner(runner: Optional[GenerationJobRunner]) -> None:
    global _runner
    with _runner_lock:
        _runner = runner


def get_runner() -> GenerationJobRunner:
    global _runner
    with _runner_lock:
        if _runner is None:
            from tripgen.container import build_container

            logger.info("[CELERY] Building generation runner from environment")
            _runner = build_container().runner
        return _runner


@celery_app.task(name="tripgen.jobs.generate_plan")
def generate_plan_task(
    generated_plan_id: int,
    user_id: int,
    include_budget_breakdown: bool = True,
    include_restaurants: bool = True,
) -> Optional[str]:
    """Drive one generated plan to completed or failed. Never retried."""
    task_start = time.time()
    job = GenerationJob.from_message(
        {
            "generated_plan_id": generated_plan_id,
            "user_id": user_id,
            "include_budget_breakdown": include_budget_breakdown,
            "include_restaurants": include_restaurants,
        }
    )
    logger.info(f"[CELERY] [plan={generated_plan_id}] Generation task STARTED | user={user_id}")

    status = get_runner().run(job)

    elapsed = time.time() - task_start
    logger.info(
        f"[CELERY] [plan={generated_plan_id}] Generation task finished in {elapsed:.2f}s | "
        f"status={status.value if status else None}"
    )
    return status.value if status else None
