"""Job queue that hands generation jobs to Celery."""

import logging

from tripgen.jobs.payload import GenerationJob
from tripgen.jobs.tasks import generate_plan_task


logger = logging.getLogger(__name__)


class CeleryJobQueue:
    """
    Submits GenerationJobs as generate_plan_task messages.

    Args:
        task: Celery task to call (generate_plan_task unless replaced in tests)
    """

    def __init__(self, task=generate_plan_task):
        self.task = task

    def submit(self, job: GenerationJob) -> None:
        result = self.task.delay(**job.to_message())
        logger.info(f"[plan={job.generated_plan_id}] Job enqueued | task_id={result.id}")
