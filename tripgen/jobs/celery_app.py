"""
Celery application for background generation jobs.

Redis (REDIS_URL) is both broker and result backend. Run a worker with:

    celery -A tripgen.jobs.celery_app worker --loglevel=info

CELERY_TASK_ALWAYS_EAGER=1 runs tasks inline in the submitting process.
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from tripgen.graph.config import JobConfig


_job_config = JobConfig.from_env()

celery_app = Celery(
    "tripgen",
    broker=_job_config.redis_url,
    backend=_job_config.redis_url,
    include=["tripgen.jobs.tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_track_started=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_always_eager=_job_config.task_always_eager,
)


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    # Use the service's log format instead of Celery's own handlers.
    from tripgen.main import configure_logging

    configure_logging()
