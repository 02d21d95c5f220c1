"""
Background generation jobs.

- payload: primitive job message
- runner: executes the job graph under the per-job timeout
- celery_app / tasks: the Celery app and the generate_plan task
- queue: CeleryJobQueue, the submit side used by the API
"""

from tripgen.jobs.payload import GenerationJob

__all__ = ["GenerationJob"]
