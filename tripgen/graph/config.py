"""
Configuration for generation jobs.

Centralizes the execution limits for the job graph and runner, plus where
jobs and shared state live (Redis URL, storage backend, Celery eager mode).
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


STORAGE_BACKENDS = ("memory", "redis")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class JobConfig:
    """
    Execution limits and infrastructure for generation jobs.

    Attributes:
        recursion_limit: Maximum number of graph steps
        job_timeout_seconds: Hard wall-clock budget per job; exceeding it fails the plan
        max_in_flight: Threads available for graph runs (including abandoned timed-out runs)
        redis_url: Celery broker, result backend and shared storage
        storage_backend: "memory" (single process) or "redis" (API and workers share state)
        task_always_eager: Run Celery tasks inline instead of through the broker
    """

    recursion_limit: int = 10
    job_timeout_seconds: float = 120.0
    max_in_flight: int = 8
    redis_url: str = "redis://localhost:6379/0"
    storage_backend: str = "memory"
    task_always_eager: bool = False

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {STORAGE_BACKENDS}, got {self.storage_backend!r}"
            )

    @classmethod
    def from_env(cls) -> "JobConfig":
        load_dotenv()
        return cls(
            job_timeout_seconds=float(os.environ.get("GENERATION_JOB_TIMEOUT_SECONDS", "120")),
            max_in_flight=int(os.environ.get("GENERATION_MAX_IN_FLIGHT", "8")),
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
            storage_backend=os.environ.get("STORAGE_BACKEND", "memory").lower(),
            task_always_eager=_env_flag("CELERY_TASK_ALWAYS_EAGER"),
        )


# Default configuration instance
DEFAULT_CONFIG = JobConfig()
