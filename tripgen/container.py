"""
Application wiring.

Builds the object graph (storage, limiter, LLM client, generation service,
job graph, runner, Celery job queue) from explicit configuration values.
The API process and the Celery workers both build theirs here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import redis

from tripgen.generation.config import GenerationConfig
from tripgen.generation.service import GenerationService
from tripgen.graph.build import create_generation_job_graph
from tripgen.graph.config import JobConfig
from tripgen.jobs.queue import CeleryJobQueue
from tripgen.jobs.runner import GenerationJobRunner
from tripgen.jobs.tasks import bind_runner
from tripgen.plans.redis_store import (
    RedisGeneratedPlanRepository,
    RedisTripDataSource,
    get_redis_client,
)
from tripgen.plans.repository import GeneratedPlanRepository, InMemoryGeneratedPlanRepository
from tripgen.plans.service import GeneratedPlanService, JobQueue
from tripgen.plans.sources import InMemoryTripDataSource, TripDataSource
from tripgen.rate_limit.limiter import RateLimiter, SlidingWindowRateLimiter
from tripgen.rate_limit.redis_limiter import RedisSlidingWindowRateLimiter
from tripgen.shared.llm.client import LLMClient
from tripgen.shared.llm.config import LLMClientConfig


logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    repository: GeneratedPlanRepository
    sources: TripDataSource
    rate_limiter: RateLimiter
    plans: GeneratedPlanService
    runner: Optional[GenerationJobRunner] = None

    def start(self) -> None:
        if self.runner is not None:
            bind_runner(self.runner)

    def stop(self) -> None:
        if self.runner is not None:
            bind_runner(None)
            self.runner.shutdown(wait=False)


def build_container(
    llm_config: Optional[LLMClientConfig] = None,
    generation_config: Optional[GenerationConfig] = None,
    job_config: Optional[JobConfig] = None,
    client: Optional[LLMClient] = None,
    job_queue: Optional[JobQueue] = None,
    redis_client: Optional[redis.Redis] = None,
) -> AppContainer:
    """
    Wire up the application.

    Args:
        llm_config: LLM connection settings. Read from the environment if omitted.
        generation_config: Model parameters. Read from the environment if omitted.
        job_config: Job limits and infrastructure. Read from the environment if omitted.
        client: Pre-built LLM client (skips llm_config)
        job_queue: Replacement for the Celery queue (tests); no runner is built
        redis_client: Shared state lives in this Redis. Created from
            job_config.redis_url when storage_backend is "redis".

    Returns:
        AppContainer ready to start
    """
    job_config = job_config or JobConfig.from_env()
    if redis_client is None and job_config.storage_backend == "redis":
        redis_client = get_redis_client(job_config.redis_url)

    if redis_client is not None:
        repository = RedisGeneratedPlanRepository(redis_client)
        sources = RedisTripDataSource(redis_client)
        rate_limiter = RedisSlidingWindowRateLimiter(redis_client)
        storage = "redis"
    else:
        repository = InMemoryGeneratedPlanRepository()
        sources = InMemoryTripDataSource()
        rate_limiter = SlidingWindowRateLimiter()
        storage = "memory"

    runner = None
    if job_queue is None:
        client = client or LLMClient(llm_config or LLMClientConfig.from_env())
        service = GenerationService(client, generation_config or GenerationConfig.from_env())
        graph = create_generation_job_graph(repository, sources, service, job_config)
        runner = GenerationJobRunner(graph, repository, job_config)
        job_queue = CeleryJobQueue()
        if storage == "memory" and not job_config.task_always_eager:
            logger.warning(
                "[container] In-memory storage with a Celery broker: "
                "workers in other processes will not see these plans"
            )

    plans = GeneratedPlanService(repository, rate_limiter, job_queue)
    logger.info(
        f"[container] Built | storage={storage}, "
        f"jobs={'celery' if runner else 'external'}"
    )

    return AppContainer(
        repository=repository,
        sources=sources,
        rate_limiter=rate_limiter,
        plans=plans,
        runner=runner,
    )
