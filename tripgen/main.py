"""
FastAPI application entry point.

Assembles the FastAPI app around an AppContainer. Generation jobs run in
Celery workers (tripgen.jobs.celery_app); the API only enqueues them.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from tripgen.api.plans_api import router as plans_router
from tripgen.container import AppContainer, build_container
from tripgen.shared.logging.config import setup_logging


# ============================================================================
# Logging configuration (single source of truth for the service)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
)


def configure_logging() -> None:
    """Pipe-delimited text logs by default; JSON logs when LOG_FORMAT=json."""
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        setup_logging(level=logging.INFO)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format=LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[logging.StreamHandler(sys.stdout)],
            force=True,  # Override any prior basicConfig calls
        )

    # Quiet noisy third-party loggers
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        container: Pre-built container. Built from the environment if omitted.
    """
    container = container or build_container()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container.start()
        yield
        container.stop()

    app = FastAPI(
        title="tripgen",
        description="AI travel plan generation service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container
    app.include_router(plans_router)

    @app.get("/health")
    async def health():
        """Global health check endpoint."""
        return {
            "status": "healthy",
            "jobs": "celery" if container.runner else "external",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run("tripgen.main:create_app", factory=True, host="0.0.0.0", port=8000)
