"""Logging configuration and utilities."""

from tripgen.shared.logging.config import (
    StructuredFormatter,
    log_job_event,
    log_plan_transition,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "log_plan_transition",
    "log_job_event",
    "StructuredFormatter",
]
