"""
JSON logging for generated-plan lifecycle events.

Plan status transitions and generation job outcomes are ordinary log calls
whose `extra` carries an "event" mapping (see log_plan_transition and
log_job_event). StructuredFormatter lifts that mapping into the JSON line,
so a log pipeline can select on event name or plan_id without parsing the
human-readable message. Records without an event render with the base
fields only.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional


EVENT_ATTR = "event"

PLAN_LOGGER = "tripgen.plans"


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Base fields are time (UTC, from the record's creation), level, logger and
    message. Event fields follow at the top level, e.g.

        {"time": "...", "level": "INFO", "logger": "tripgen.plans",
         "message": "[plan=3] Status transition: pending -> generating",
         "event": "plan_status_transition", "plan_id": 3,
         "from_status": "pending", "to_status": "generating"}

    A traceback, when present, goes under "exception".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        event = getattr(record, EVENT_ATTR, None)
        if isinstance(event, dict):
            entry.update(event)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "tripgen",
) -> logging.Logger:
    """
    Send the tripgen logger tree to stderr as JSON lines (LOG_FORMAT=json).

    Used by the API process and by Celery workers. Existing handlers on the
    logger are replaced and propagation to root is turned off, so repeated
    calls never duplicate lines.

    Args:
        level: Minimum level for the tree
        log_file: Also append JSON lines to this file
        logger_name: Root of the tree to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_plan_transition(
    plan_id: int,
    from_status: str,
    to_status: str,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Emit a plan_status_transition event. Called by every repository after a
    successful status write, so the log holds one event per transition.
    """
    event: Dict[str, Any] = {
        "event": "plan_status_transition",
        "plan_id": plan_id,
        "from_status": from_status,
        "to_status": to_status,
    }
    if context:
        event["context"] = context

    (logger or logging.getLogger(PLAN_LOGGER)).info(
        f"[plan={plan_id}] Status transition: {from_status} -> {to_status}",
        extra={EVENT_ATTR: event},
    )


def log_job_event(
    name: str,
    plan_id: int,
    message: str,
    level: int = logging.INFO,
    logger: Optional[logging.Logger] = None,
    **fields: Any,
) -> None:
    """Emit a generation job event, e.g. generation_job_finished with status and error count."""
    event: Dict[str, Any] = {"event": name, "plan_id": plan_id}
    event.update(fields)
    (logger or logging.getLogger("tripgen.jobs")).log(level, message, extra={EVENT_ATTR: event})
