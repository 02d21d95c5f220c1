"""
Routing logic for the generation job graph.

Any recorded error sends the job to mark_failed; a missing or already
started plan ends the graph without touching it.
"""

import logging
from typing import Literal

from langgraph.graph import END

from tripgen.graph.state import GenerationJobState


logger = logging.getLogger(__name__)


def route_after_start(
    state: GenerationJobState,
) -> Literal["assemble_request", "mark_failed", "__end__"]:
    _log = f"[plan={state['generated_plan_id']}] [graph=generation_job] [router=after_start] "

    if state.get("aborted"):
        logger.info(f"{_log}Routing to END | aborted=True")
        return END
    if state.get("errors"):
        logger.info(f"{_log}Routing to 'mark_failed' | errors={len(state['errors'])}")
        return "mark_failed"
    return "assemble_request"


def route_after_assemble(
    state: GenerationJobState,
) -> Literal["generate_plan", "mark_failed"]:
    if state.get("errors") or state.get("request") is None:
        logger.info(
            f"[plan={state['generated_plan_id']}] [graph=generation_job] "
            f"[router=after_assemble] Routing to 'mark_failed'"
        )
        return "mark_failed"
    return "generate_plan"


def route_after_generate(
    state: GenerationJobState,
) -> Literal["mark_completed", "mark_failed"]:
    result = state.get("result")
    succeeded = result is not None and result.success and not state.get("errors")
    logger.info(
        f"[plan={state['generated_plan_id']}] [graph=generation_job] [router=after_generate] "
        f"Routing to '{'mark_completed' if succeeded else 'mark_failed'}'"
    )
    return "mark_completed" if succeeded else "mark_failed"
