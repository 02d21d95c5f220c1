"""
Generation job graph construction.

Builds the graph that drives one GeneratedPlan through its lifecycle:

    start_generation -> assemble_request -> generate_plan -> mark_completed
            |                  |                  |
            +------------------+------------------+-----> mark_failed

Every node catches its own unexpected exceptions into `errors`, so routing
always ends in mark_completed or mark_failed once a plan has started.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, END

from tripgen.generation.schemas import GenerationOptions, GenerationRequest, Preferences
from tripgen.generation.service import GenerationService
from tripgen.graph.config import DEFAULT_CONFIG, JobConfig
from tripgen.graph.router import route_after_assemble, route_after_generate, route_after_start
from tripgen.graph.state import GenerationJobState
from tripgen.jobs.payload import GenerationJob
from tripgen.plans.models import InvalidTransitionError, PlanStatus, utcnow
from tripgen.plans.repository import GeneratedPlanRepository
from tripgen.plans.sources import TripDataSource


logger = logging.getLogger(__name__)


def _message(content: str) -> Dict[str, Any]:
    return {"role": "system", "agent": "generation_job", "content": content}


class GenerationJobNodes:
    """
    Node functions for the job graph, bound to their collaborators.

    Args:
        repository: Generated plan storage
        sources: Collaborator-provided trip facts, notes and preferences
        service: Generation service
        config: Job limits; a generating plan older than job_timeout_seconds is stale
    """

    def __init__(
        self,
        repository: GeneratedPlanRepository,
        sources: TripDataSource,
        service: GenerationService,
        config: Optional[JobConfig] = None,
    ):
        self.repository = repository
        self.sources = sources
        self.service = service
        self.config = config or DEFAULT_CONFIG

    def start_generation(self, state: GenerationJobState) -> Dict[str, Any]:
        """
        Load the plan and persist `generating`. Missing or already-started plans abort.

        A redelivered job can find its plan still generating after the worker
        that owned it died; once that plan is older than the job budget it is
        failed here instead of staying open forever.
        """
        plan_id = state["generated_plan_id"]
        _log = f"[plan={plan_id}] [graph=generation_job] [node=start_generation] "

        try:
            plan = self.repository.get(plan_id)
            if plan is None:
                logger.warning(f"{_log}Plan not found, nothing to do")
                return {"aborted": True, "messages": [_message("Plan not found")]}

            if plan.status is PlanStatus.GENERATING and self._is_stale(plan):
                logger.error(
                    f"{_log}Plan stuck in generating since {plan.updated_at.isoformat()}, failing it"
                )
                plan = self.repository.fail_if_open(plan_id)
                return {
                    "aborted": True,
                    "status": plan.status.value if plan else None,
                    "messages": [_message("Stale generation failed")],
                }

            if plan.status is not PlanStatus.PENDING:
                logger.warning(f"{_log}Plan already {plan.status.value}, skipping")
                return {
                    "aborted": True,
                    "status": plan.status.value,
                    "messages": [_message(f"Plan already {plan.status.value}")],
                }

            self.repository.transition(plan_id, PlanStatus.GENERATING)
            logger.info(f"{_log}Generation started | trip={plan.trip_id}")
            return {
                "trip_id": plan.trip_id,
                "status": PlanStatus.GENERATING.value,
                "messages": [_message("Generation started")],
            }
        except Exception as e:
            logger.exception(f"{_log}Failed to start generation: {e}")
            return {"errors": [f"Start failed: {e}"], "messages": [_message("Start failed")]}

    def _is_stale(self, plan) -> bool:
        return utcnow() - plan.updated_at > timedelta(seconds=self.config.job_timeout_seconds)

    def assemble_request(self, state: GenerationJobState) -> Dict[str, Any]:
        """Build the GenerationRequest from collaborator data. Absent preferences are empty."""
        plan_id = state["generated_plan_id"]
        trip_id = state["trip_id"]
        _log = f"[plan={plan_id}] [graph=generation_job] [node=assemble_request] "

        try:
            facts = self.sources.get_trip_facts(trip_id)
            notes = self.sources.get_notes(trip_id)
            preferences = self.sources.get_preferences(state["user_id"])
            if preferences is None:
                logger.info(f"{_log}No preferences on file, using empty preferences")
                preferences = Preferences()

            request = GenerationRequest(
                trip=facts,
                preferences=preferences,
                notes=notes,
                options=GenerationOptions(
                    include_budget_breakdown=state["include_budget_breakdown"],
                    include_restaurants=state["include_restaurants"],
                ),
            )
            logger.info(
                f"{_log}Request assembled | destination={facts.destination}, "
                f"days={facts.duration_days}, notes={len(notes)}"
            )
            return {"request": request, "messages": [_message("Request assembled")]}
        except Exception as e:
            logger.exception(f"{_log}Failed to assemble request: {e}")
            return {"errors": [f"Assembly failed: {e}"], "messages": [_message("Assembly failed")]}

    def generate_plan(self, state: GenerationJobState) -> Dict[str, Any]:
        plan_id = state["generated_plan_id"]
        _log = f"[plan={plan_id}] [graph=generation_job] [node=generate_plan] "

        try:
            result = self.service.generate(state["request"])
        except Exception as e:
            logger.exception(f"{_log}Generation raised: {e}")
            return {"errors": [f"Generation raised: {e}"], "messages": [_message("Generation raised")]}

        if not result.success:
            logger.error(
                f"{_log}Generation failed | kind={result.error.kind.value}, "
                f"retryable={result.error.retryable}, message={result.error.message}"
            )
            return {
                "result": result,
                "errors": [f"{result.error.kind.value}: {result.error.message}"],
                "messages": [_message(f"Generation failed ({result.error.kind.value})")],
            }

        logger.info(f"{_log}Generation succeeded | tokens={result.total_tokens}")
        return {"result": result, "messages": [_message("Generation succeeded")]}

    def mark_completed(self, state: GenerationJobState) -> Dict[str, Any]:
        plan_id = state["generated_plan_id"]
        _log = f"[plan={plan_id}] [graph=generation_job] [node=mark_completed] "

        try:
            plan = self.repository.transition(
                plan_id, PlanStatus.COMPLETED, content=state["result"].content
            )
        except InvalidTransitionError as e:
            # The runner's timeout already closed this plan.
            logger.warning(f"{_log}Completion rejected: {e}")
            current = self.repository.get(plan_id)
            return {
                "status": current.status.value if current else None,
                "messages": [_message("Completion rejected")],
            }
        except Exception as e:
            logger.exception(f"{_log}Failed to persist completion: {e}")
            plan = self.repository.fail_if_open(plan_id)
            return {
                "status": plan.status.value if plan else None,
                "errors": [f"Persist failed: {e}"],
                "messages": [_message("Persist failed")],
            }

        logger.info(f"{_log}Plan completed -> END")
        return {"status": plan.status.value, "messages": [_message("Plan completed")]}

    def mark_failed(self, state: GenerationJobState) -> Dict[str, Any]:
        plan_id = state["generated_plan_id"]
        _log = f"[plan={plan_id}] [graph=generation_job] [node=mark_failed] "

        plan = self.repository.fail_if_open(plan_id)
        logger.info(f"{_log}Plan failed | errors={state.get('errors', [])} -> END")
        return {
            "status": plan.status.value if plan else PlanStatus.FAILED.value,
            "messages": [_message("Plan failed")],
        }


def build_initial_state(job: GenerationJob) -> GenerationJobState:
    return {
        "generated_plan_id": job.generated_plan_id,
        "user_id": job.user_id,
        "include_budget_breakdown": job.include_budget_breakdown,
        "include_restaurants": job.include_restaurants,
        "trip_id": None,
        "request": None,
        "result": None,
        "aborted": False,
        "status": None,
        "errors": [],
        "messages": [],
    }


def create_generation_job_graph(
    repository: GeneratedPlanRepository,
    sources: TripDataSource,
    service: GenerationService,
    config: Optional[JobConfig] = None,
):
    """
    Create and compile the generation job graph.

    Returns:
        Compiled LangGraph application ready for execution.
    """
    nodes = GenerationJobNodes(repository, sources, service, config)
    graph = StateGraph(GenerationJobState)

    graph.add_node("start_generation", nodes.start_generation)
    graph.add_node("assemble_request", nodes.assemble_request)
    graph.add_node("generate_plan", nodes.generate_plan)
    graph.add_node("mark_completed", nodes.mark_completed)
    graph.add_node("mark_failed", nodes.mark_failed)

    graph.set_entry_point("start_generation")

    graph.add_conditional_edges(
        "start_generation",
        route_after_start,
        {
            "assemble_request": "assemble_request",
            "mark_failed": "mark_failed",
            END: END,
        },
    )
    graph.add_conditional_edges(
        "assemble_request",
        route_after_assemble,
        {
            "generate_plan": "generate_plan",
            "mark_failed": "mark_failed",
        },
    )
    graph.add_conditional_edges(
        "generate_plan",
        route_after_generate,
        {
            "mark_completed": "mark_completed",
            "mark_failed": "mark_failed",
        },
    )

    graph.add_edge("mark_completed", END)
    graph.add_edge("mark_failed", END)

    return graph.compile()
