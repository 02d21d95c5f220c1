"""
Generation job state schema.

Defines the state that flows through the job graph for one GeneratedPlan.
"""

from typing import Annotated, List, Optional, TypedDict
import operator

from tripgen.generation.result import GenerationResult
from tripgen.generation.schemas import GenerationRequest


class GenerationJobState(TypedDict):
    """
    State schema for the generation job graph.

    Starts from the primitive job payload; the nodes fill in the trip, the
    assembled request, the generation result and the final plan status.
    """

    # Job payload
    generated_plan_id: int
    user_id: int
    include_budget_breakdown: bool
    include_restaurants: bool

    # Loaded/assembled along the way
    trip_id: Optional[int]
    request: Optional[GenerationRequest]
    result: Optional[GenerationResult]

    # Outcome
    aborted: bool
    status: Optional[str]

    # Tracking
    errors: Annotated[List[str], operator.add]
    messages: Annotated[List[dict], operator.add]
