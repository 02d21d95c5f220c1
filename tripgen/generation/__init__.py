"""
Travel plan generation service.

Validates a GenerationRequest, builds prompts and the output schema, calls
the LLM client and business-validates the resulting PlanContent.
"""

from tripgen.generation.config import GenerationConfig, DEFAULT_CONFIG
from tripgen.generation.result import GenerationError, GenerationErrorKind, GenerationResult
from tripgen.generation.schemas import (
    GenerationOptions,
    GenerationRequest,
    Preferences,
    TripFacts,
)
from tripgen.generation.service import GenerationService

__all__ = [
    "GenerationConfig",
    "DEFAULT_CONFIG",
    "GenerationError",
    "GenerationErrorKind",
    "GenerationResult",
    "GenerationOptions",
    "GenerationRequest",
    "Preferences",
    "TripFacts",
    "GenerationService",
]
