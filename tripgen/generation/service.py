"""
Travel plan generation service.

Turns a GenerationRequest into validated PlanContent:
validate input -> build prompts and schema -> call the LLM client ->
parse -> business-validate.

Expected failures (bad input, exhausted retries, malformed output,
inconsistent plans) come back as a failed GenerationResult; nothing here
raises for them.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from tripgen.generation.config import DEFAULT_CONFIG, GenerationConfig
from tripgen.generation.input_validator import validate_request
from tripgen.generation.plan_validator import validate_plan
from tripgen.generation.prompts.builders import build_messages
from tripgen.generation.result import GenerationError, GenerationErrorKind, GenerationResult
from tripgen.generation.schema_builder import build_plan_schema
from tripgen.generation.schemas import GenerationRequest
from tripgen.shared.contracts.plan_content import PlanContent
from tripgen.shared.llm.client import LLMClient
from tripgen.shared.llm.errors import ResponseFormatError
from tripgen.shared.llm.response import LLMResponse


logger = logging.getLogger(__name__)


class GenerationService:
    """
    Generates travel plans through a structured-output LLM call.

    Args:
        client: Configured LLM client
        config: Model parameters. Uses DEFAULT_CONFIG if not provided.
    """

    def __init__(self, client: LLMClient, config: Optional[GenerationConfig] = None):
        self.client = client
        self.config = config or DEFAULT_CONFIG

    def validate(self, request: GenerationRequest) -> List[str]:
        return validate_request(request)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Run one generation attempt.

        Args:
            request: Trip facts, preferences, notes and options

        Returns:
            GenerationResult with PlanContent on success, or a GenerationError
        """
        _log = f"[generation] [destination={request.trip.destination}] "

        errors = self.validate(request)
        if errors:
            logger.warning(f"{_log}Invalid input | errors={errors}")
            return GenerationResult.failure(
                GenerationErrorKind.INVALID_INPUT, ", ".join(errors), retryable=False
            )

        logger.info(
            f"{_log}Requesting plan | days={request.duration_days}, "
            f"people={request.trip.group_size}, notes={len(request.notes)}, "
            f"has_preferences={not request.preferences.is_empty()}, model={self.config.model}"
        )

        response = self.client.chat_completion_with_schema(
            messages=build_messages(request),
            schema=build_plan_schema(),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            schema_name=self.config.schema_name,
        )

        if response.is_failure():
            error = GenerationError.from_llm_error(response.error)
            logger.error(f"{_log}LLM call failed | kind={error.kind.value}, retryable={error.retryable}")
            return GenerationResult(error=error)

        return self._process_response(response, request)

    def _process_response(self, response: LLMResponse, request: GenerationRequest) -> GenerationResult:
        _log = f"[generation] [destination={request.trip.destination}] "

        try:
            data = response.content_as_json()
            plan = PlanContent.model_validate(data)
        except ResponseFormatError as e:
            logger.error(f"{_log}Unparseable plan content: {e}")
            return GenerationResult.failure(GenerationErrorKind.RESPONSE_FORMAT, e.message)
        except ValidationError as e:
            logger.error(f"{_log}Plan does not match contract: {e.error_count()} errors")
            return GenerationResult.failure(
                GenerationErrorKind.RESPONSE_FORMAT,
                f"Plan does not match contract: {e.error_count()} errors",
            )

        violations = validate_plan(plan, request)
        if violations:
            logger.error(f"{_log}Plan failed business validation | violations={violations}")
            return GenerationResult.failure(
                GenerationErrorKind.BUSINESS_VALIDATION,
                f"Invalid plan: {', '.join(violations)}",
                retryable=False,
            )

        logger.info(
            f"{_log}Plan generated | days={len(plan.daily_itinerary)}, "
            f"total_cost=${plan.summary.total_cost_usd:.2f}, tokens={response.total_tokens}"
        )
        return GenerationResult.ok(plan, total_tokens=response.total_tokens)
