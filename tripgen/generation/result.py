"""
Tagged result type returned by the generation service.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tripgen.shared.contracts.plan_content import PlanContent
from tripgen.shared.llm.errors import LLMError


class GenerationErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    AUTHENTICATION = "authentication"
    PROVIDER_RATE_LIMITED = "provider_rate_limited"
    SERVER = "server"
    TIMEOUT = "timeout"
    NETWORK = "network"
    CLIENT = "client"
    RESPONSE_FORMAT = "response_format"
    CONFIGURATION = "configuration"
    BUSINESS_VALIDATION = "business_validation"


@dataclass(frozen=True)
class GenerationError:
    kind: GenerationErrorKind
    message: str
    retryable: bool = False

    @classmethod
    def from_llm_error(cls, error: LLMError) -> "GenerationError":
        return cls(
            kind=GenerationErrorKind(error.kind),
            message=error.message,
            retryable=error.retryable,
        )


@dataclass(frozen=True)
class GenerationResult:
    """Either content (success) or a GenerationError (failure), never both."""

    content: Optional[PlanContent] = None
    error: Optional[GenerationError] = None
    total_tokens: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.content is not None

    @property
    def retryable(self) -> bool:
        return self.error is not None and self.error.retryable

    @classmethod
    def ok(cls, content: PlanContent, total_tokens: Optional[int] = None) -> "GenerationResult":
        return cls(content=content, total_tokens=total_tokens)

    @classmethod
    def failure(
        cls,
        kind: GenerationErrorKind,
        message: str,
        retryable: bool = False,
    ) -> "GenerationResult":
        return cls(error=GenerationError(kind=kind, message=message, retryable=retryable))
