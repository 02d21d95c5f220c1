"""
Chat-completion client with structured output and retry logic.

Wraps the OpenAI SDK (pointed at an OpenAI-compatible endpoint such as
OpenRouter) and adds:
- JSON-schema response_format payloads
- Mapping of SDK exceptions onto the typed errors in errors.py
- A bounded tenacity retry loop with exponential backoff and Retry-After
  support for 429s

SDK-internal retries are disabled so the retry budget lives in one place.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import openai
from openai import OpenAI
from openai.types.chat import ChatCompletion
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base

from tripgen.shared.llm.config import LLMClientConfig
from tripgen.shared.llm.errors import (
    AuthenticationError,
    ClientError,
    ConfigurationError,
    LLMError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ResponseFormatError,
    ServerError,
)
from tripgen.shared.llm.response import LLMResponse


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_SCHEMA_NAME = "response_schema"


def _advertised_delay(retry_state: RetryCallState) -> Optional[float]:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(error, RateLimitError):
        return error.retry_after_seconds
    return None


class wait_retry_after(wait_exponential):
    """
    Exponential backoff that defers to a provider-advertised Retry-After.

    A RateLimitError with retry_after_seconds waits exactly that long;
    everything else falls back to min(multiplier * 2**(attempt-1), max).
    """

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = _advertised_delay(retry_state)
        if delay is not None:
            return delay
        return super().__call__(retry_state)


class stop_when_retry_after_exceeds(stop_base):
    """Give up when the provider asks for a longer wait than we are willing to sleep."""

    def __init__(self, max_delay: float):
        self.max_delay = max_delay

    def __call__(self, retry_state: RetryCallState) -> bool:
        delay = _advertised_delay(retry_state)
        return delay is not None and delay > self.max_delay


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, LLMError) and error.retryable


def _parse_retry_after(response: Any) -> Optional[float]:
    """Read a numeric Retry-After header (seconds); HTTP-date values are ignored."""
    if response is None:
        return None
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def build_request_payload(
    model: str,
    messages: List[Dict[str, str]],
    schema: Dict[str, Any],
    temperature: float,
    max_tokens: int,
    schema_name: str = DEFAULT_SCHEMA_NAME,
) -> Dict[str, Any]:
    """Build a chat-completions request body constrained to a strict JSON schema."""
    return {
        "model": model,
        "messages": messages,
        "response_format": {
            "type": "json_schema",
            "json_schema": {
                "name": schema_name,
                "strict": True,
                "schema": schema,
            },
        },
        "temperature": temperature,
        "max_tokens": max_tokens,
    }


class LLMClient:
    """
    Generic structured-output client.

    Args:
        config: Connection and retry settings
        openai_client: Optional pre-built SDK client (used by tests)
        sleep: Function used for backoff waits (injected by tests)

    Raises:
        ConfigurationError: If no API key is configured
    """

    def __init__(
        self,
        config: LLMClientConfig,
        openai_client: Optional[OpenAI] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not config.is_valid():
            raise ConfigurationError("API key is required")

        self.config = config
        self._sleep = sleep
        self._client = openai_client or OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=0,
        )

    @property
    def timeout(self) -> float:
        return self.config.timeout

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    def chat_completion_with_schema(
        self,
        messages: List[Dict[str, str]],
        schema: Dict[str, Any],
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        schema_name: str = DEFAULT_SCHEMA_NAME,
    ) -> LLMResponse:
        """
        Request a completion whose content must conform to `schema`.

        Retryable failures (timeouts, network errors, 5xx, 429) are retried up
        to config.max_retries times. Non-retryable failures return at once.

        Returns:
            LLMResponse: success with content/usage, or failure with the
            last LLMError. Provider failures are never raised.
        """
        payload = build_request_payload(
            model=model,
            messages=messages,
            schema=schema,
            temperature=temperature,
            max_tokens=max_tokens,
            schema_name=schema_name,
        )

        try:
            for attempt in self._retrying():
                with attempt:
                    return self._execute(payload)
        except LLMError as e:
            logger.error(
                f"[llm] Request failed | model={model}, error={type(e).__name__}, "
                f"retryable={e.retryable}, message={e.message}"
            )
            return LLMResponse.failure(e)

        # Unreachable: Retrying either returns a value or re-raises.
        return LLMResponse.failure(ServerError("Unknown error"))

    def test_connection(self) -> bool:
        """Send a tiny structured request and report whether it succeeded."""
        response = self.chat_completion_with_schema(
            messages=[{"role": "user", "content": "Hello"}],
            schema={
                "type": "object",
                "properties": {"response": {"type": "string"}},
                "required": ["response"],
                "additionalProperties": False,
            },
            max_tokens=50,
        )
        return response.is_success()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=(
                stop_after_attempt(self.config.max_retries + 1)
                | stop_when_retry_after_exceeds(self.config.max_retry_after_seconds)
            ),
            wait=wait_retry_after(
                multiplier=self.config.backoff_base_seconds,
                max=self.config.backoff_cap_seconds,
            ),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"[llm] Request failed (attempt {retry_state.attempt_number}/"
            f"{self.config.max_retries + 1}): {type(error).__name__} - {error}. "
            f"Retrying in {wait_time:.1f}s"
        )

    def _execute(self, payload: Dict[str, Any]) -> LLMResponse:
        """Perform one HTTP attempt and translate SDK failures into LLMErrors."""
        try:
            completion = self._client.chat.completions.create(**payload)
        except openai.APITimeoutError as e:
            raise RequestTimeoutError(f"Request timeout: {e}") from e
        except openai.APIConnectionError as e:
            raise NetworkError(f"Network error: {e}") from e
        except openai.AuthenticationError as e:
            raise AuthenticationError("Invalid API key") from e
        except openai.RateLimitError as e:
            raise RateLimitError(
                "Rate limit exceeded",
                retry_after_seconds=_parse_retry_after(e.response),
            ) from e
        except openai.APIStatusError as e:
            if e.status_code >= 500:
                raise ServerError(f"Server error: {e.message}", status_code=e.status_code) from e
            raise ClientError(f"Client error: {e.message}", status_code=e.status_code) from e
        except openai.APIResponseValidationError as e:
            raise ResponseFormatError(f"Failed to parse response: {e.message}") from e
        except json.JSONDecodeError as e:
            raise ResponseFormatError(f"Unparseable response body: {e}") from e

        if not isinstance(completion, ChatCompletion):
            raise ResponseFormatError(
                f"Unexpected response body of type {type(completion).__name__}"
            )
        return LLMResponse.from_payload(completion.model_dump())
