"""
Tests for the LLM client: error taxonomy, response wrapper, request payload
and the retry/backoff policy.
"""

import json

import httpx
import pytest

from tripgen.shared.llm.client import LLMClient, build_request_payload
from tripgen.shared.llm.config import LLMClientConfig
from tripgen.shared.llm.errors import (
    AuthenticationError,
    ClientError,
    ConfigurationError,
    LLMError,
    NetworkError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    ResponseFormatError,
    ServerError,
    TransportError,
)
from tripgen.shared.llm.response import LLMResponse
from tripgen.tests.helpers import (
    connection_error,
    make_completion,
    make_http_llm_client,
    make_llm_client,
    make_openai_client,
    status_error,
    timeout_error,
)


MESSAGES = [{"role": "user", "content": "Hello"}]
SCHEMA = {
    "type": "object",
    "properties": {"response": {"type": "string"}},
    "required": ["response"],
    "additionalProperties": False,
}


# ============================================================================
# Error taxonomy
# ============================================================================


class TestErrorTaxonomy:
    """Tests for retryability and grouping of client errors."""

    def test_retryable_errors(self):
        """Timeouts, network errors, 5xx and 429 are retryable."""
        assert RequestTimeoutError().retryable is True
        assert NetworkError().retryable is True
        assert ServerError(status_code=503).retryable is True
        assert RateLimitError(retry_after_seconds=5).retryable is True

    def test_fatal_errors(self):
        """Auth, other 4xx, bad responses and configuration are never retryable."""
        assert AuthenticationError().retryable is False
        assert ClientError(status_code=403).retryable is False
        assert ResponseFormatError().is_retryable() is False
        assert ConfigurationError().is_retryable() is False

    def test_grouping(self):
        assert isinstance(RequestTimeoutError(), TransportError)
        assert isinstance(NetworkError(), TransportError)
        assert isinstance(AuthenticationError(), ProviderError)
        assert isinstance(RateLimitError(), ProviderError)
        assert isinstance(ServerError(), ProviderError)
        assert isinstance(ResponseFormatError(), LLMError)

    def test_rate_limit_carries_retry_after(self):
        error = RateLimitError(retry_after_seconds=5)
        assert error.retry_after_seconds == 5
        assert error.status_code == 429
        assert RateLimitError().retry_after_seconds is None

    def test_default_messages(self):
        assert str(AuthenticationError()) == "Invalid API key"
        assert ServerError("Server error: boom", status_code=502).message == "Server error: boom"


# ============================================================================
# Response wrapper
# ============================================================================


class TestLLMResponse:
    """Tests for parsing chat-completion envelopes."""

    def test_from_payload_reads_content_and_usage(self):
        body = {
            "choices": [{"message": {"content": '{"response": "hi"}'}}],
            "usage": {"prompt_tokens": 60, "completion_tokens": 40, "total_tokens": 100},
        }
        response = LLMResponse.from_payload(body)

        assert response.is_success()
        assert response.content_as_json() == {"response": "hi"}
        assert response.total_tokens == 100
        assert response.prompt_tokens == 60
        assert response.completion_tokens == 40
        assert response.raw_response is body

    def test_missing_content_is_format_error(self):
        with pytest.raises(ResponseFormatError):
            LLMResponse.from_payload({"choices": []})
        with pytest.raises(ResponseFormatError):
            LLMResponse.from_payload({"choices": [{"message": {"content": None}}]})

    def test_invalid_json_content_is_format_error(self):
        response = LLMResponse.from_payload({"choices": [{"message": {"content": "not json"}}]})
        with pytest.raises(ResponseFormatError):
            response.content_as_json()

    def test_missing_usage_defaults_to_empty(self):
        response = LLMResponse.from_payload({"choices": [{"message": {"content": "{}"}}]})
        assert response.usage == {}
        assert response.total_tokens is None

    def test_failure(self):
        error = ServerError()
        response = LLMResponse.failure(error)
        assert response.is_failure()
        assert response.error is error
        assert response.content_as_json() is None


# ============================================================================
# Configuration and payload
# ============================================================================


class TestConfiguration:
    def test_defaults(self):
        client, _, _ = make_llm_client()
        assert client.timeout == 60
        assert client.max_retries == 3

    def test_missing_api_key_raises(self):
        with pytest.raises(ConfigurationError):
            LLMClient(LLMClientConfig(api_key=""), openai_client=make_openai_client())

    def test_api_key_not_in_repr(self):
        config = LLMClientConfig(api_key="sk-secret-value")
        assert "sk-secret-value" not in repr(config)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
        monkeypatch.setenv("LLM_MAX_RETRIES", "5")
        config = LLMClientConfig.from_env()
        assert config.api_key == "env-key"
        assert config.max_retries == 5


class TestBuildRequestPayload:
    def test_embeds_strict_json_schema(self):
        payload = build_request_payload(
            model="openai/gpt-4o-mini",
            messages=MESSAGES,
            schema=SCHEMA,
            temperature=0.7,
            max_tokens=4000,
        )

        assert payload["model"] == "openai/gpt-4o-mini"
        assert payload["messages"] == MESSAGES
        assert payload["temperature"] == 0.7
        assert payload["max_tokens"] == 4000
        assert payload["response_format"] == {
            "type": "json_schema",
            "json_schema": {"name": "response_schema", "strict": True, "schema": SCHEMA},
        }

    def test_client_sends_payload(self):
        client, fake, _ = make_llm_client(make_completion('{"response": "hi"}'))
        client.chat_completion_with_schema(
            MESSAGES, SCHEMA, model="m", temperature=0.2, max_tokens=10, schema_name="travel_plan"
        )

        kwargs = fake.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["max_tokens"] == 10
        assert kwargs["response_format"]["json_schema"]["name"] == "travel_plan"
        assert kwargs["response_format"]["json_schema"]["strict"] is True


# ============================================================================
# Retry policy
# ============================================================================


class TestChatCompletionWithSchema:
    """Tests for success handling and the retry/backoff policy."""

    def test_success(self):
        client, fake, sleeps = make_llm_client(make_completion('{"response": "Hello back!"}'))

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert response.content_as_json() == {"response": "Hello back!"}
        assert response.total_tokens == 100
        assert fake.chat.completions.create.call_count == 1
        assert sleeps == []

    def test_authentication_error_is_never_retried(self):
        client, fake, sleeps = make_llm_client(status_error(401))

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_failure()
        assert isinstance(response.error, AuthenticationError)
        assert fake.chat.completions.create.call_count == 1
        assert sleeps == []

    @pytest.mark.parametrize("status", [400, 403, 404, 422])
    def test_other_client_errors_are_not_retried(self, status):
        client, fake, _ = make_llm_client(status_error(status))

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert isinstance(response.error, ClientError)
        assert response.error.status_code == status
        assert fake.chat.completions.create.call_count == 1

    def test_server_error_retried_until_exhausted(self):
        """A persistent 500 is attempted max_retries + 1 times, then surfaces."""
        client, fake, sleeps = make_llm_client(*[status_error(500)] * 4)

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_failure()
        assert isinstance(response.error, ServerError)
        assert response.error.retryable is True
        assert response.error.status_code == 500
        assert fake.chat.completions.create.call_count == 4
        assert sleeps == [1, 2, 4]

    def test_server_error_then_success(self):
        client, fake, sleeps = make_llm_client(status_error(502), make_completion("{}"))

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert fake.chat.completions.create.call_count == 2
        assert sleeps == [1]

    def test_rate_limit_waits_advertised_delay(self):
        """A 429 with Retry-After: 5 triggers exactly one retry after 5 seconds."""
        client, fake, sleeps = make_llm_client(
            status_error(429, headers={"retry-after": "5"}),
            make_completion("{}"),
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert fake.chat.completions.create.call_count == 2
        assert sleeps == [5.0]

    def test_rate_limit_counts_against_retry_budget(self):
        client, fake, sleeps = make_llm_client(
            *[status_error(429, headers={"retry-after": "5"})] * 10,
            max_retries=2,
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert isinstance(response.error, RateLimitError)
        assert response.error.retry_after_seconds == 5
        assert fake.chat.completions.create.call_count == 3
        assert sleeps == [5.0, 5.0]

    def test_rate_limit_without_header_uses_backoff(self):
        client, _, sleeps = make_llm_client(status_error(429), make_completion("{}"))

        client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert sleeps == [1]

    def test_rate_limit_waits_full_advertised_delay(self):
        client, _, sleeps = make_llm_client(
            status_error(429, headers={"retry-after": "90"}),
            make_completion("{}"),
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert sleeps == [90.0]

    def test_rate_limit_delay_beyond_job_budget_gives_up(self):
        """A Retry-After longer than the client will wait surfaces the 429 at once."""
        client, fake, sleeps = make_llm_client(
            status_error(429, headers={"retry-after": "3600"}),
            make_completion("{}"),
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert isinstance(response.error, RateLimitError)
        assert response.error.retry_after_seconds == 3600
        assert fake.chat.completions.create.call_count == 1
        assert sleeps == []

    def test_timeouts_exhaust_into_timeout_error(self):
        client, fake, _ = make_llm_client(*[timeout_error()] * 4)

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert isinstance(response.error, RequestTimeoutError)
        assert fake.chat.completions.create.call_count == 4

    def test_network_error_is_retried(self):
        client, fake, _ = make_llm_client(connection_error(), make_completion("{}"))

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert fake.chat.completions.create.call_count == 2

    def test_backoff_is_capped(self):
        config = LLMClientConfig(
            api_key="test-api-key", max_retries=6, backoff_base_seconds=1, backoff_cap_seconds=8
        )
        sleeps = []
        client = LLMClient(
            config,
            openai_client=make_openai_client(*[status_error(503)] * 7),
            sleep=sleeps.append,
        )

        client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert sleeps == [1, 2, 4, 8, 8, 8]

    def test_missing_content_is_not_retried(self):
        completion = make_completion("{}")
        completion.choices[0].message.content = None
        client, fake, _ = make_llm_client(completion)

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert isinstance(response.error, ResponseFormatError)
        assert fake.chat.completions.create.call_count == 1

    def test_api_key_never_logged(self, caplog):
        client, _, _ = make_llm_client(*[status_error(500)] * 4)

        with caplog.at_level("DEBUG"):
            client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert "test-api-key" not in caplog.text
        assert "Retrying in" in caplog.text

    def test_test_connection(self):
        client, _, _ = make_llm_client(make_completion(json.dumps({"response": "ok"})))
        assert client.test_connection() is True

        failing, _, _ = make_llm_client(status_error(401))
        assert failing.test_connection() is False


# ============================================================================
# Malformed 200 envelopes over HTTP
# ============================================================================


class TestMalformedEnvelope:
    """A 200 whose body is not a chat completion is a ResponseFormatError, never an exception."""

    def test_valid_envelope_over_http(self):
        client, requests, _ = make_http_llm_client(
            httpx.Response(200, json=make_completion('{"response": "hi"}').model_dump())
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_success()
        assert response.content_as_json() == {"response": "hi"}
        assert requests[0].headers["authorization"] == "Bearer test-api-key"
        assert json.loads(requests[0].content)["response_format"]["json_schema"]["strict"] is True

    def test_non_json_content_type(self):
        client, requests, sleeps = make_http_llm_client(
            httpx.Response(
                200,
                headers={"content-type": "text/html"},
                text="<html>gateway hiccup</html>",
            )
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_failure()
        assert isinstance(response.error, ResponseFormatError)
        assert response.error.retryable is False
        assert len(requests) == 1
        assert sleeps == []

    def test_broken_json_body(self):
        client, requests, _ = make_http_llm_client(
            httpx.Response(
                200,
                headers={"content-type": "application/json"},
                content=b"{not json",
            )
        )

        response = client.chat_completion_with_schema(MESSAGES, SCHEMA)

        assert response.is_failure()
        assert isinstance(response.error, ResponseFormatError)
        assert len(requests) == 1

