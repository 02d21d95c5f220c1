"""
Shared builders for tests: trip facts, plan payloads, chat-completion
envelopes, OpenAI SDK errors, fake SDK clients and fake Redis clients.
"""

import json
from datetime import date, timedelta
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import fakeredis
import httpx
import openai
from openai.types.chat import ChatCompletion

from tripgen.generation.schemas import (
    GenerationOptions,
    GenerationRequest,
    Preferences,
    TripFacts,
)
from tripgen.shared.llm.client import LLMClient
from tripgen.shared.llm.config import LLMClientConfig


API_URL = "https://openrouter.ai/api/v1/chat/completions"


def make_trip_facts(
    destination: str = "Lisbon, Portugal",
    start_date: str = "2025-07-15",
    end_date: str = "2025-07-17",
    group_size: int = 2,
) -> TripFacts:
    return TripFacts(
        destination=destination,
        start_date=date.fromisoformat(start_date),
        end_date=date.fromisoformat(end_date),
        group_size=group_size,
    )


def make_request(
    preferences: Optional[Preferences] = None,
    notes: Optional[list] = None,
    options: Optional[GenerationOptions] = None,
    **trip_kwargs: Any,
) -> GenerationRequest:
    return GenerationRequest(
        trip=make_trip_facts(**trip_kwargs),
        preferences=preferences or Preferences(),
        notes=notes or [],
        options=options or GenerationOptions(),
    )


def make_plan_payload(
    start_date: str = "2025-07-15",
    days: int = 3,
    people: int = 2,
) -> Dict[str, Any]:
    """A consistent plan for a `days`-long trip starting on `start_date`."""
    start = date.fromisoformat(start_date)
    daily = []
    for index in range(days):
        daily.append({
            "day": index + 1,
            "date": (start + timedelta(days=index)).isoformat(),
            "activities": [
                {
                    "time": "10:00 AM",
                    "name": f"Walking tour {index + 1}",
                    "duration_minutes": 120,
                    "estimated_cost_usd": 40.0,
                    "estimated_cost_per_person_usd": 20.0,
                    "rating": 4.6,
                    "description": "Guided walk through the old town",
                }
            ],
            "restaurants": [
                {
                    "meal": "dinner",
                    "name": "Taberna da Rua",
                    "cuisine": "Portuguese",
                    "estimated_cost_per_person_usd": 25.0,
                    "rating": 4.3,
                }
            ],
        })
    return {
        "summary": {
            "total_cost_usd": 90.0 * days * people,
            "cost_per_person_usd": 90.0 * days,
            "duration_days": days,
            "number_of_people": people,
        },
        "daily_itinerary": daily,
    }


def make_completion(content: str, total_tokens: int = 100) -> ChatCompletion:
    return ChatCompletion.model_validate({
        "id": "gen-123",
        "object": "chat.completion",
        "created": 1752537600,
        "model": "openai/gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
        "usage": {
            "prompt_tokens": total_tokens - 40,
            "completion_tokens": 40,
            "total_tokens": total_tokens,
        },
    })


def make_plan_completion(**payload_kwargs: Any) -> ChatCompletion:
    return make_completion(json.dumps(make_plan_payload(**payload_kwargs)))


def status_error(status: int, headers: Optional[Dict[str, str]] = None) -> openai.APIStatusError:
    """Build the SDK exception the OpenAI client raises for an HTTP status."""
    request = httpx.Request("POST", API_URL)
    response = httpx.Response(status, headers=headers or {}, request=request)
    if status == 400:
        cls = openai.BadRequestError
    elif status == 401:
        cls = openai.AuthenticationError
    elif status == 403:
        cls = openai.PermissionDeniedError
    elif status == 429:
        cls = openai.RateLimitError
    elif status >= 500:
        cls = openai.InternalServerError
    else:
        cls = openai.APIStatusError
    return cls(f"HTTP {status}", response=response, body=None)


def timeout_error() -> openai.APITimeoutError:
    return openai.APITimeoutError(request=httpx.Request("POST", API_URL))


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", API_URL))


def make_openai_client(*outcomes: Any) -> MagicMock:
    """Fake SDK client; each call to chat.completions.create consumes one outcome."""
    client = MagicMock()
    client.chat.completions.create.side_effect = list(outcomes)
    return client


def make_llm_client(*outcomes: Any, max_retries: int = 3, sleeps: Optional[list] = None):
    """
    Real LLMClient over a fake SDK client.

    Returns:
        (client, fake_sdk_client, sleeps) where sleeps records every backoff wait
    """
    sleeps = [] if sleeps is None else sleeps
    fake = make_openai_client(*outcomes)
    client = LLMClient(
        LLMClientConfig(api_key="test-api-key", max_retries=max_retries),
        openai_client=fake,
        sleep=sleeps.append,
    )
    return client, fake, sleeps


def make_http_llm_client(*responses: httpx.Response, max_retries: int = 3):
    """
    Real LLMClient over a real OpenAI SDK client whose HTTP layer replays `responses`.

    Returns:
        (client, requests, sleeps) where requests records every outgoing httpx.Request
    """
    requests: list = []
    queued = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return queued.pop(0)

    sdk = openai.OpenAI(
        api_key="test-api-key",
        base_url="https://openrouter.ai/api/v1",
        max_retries=0,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    sleeps: list = []
    client = LLMClient(
        LLMClientConfig(api_key="test-api-key", max_retries=max_retries),
        openai_client=sdk,
        sleep=sleeps.append,
    )
    return client, requests, sleeps


def make_redis(server: Optional[fakeredis.FakeServer] = None) -> fakeredis.FakeRedis:
    """fakeredis client on a fresh in-process server, or on `server` to share state."""
    return fakeredis.FakeRedis(server=server or fakeredis.FakeServer(), decode_responses=True)
