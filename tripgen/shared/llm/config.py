"""
Configuration for the LLM client.

The client receives an explicit LLMClientConfig instead of reading globals,
so several configurations (and tests) can coexist in one process.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass(frozen=True)
class LLMClientConfig:
    """
    Connection and retry settings for LLMClient.

    Attributes:
        api_key: Bearer token for the provider (never logged or repr'd)
        base_url: OpenAI-compatible API root
        timeout: Per-attempt timeout in seconds
        max_retries: Retries after the first attempt
        backoff_base_seconds: First backoff delay; doubles on each retry
        backoff_cap_seconds: Upper bound for the exponential backoff
        max_retry_after_seconds: Longest advertised 429 delay the client will wait;
            a longer Retry-After ends the retry loop instead
    """

    api_key: str = field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 60.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_cap_seconds: float = 32.0
    max_retry_after_seconds: float = 120.0

    @classmethod
    def from_env(cls) -> "LLMClientConfig":
        """Build a config from environment variables (and a local .env file)."""
        load_dotenv()
        return cls(
            api_key=os.environ.get("OPENROUTER_API_KEY", ""),
            base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.environ.get("LLM_TIMEOUT_SECONDS", "60")),
            max_retries=int(os.environ.get("LLM_MAX_RETRIES", "3")),
        )

    def is_valid(self) -> bool:
        return bool(self.api_key and self.api_key.strip())
