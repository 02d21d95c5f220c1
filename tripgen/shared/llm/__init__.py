"""LLM client utilities."""

from tripgen.shared.llm.client import LLMClient, build_request_payload
from tripgen.shared.llm.config import LLMClientConfig
from tripgen.shared.llm.response import LLMResponse

__all__ = ["LLMClient", "LLMClientConfig", "LLMResponse", "build_request_payload"]
