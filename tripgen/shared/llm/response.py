"""
Response wrapper for chat-completion calls.

An LLMResponse is either a success carrying the assistant content and token
usage, or a failure carrying the typed LLMError that ended the call.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tripgen.shared.llm.errors import LLMError, ResponseFormatError


@dataclass
class LLMResponse:
    """Outcome of a single chat_completion_with_schema call."""

    success: bool
    content: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)
    error: Optional[LLMError] = None
    raw_response: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, body: Dict[str, Any]) -> "LLMResponse":
        """
        Build a successful response from a chat-completions envelope.

        Expects {"choices": [{"message": {"content": "<json>"}}], "usage": {...}}.

        Raises:
            ResponseFormatError: If the envelope carries no message content
        """
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ResponseFormatError(f"Missing content in response: {e!r}") from e

        if content is None:
            raise ResponseFormatError("Missing content in response")

        return cls(
            success=True,
            content=content,
            usage=body.get("usage") or {},
            raw_response=body,
        )

    @classmethod
    def failure(cls, error: LLMError) -> "LLMResponse":
        return cls(success=False, error=error)

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def content_as_json(self) -> Optional[Any]:
        """
        Parse the assistant content as JSON.

        Returns:
            The parsed value, or None when there is no content

        Raises:
            ResponseFormatError: If the content is not valid JSON
        """
        if self.content is None:
            return None
        try:
            return json.loads(self.content)
        except json.JSONDecodeError as e:
            raise ResponseFormatError(f"Failed to parse response content: {e}") from e

    @property
    def total_tokens(self) -> Optional[int]:
        return self.usage.get("total_tokens")

    @property
    def prompt_tokens(self) -> Optional[int]:
        return self.usage.get("prompt_tokens")

    @property
    def completion_tokens(self) -> Optional[int]:
        return self.usage.get("completion_tokens")
