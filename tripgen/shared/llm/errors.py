"""
Error taxonomy for the LLM client.

Every failure the client can surface is one of these classes. Each error
knows whether re-sending the identical request has a reasonable chance of
succeeding, which is what drives the retry loop in client.py.

Hierarchy:
- LLMError
  - TransportError: RequestTimeoutError, NetworkError (retryable)
  - ProviderError: AuthenticationError, RateLimitError, ServerError, ClientError
  - ResponseFormatError (not retryable)
  - ConfigurationError (not retryable)
"""

from typing import Optional


class LLMError(Exception):
    """Base class for all LLM client errors."""

    kind = "llm_error"
    default_message = "LLM request failed"

    def __init__(self, message: Optional[str] = None, retryable: bool = False):
        super().__init__(message or self.default_message)
        self._retryable = retryable

    @property
    def message(self) -> str:
        return str(self)

    @property
    def retryable(self) -> bool:
        return self._retryable

    def is_retryable(self) -> bool:
        return self._retryable


class TransportError(LLMError):
    """Connection-level failure; the request may never have reached the provider."""

    kind = "transport"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, retryable=True)


class RequestTimeoutError(TransportError):
    kind = "timeout"
    default_message = "Request timeout"


class NetworkError(TransportError):
    kind = "network"
    default_message = "Network connection failed"


class ProviderError(LLMError):
    """The provider answered with a non-success HTTP status."""

    kind = "provider"

    def __init__(
        self,
        message: Optional[str] = None,
        retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, retryable=retryable)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    kind = "authentication"
    default_message = "Invalid API key"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, retryable=False, status_code=401)


class RateLimitError(ProviderError):
    """429 from the provider. Retryable after the advertised delay, if any."""

    kind = "provider_rate_limited"
    default_message = "Rate limit exceeded"

    def __init__(
        self,
        message: Optional[str] = None,
        retry_after_seconds: Optional[float] = None,
    ):
        super().__init__(message, retryable=True, status_code=429)
        self.retry_after_seconds = retry_after_seconds


class ServerError(ProviderError):
    kind = "server"
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, retryable=True, status_code=status_code)


class ClientError(ProviderError):
    """Any other 4xx (including 403). Never retried."""

    kind = "client"
    default_message = "Client error"

    def __init__(self, message: Optional[str] = None, status_code: int = 400):
        super().__init__(message, retryable=False, status_code=status_code)


class ResponseFormatError(LLMError):
    """Malformed or non-schema JSON: a prompt/schema mismatch, not a transient fault."""

    kind = "response_format"
    default_message = "Invalid JSON response"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, retryable=False)


class ConfigurationError(LLMError):
    kind = "configuration"
    default_message = "Invalid configuration"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, retryable=False)
