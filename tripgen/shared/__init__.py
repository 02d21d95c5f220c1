"""
Shared infrastructure for the generation pipeline.

Modules:
- llm: Structured-output chat-completion client with retry logic
- logging: Structured JSON logging
- contracts: Generated plan content contract
"""

from tripgen.shared.llm.client import LLMClient
from tripgen.shared.llm.config import LLMClientConfig
from tripgen.shared.logging.config import setup_logging, log_plan_transition

__all__ = [
    "LLMClient",
    "LLMClientConfig",
    "setup_logging",
    "log_plan_transition",
]
