"""
Configuration for the generation service.

Centralizes the model parameters used for plan generation.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from tripgen.shared.llm.client import DEFAULT_MODEL


@dataclass(frozen=True)
class GenerationConfig:
    """
    Model parameters for plan generation.

    Attributes:
        model: Chat model identifier
        temperature: Sampling temperature
        max_tokens: Completion token limit
        schema_name: Name given to the structured-output schema
    """

    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 4000
    schema_name: str = "travel_plan"

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        load_dotenv()
        return cls(
            model=os.environ.get("LLM_MODEL", DEFAULT_MODEL),
            temperature=float(os.environ.get("LLM_TEMPERATURE", "0.7")),
            max_tokens=int(os.environ.get("LLM_MAX_TOKENS", "4000")),
        )


# Default configuration instance
DEFAULT_CONFIG = GenerationConfig()
