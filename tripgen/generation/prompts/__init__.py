"""Prompt templates and builders for travel plan generation."""

from tripgen.generation.prompts.builders import (
    build_messages,
    build_system_prompt,
    build_user_prompt,
)
from tripgen.generation.prompts.templates import SYSTEM_PROMPT

__all__ = [
    "build_messages",
    "build_system_prompt",
    "build_user_prompt",
    "SYSTEM_PROMPT",
]
