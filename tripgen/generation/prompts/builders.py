"""
Prompt builders for travel plan generation.

These functions construct the messages sent to the LLM from a
GenerationRequest. Sections with nothing to say (no preferences, no notes)
are left out entirely rather than filled with placeholders.
"""

from typing import Dict, List

from tripgen.generation.prompts.templates import (
    ACCOMMODATION_LABELS,
    BUDGET_BREAKDOWN_INSTRUCTION,
    BUDGET_LABELS,
    CLOSING_LINE,
    EATING_HABIT_LABELS,
    NO_RESTAURANTS_INSTRUCTION,
    RESTAURANTS_INSTRUCTION,
    SYSTEM_PROMPT,
    TRIP_DETAILS_TEMPLATE,
    format_activity,
)
from tripgen.generation.schemas import GenerationOptions, GenerationRequest, Preferences


DATE_DISPLAY_FORMAT = "%B %d, %Y"


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def format_preferences(preferences: Preferences) -> List[str]:
    """
    Render each present preference as a bullet line.

    Args:
        preferences: User preferences (any field may be absent)

    Returns:
        One line per present preference, in a stable order
    """
    lines = []
    if preferences.budget is not None:
        lines.append(f"- Budget: {BUDGET_LABELS[preferences.budget]}")
    if preferences.accommodation is not None:
        lines.append(f"- Accommodation: {ACCOMMODATION_LABELS[preferences.accommodation]}")
    if preferences.eating_habits is not None:
        lines.append(f"- Eating Habits: {EATING_HABIT_LABELS[preferences.eating_habits]}")
    if preferences.activities:
        activities = ", ".join(format_activity(a) for a in preferences.activities)
        lines.append(f"- Preferred Activities: {activities}")
    return lines


def format_notes(notes: List[str]) -> List[str]:
    return [f"- {note}" for note in notes]


def format_instructions(options: GenerationOptions) -> List[str]:
    lines = [RESTAURANTS_INSTRUCTION if options.include_restaurants else NO_RESTAURANTS_INSTRUCTION]
    if options.include_budget_breakdown:
        lines.append(BUDGET_BREAKDOWN_INSTRUCTION)
    return lines


def build_user_prompt(request: GenerationRequest) -> str:
    """
    Build the user message enumerating trip facts, preferences and notes.

    Args:
        request: Generation request

    Returns:
        The user prompt text
    """
    trip = request.trip
    sections = [
        TRIP_DETAILS_TEMPLATE.format(
            destination=trip.destination,
            start_date=trip.start_date.strftime(DATE_DISPLAY_FORMAT),
            end_date=trip.end_date.strftime(DATE_DISPLAY_FORMAT),
            duration_days=trip.duration_days,
            group_size=trip.group_size,
        )
    ]

    preference_lines = format_preferences(request.preferences)
    if preference_lines:
        sections.append("USER PREFERENCES:\n" + "\n".join(preference_lines))

    if request.notes:
        sections.append("ADDITIONAL NOTES FROM USER:\n" + "\n".join(format_notes(request.notes)))

    sections.append("INSTRUCTIONS:\n" + "\n".join(format_instructions(request.options)))

    restaurants_clause = " and restaurant recommendations" if request.options.include_restaurants else ""
    sections.append(CLOSING_LINE.format(restaurants_clause=restaurants_clause))

    return "\n\n".join(sections)


def build_messages(request: GenerationRequest) -> List[Dict[str, str]]:
    """Build the [system, user] messages array for the chat-completions call."""
    return [
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": build_user_prompt(request)},
    ]
