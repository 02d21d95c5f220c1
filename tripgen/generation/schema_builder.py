"""
JSON Schema for structured plan output.

Hand-maintained mirror of tripgen.shared.contracts.plan_content. Strict
structured output requires every property to be listed in "required" and
"additionalProperties" to be false at every object level.
test_plan_content.py asserts this schema and the pydantic models never drift.
"""

from typing import Any, Dict, List

from tripgen.shared.contracts.plan_content import Meal


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties.keys()),
        "additionalProperties": False,
    }


def _array(items: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": items}


def summary_schema() -> Dict[str, Any]:
    return _object({
        "total_cost_usd": {"type": "number", "description": "Total estimated cost for all people"},
        "cost_per_person_usd": {"type": "number", "description": "Cost per person"},
        "duration_days": {"type": "integer", "description": "Number of days"},
        "number_of_people": {"type": "integer", "description": "Number of travelers"},
    })


def activity_schema() -> Dict[str, Any]:
    return _object({
        "time": {"type": "string", "description": 'Start time (e.g., "10:00 AM")'},
        "name": {"type": "string", "description": "Activity name"},
        "duration_minutes": {"type": "integer", "description": "Duration in minutes"},
        "estimated_cost_usd": {"type": "number", "description": "Total cost for all people"},
        "estimated_cost_per_person_usd": {"type": "number", "description": "Cost per person"},
        "rating": {"type": "number", "description": "Rating from 0.0 to 5.0"},
        "description": {"type": "string", "description": "Activity description"},
    })


def restaurant_schema() -> Dict[str, Any]:
    meals: List[str] = [meal.value for meal in Meal]
    return _object({
        "meal": {"type": "string", "enum": meals, "description": "Meal type: breakfast, lunch, or dinner"},
        "name": {"type": "string", "description": "Restaurant name"},
        "cuisine": {"type": "string", "description": "Type of cuisine"},
        "estimated_cost_per_person_usd": {"type": "number", "description": "Cost per person"},
        "rating": {"type": "number", "description": "Rating from 0.0 to 5.0"},
    })


def daily_itinerary_schema() -> Dict[str, Any]:
    return _object({
        "day": {"type": "integer", "description": "Day number (1, 2, 3, etc.)"},
        "date": {"type": "string", "description": "Date in YYYY-MM-DD format"},
        "activities": _array(activity_schema()),
        "restaurants": _array(restaurant_schema()),
    })


def build_plan_schema() -> Dict[str, Any]:
    """
    Build the top-level JSON Schema matching PlanContent.

    Returns:
        Schema dict for response_format.json_schema.schema
    """
    return _object({
        "summary": summary_schema(),
        "daily_itinerary": _array(daily_itinerary_schema()),
    })
