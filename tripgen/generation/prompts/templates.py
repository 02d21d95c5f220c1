"""
Prompt templates for travel plan generation.

Static text lives here; prompts/builders.py fills in trip facts,
preferences, notes and option-driven instructions.
"""

from typing import Dict

from tripgen.generation.schemas import (
    Accommodation,
    ActivityPreference,
    Budget,
    EatingHabit,
)


SYSTEM_PROMPT = """You are an expert travel planning assistant. Your task is to create detailed, realistic, and exciting travel itineraries based on user preferences.

REQUIREMENTS:
1. Generate a complete day-by-day itinerary with exactly one entry per day of the trip, numbered from 1
2. Use the real calendar date of each day in YYYY-MM-DD format, starting with the trip start date
3. Provide realistic cost estimates in USD based on the destination and budget level
4. Include activity ratings from 0.0 to 5.0 based on popular review sites
5. Ensure all activities fit realistically within each day's timeframe
6. Consider the user's preferences for budget, accommodation type, activities, and eating habits
7. Include specific start times for each activity (e.g., "10:00 AM")
8. Provide engaging descriptions for each activity

OUTPUT FORMAT:
Respond only with JSON matching the exact schema provided. Do not add commentary outside the JSON.
All costs must be non-negative numbers in USD. All ratings must be between 0.0 and 5.0."""


TRIP_DETAILS_TEMPLATE = """Please create a detailed travel itinerary for the following trip:

TRIP DETAILS:
- Destination: {destination}
- Start Date: {start_date}
- End Date: {end_date}
- Duration: {duration_days} days
- Number of People: {group_size}"""


CLOSING_LINE = "Please generate a complete itinerary with daily activities{restaurants_clause}."


RESTAURANTS_INSTRUCTION = (
    "- Recommend restaurants for breakfast, lunch, and dinner each day."
)
NO_RESTAURANTS_INSTRUCTION = (
    "- Do not recommend restaurants; return an empty restaurants list for every day."
)
BUDGET_BREAKDOWN_INSTRUCTION = (
    "- Give both the total cost and the per-person cost for every activity, "
    "and make the summary totals equal the sum of the daily costs."
)


BUDGET_LABELS: Dict[Budget, str] = {
    Budget.BUDGET_CONSCIOUS: "Budget-conscious (affordable options)",
    Budget.STANDARD: "Standard (mid-range options)",
    Budget.LUXURY: "Luxury (premium options)",
}

ACCOMMODATION_LABELS: Dict[Accommodation, str] = {
    Accommodation.HOTEL: "Hotels",
    Accommodation.AIRBNB: "Airbnb/Vacation Rentals",
    Accommodation.HOSTEL: "Hostels",
    Accommodation.RESORT: "Resorts",
    Accommodation.CAMPING: "Camping",
}

EATING_HABIT_LABELS: Dict[EatingHabit, str] = {
    EatingHabit.RESTAURANTS_ONLY: "Restaurants only (all meals at restaurants)",
    EatingHabit.SELF_PREPARED: "Self-prepared (groceries and cooking)",
    EatingHabit.MIX: "Mix (combination of restaurants and self-prepared)",
}


def format_activity(activity: ActivityPreference) -> str:
    """Render an activity enum for display (sightseeing -> Sightseeing)."""
    return " ".join(part.capitalize() for part in activity.value.split("_"))
