"""
Input validation for generation requests.

Runs before any prompt is built; an invalid request never reaches the LLM.
"""

from typing import List

from tripgen.generation.schemas import GenerationRequest


MAX_TRIP_DURATION_DAYS = 30


def validate_request(request: GenerationRequest) -> List[str]:
    """
    Validate a generation request.

    Notes may be empty and preferences may have every field absent; only the
    trip facts are mandatory.

    Args:
        request: Request to validate

    Returns:
        List of human-readable errors (empty when valid)
    """
    errors: List[str] = []
    trip = request.trip

    if not trip.destination or not trip.destination.strip():
        errors.append("Trip destination is required")

    if trip.group_size < 1:
        errors.append("Number of people must be positive")

    if trip.end_date <= trip.start_date:
        errors.append("Trip end date must be after start date")
    elif trip.duration_days > MAX_TRIP_DURATION_DAYS:
        errors.append(f"Trip duration must be between 1 and {MAX_TRIP_DURATION_DAYS} days")

    return errors
