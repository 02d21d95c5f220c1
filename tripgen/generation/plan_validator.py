"""
Business validation for generated plans.

A plan can be schema-valid and still internally inconsistent (wrong number
of days, dates outside the trip, negative costs). These checks run after
parsing and before a plan may be marked completed.
"""

from datetime import timedelta
from typing import List

from tripgen.generation.schemas import GenerationRequest
from tripgen.shared.contracts.plan_content import (
    Activity,
    DailyItinerary,
    PlanContent,
    Restaurant,
)


MIN_RATING = 0.0
MAX_RATING = 5.0


def validate_plan(plan: PlanContent, request: GenerationRequest) -> List[str]:
    """
    Validate a parsed plan against the trip it was generated for.

    Args:
        plan: Parsed plan content
        request: The request the plan answers

    Returns:
        List of violations (empty when the plan is consistent)
    """
    errors: List[str] = []
    errors.extend(_validate_summary(plan, request))
    errors.extend(_validate_itinerary(plan, request))
    for index, day in enumerate(plan.daily_itinerary):
        errors.extend(_validate_day(day, index, request))
    return errors


def _validate_summary(plan: PlanContent, request: GenerationRequest) -> List[str]:
    errors = []
    summary = plan.summary
    expected_duration = request.duration_days

    if summary.duration_days != expected_duration:
        errors.append(
            f"Duration mismatch: expected {expected_duration} days, got {summary.duration_days}"
        )
    if summary.number_of_people != request.trip.group_size:
        errors.append(
            f"Number of people mismatch: expected {request.trip.group_size}, "
            f"got {summary.number_of_people}"
        )
    if summary.total_cost_usd < 0 or summary.cost_per_person_usd < 0:
        errors.append("Summary costs must be non-negative")
    return errors


def _validate_itinerary(plan: PlanContent, request: GenerationRequest) -> List[str]:
    expected_duration = request.duration_days
    actual = len(plan.daily_itinerary)
    if actual != expected_duration:
        return [f"Itinerary length mismatch: expected {expected_duration} days, got {actual}"]
    return []


def _validate_day(day: DailyItinerary, index: int, request: GenerationRequest) -> List[str]:
    errors = []
    trip = request.trip
    expected_day = index + 1

    if day.day != expected_day:
        errors.append(f"Day number mismatch on index {index}: expected {expected_day}, got {day.day}")

    if not trip.start_date <= day.date <= trip.end_date:
        errors.append(f"Date {day.date.isoformat()} for day {day.day} is outside the trip dates")
    else:
        expected_date = trip.start_date + timedelta(days=index)
        if day.date != expected_date:
            errors.append(
                f"Date mismatch for day {day.day}: expected {expected_date.isoformat()}, "
                f"got {day.date.isoformat()}"
            )

    if not day.activities:
        errors.append(f"Day {day.day} has no activities")

    for activity in day.activities:
        errors.extend(_validate_activity(activity, day.day))
    for restaurant in day.restaurants:
        errors.extend(_validate_restaurant(restaurant, day.day))

    return errors


def _validate_activity(activity: Activity, day_number: int) -> List[str]:
    errors = []
    label = f"activity '{activity.name}' on day {day_number}"
    if activity.duration_minutes <= 0:
        errors.append(f"Invalid duration for {label}: {activity.duration_minutes}")
    if activity.estimated_cost_usd < 0 or activity.estimated_cost_per_person_usd < 0:
        errors.append(f"Negative cost for {label}")
    if not MIN_RATING <= activity.rating <= MAX_RATING:
        errors.append(f"Invalid rating for {label}: {activity.rating}")
    return errors


def _validate_restaurant(restaurant: Restaurant, day_number: int) -> List[str]:
    errors = []
    label = f"restaurant '{restaurant.name}' on day {day_number}"
    if restaurant.estimated_cost_per_person_usd < 0:
        errors.append(f"Negative cost for {label}")
    if not MIN_RATING <= restaurant.rating <= MAX_RATING:
        errors.append(f"Invalid rating for {label}: {restaurant.rating}")
    return errors
