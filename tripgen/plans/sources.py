"""
Collaborator-provided trip data.

The generation core never queries the application's database itself: the
trip collaborator hands over trip facts, ordered note contents and optional
preferences as plain values. InMemoryTripDataSource is the in-process
implementation used by the tests and single-process runs; RedisTripDataSource
(redis_store.py) is visible to the Celery workers as well.
"""

import threading
from typing import Dict, List, Optional

from tripgen.generation.schemas import Preferences, TripFacts


class TripNotFoundError(LookupError):
    def __init__(self, trip_id: int):
        super().__init__(f"Trip {trip_id} not found")
        self.trip_id = trip_id


class TripDataSource:
    def add_trip(self, trip_id: int, user_id: int, facts: TripFacts) -> None:
        raise NotImplementedError

    def add_note(self, trip_id: int, content: str) -> None:
        raise NotImplementedError

    def set_preferences(self, user_id: int, preferences: Preferences) -> None:
        raise NotImplementedError

    def get_trip_facts(self, trip_id: int) -> TripFacts:
        raise NotImplementedError

    def get_trip_owner(self, trip_id: int) -> Optional[int]:
        raise NotImplementedError

    def get_notes(self, trip_id: int) -> List[str]:
        raise NotImplementedError

    def get_preferences(self, user_id: int) -> Optional[Preferences]:
        raise NotImplementedError


class InMemoryTripDataSource(TripDataSource):
    def __init__(self) -> None:
        self._trips: Dict[int, TripFacts] = {}
        self._owners: Dict[int, int] = {}
        self._notes: Dict[int, List[str]] = {}
        self._preferences: Dict[int, Preferences] = {}
        self._lock = threading.Lock()

    def add_trip(self, trip_id: int, user_id: int, facts: TripFacts) -> None:
        with self._lock:
            self._trips[trip_id] = facts
            self._owners[trip_id] = user_id
            self._notes.setdefault(trip_id, [])

    def add_note(self, trip_id: int, content: str) -> None:
        with self._lock:
            if trip_id not in self._trips:
                raise TripNotFoundError(trip_id)
            self._notes[trip_id].append(content)

    def set_preferences(self, user_id: int, preferences: Preferences) -> None:
        with self._lock:
            self._preferences[user_id] = preferences

    def get_trip_facts(self, trip_id: int) -> TripFacts:
        with self._lock:
            facts = self._trips.get(trip_id)
        if facts is None:
            raise TripNotFoundError(trip_id)
        return facts

    def get_trip_owner(self, trip_id: int) -> Optional[int]:
        with self._lock:
            return self._owners.get(trip_id)

    def get_notes(self, trip_id: int) -> List[str]:
        """Note contents in creation order."""
        with self._lock:
            return list(self._notes.get(trip_id, []))

    def get_preferences(self, user_id: int) -> Optional[Preferences]:
        with self._lock:
            return self._preferences.get(user_id)
