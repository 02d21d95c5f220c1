"""
Redis-backed plan storage and trip data.

Keys (all under the "tripgen" namespace):
- generated_plan:ids               INCR counter for plan ids
- generated_plan:{id}              GeneratedPlan JSON
- trip:{id}:generated_plans        SET of plan ids for a trip
- trip:{id}                        {"user_id": ..., "facts": TripFacts JSON}
- trip:{id}:notes                  LIST of note contents, oldest first
- user:{id}:preferences            Preferences JSON

Plan updates read the stored record under WATCH and write it back in MULTI,
so a transition decided on a stale status is retried against the fresh one
and the state machine guard holds across processes.
"""

import json
import logging
from typing import Callable, List, Optional, Tuple

import redis

from tripgen.generation.schemas import Preferences, TripFacts
from tripgen.plans.models import GeneratedPlan, PlanNotFoundError, PlanStatus
from tripgen.plans.repository import GeneratedPlanRepository
from tripgen.plans.sources import TripDataSource, TripNotFoundError
from tripgen.shared.contracts.plan_content import PlanContent
from tripgen.shared.logging.config import log_plan_transition


logger = logging.getLogger(__name__)

KEY_PREFIX = "tripgen"


def get_redis_client(redis_url: str) -> redis.Redis:
    """Redis client with string decoding enabled."""
    return redis.from_url(redis_url, decode_responses=True)


class RedisGeneratedPlanRepository(GeneratedPlanRepository):
    def __init__(self, redis_client: redis.Redis, key_prefix: str = KEY_PREFIX):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _plan_key(self, plan_id: int) -> str:
        return f"{self.key_prefix}:generated_plan:{plan_id}"

    def _trip_plans_key(self, trip_id: int) -> str:
        return f"{self.key_prefix}:trip:{trip_id}:generated_plans"

    def create(self, trip_id: int) -> GeneratedPlan:
        plan_id = int(self.redis.incr(f"{self.key_prefix}:generated_plan:ids"))
        plan = GeneratedPlan(id=plan_id, trip_id=trip_id)

        pipe = self.redis.pipeline()
        pipe.set(self._plan_key(plan.id), plan.model_dump_json())
        pipe.sadd(self._trip_plans_key(trip_id), plan.id)
        pipe.execute()

        logger.info(f"[plan={plan.id}] Created | trip={trip_id}, status={plan.status.value}")
        return plan

    def get(self, plan_id: int) -> Optional[GeneratedPlan]:
        raw = self.redis.get(self._plan_key(plan_id))
        return GeneratedPlan.model_validate_json(raw) if raw else None

    def list_for_trip(self, trip_id: int) -> List[GeneratedPlan]:
        """Plans for a trip, newest first."""
        ids = sorted(int(i) for i in self.redis.smembers(self._trip_plans_key(trip_id)))
        if not ids:
            return []
        raws = self.redis.mget([self._plan_key(i) for i in ids])
        plans = [GeneratedPlan.model_validate_json(raw) for raw in raws if raw]
        return sorted(plans, key=lambda p: (p.created_at, p.id), reverse=True)

    def transition(
        self,
        plan_id: int,
        status: PlanStatus,
        content: Optional[PlanContent] = None,
    ) -> GeneratedPlan:
        """
        Move a plan to `status`, atomically across processes.

        Raises:
            PlanNotFoundError: If the plan does not exist
            InvalidTransitionError: If the move is not allowed (e.g. out of a terminal state)
        """
        current, updated = self._update(plan_id, lambda plan: plan.transitioned(status, content))
        log_plan_transition(plan_id, current.status.value, updated.status.value)
        return updated

    def set_rating(self, plan_id: int, rating: int) -> GeneratedPlan:
        """
        Raises:
            PlanNotFoundError: If the plan does not exist
            RatingRejectedError: Unless the plan is completed and the rating is 1-10
        """
        _, updated = self._update(plan_id, lambda plan: plan.rated(rating))
        logger.info(f"[plan={plan_id}] Rated | rating={rating}")
        return updated

    def _update(
        self, plan_id: int, change: Callable[[GeneratedPlan], GeneratedPlan]
    ) -> Tuple[GeneratedPlan, GeneratedPlan]:
        key = self._plan_key(plan_id)

        def _apply(pipe) -> Tuple[GeneratedPlan, GeneratedPlan]:
            raw = pipe.get(key)
            if raw is None:
                raise PlanNotFoundError(plan_id)
            current = GeneratedPlan.model_validate_json(raw)
            updated = change(current)
            pipe.multi()
            pipe.set(key, updated.model_dump_json())
            return current, updated

        return self.redis.transaction(_apply, key, value_from_callable=True)


class RedisTripDataSource(TripDataSource):
    def __init__(self, redis_client: redis.Redis, key_prefix: str = KEY_PREFIX):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _trip_key(self, trip_id: int) -> str:
        return f"{self.key_prefix}:trip:{trip_id}"

    def _notes_key(self, trip_id: int) -> str:
        return f"{self.key_prefix}:trip:{trip_id}:notes"

    def _preferences_key(self, user_id: int) -> str:
        return f"{self.key_prefix}:user:{user_id}:preferences"

    def add_trip(self, trip_id: int, user_id: int, facts: TripFacts) -> None:
        record = {"user_id": user_id, "facts": facts.model_dump(mode="json")}
        self.redis.set(self._trip_key(trip_id), json.dumps(record))

    def add_note(self, trip_id: int, content: str) -> None:
        if not self.redis.exists(self._trip_key(trip_id)):
            raise TripNotFoundError(trip_id)
        self.redis.rpush(self._notes_key(trip_id), content)

    def set_preferences(self, user_id: int, preferences: Preferences) -> None:
        self.redis.set(self._preferences_key(user_id), preferences.model_dump_json())

    def get_trip_facts(self, trip_id: int) -> TripFacts:
        record = self._load_trip(trip_id)
        if record is None:
            raise TripNotFoundError(trip_id)
        return TripFacts.model_validate(record["facts"])

    def get_trip_owner(self, trip_id: int) -> Optional[int]:
        record = self._load_trip(trip_id)
        return int(record["user_id"]) if record else None

    def get_notes(self, trip_id: int) -> List[str]:
        """Note contents in creation order."""
        return list(self.redis.lrange(self._notes_key(trip_id), 0, -1))

    def get_preferences(self, user_id: int) -> Optional[Preferences]:
        raw = self.redis.get(self._preferences_key(user_id))
        return Preferences.model_validate_json(raw) if raw else None

    def _load_trip(self, trip_id: int) -> Optional[dict]:
        raw = self.redis.get(self._trip_key(trip_id))
        return json.loads(raw) if raw else None
