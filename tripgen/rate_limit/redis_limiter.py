"""
Redis-backed sliding-window rate limiter.

One sorted set per user holds an admission per member, scored by its wall
clock time. The read of the set and the write of a new admission run as a
WATCH/MULTI transaction on that key, so API processes racing for the same
user retry instead of over-admitting.
"""

import logging
import math
import time
import uuid
from typing import Callable, Dict, Hashable, Optional, Sequence

import redis

from tripgen.rate_limit.limiter import (
    DEFAULT_WINDOWS,
    RateLimitDecision,
    RateLimitExceeded,
    RateLimiter,
    RateWindow,
)


logger = logging.getLogger(__name__)

KEY_PREFIX = "tripgen:rate_limit"


class RedisSlidingWindowRateLimiter(RateLimiter):
    """
    Args:
        redis_client: Client created with decode_responses=True
        windows: Windows that must all have room for an admission
        clock: Wall clock in seconds, shared by every process using the same Redis
        key_prefix: Namespace for the per-user sorted sets
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        windows: Sequence[RateWindow] = DEFAULT_WINDOWS,
        clock: Callable[[], float] = time.time,
        key_prefix: str = KEY_PREFIX,
    ):
        super().__init__(windows)
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._clock = clock
        self._ttl = int(math.ceil(self._horizon))

    def _key(self, user_id: Hashable) -> str:
        return f"{self.key_prefix}:{user_id}"

    def check_and_increment(self, user_id: Hashable) -> RateLimitDecision:
        key = self._key(user_id)
        member = uuid.uuid4().hex

        def _admit(pipe) -> Optional[RateLimitExceeded]:
            now = self._clock()
            admissions = self._load(pipe, key, now)
            exceeded = self._first_exceeded(user_id, admissions, now)

            pipe.multi()
            pipe.zremrangebyscore(key, "-inf", now - self._horizon)
            if exceeded is None:
                pipe.zadd(key, {member: now})
                pipe.expire(key, self._ttl)
            return exceeded

        exceeded = self.redis.transaction(_admit, key, value_from_callable=True)
        if exceeded is not None:
            return RateLimitDecision(allowed=False, exceeded=exceeded)
        return RateLimitDecision(allowed=True)

    def remaining(self, user_id: Hashable) -> Dict[str, int]:
        now = self._clock()
        return self._remaining(self._load(self.redis, self._key(user_id), now), now)

    def reset(self, user_id: Optional[Hashable] = None) -> None:
        if user_id is not None:
            self.redis.delete(self._key(user_id))
            return
        keys = list(self.redis.scan_iter(match=f"{self.key_prefix}:*"))
        if keys:
            self.redis.delete(*keys)
        logger.info(f"[rate_limit] Reset {len(keys)} user(s)")

    def _load(self, client, key: str, now: float) -> Sequence[float]:
        """Admission times inside the horizon, oldest first."""
        entries = client.zrangebyscore(key, f"({now - self._horizon}", "+inf", withscores=True)
        return [score for _, score in entries]
