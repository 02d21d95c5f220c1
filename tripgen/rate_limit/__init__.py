"""Per-user admission control for plan generation."""

from tripgen.rate_limit.limiter import (
    DEFAULT_WINDOWS,
    RateLimitDecision,
    RateLimitExceeded,
    RateLimiter,
    RateWindow,
    SlidingWindowRateLimiter,
)
from tripgen.rate_limit.redis_limiter import RedisSlidingWindowRateLimiter

__all__ = [
    "DEFAULT_WINDOWS",
    "RateLimitDecision",
    "RateLimitExceeded",
    "RateLimiter",
    "RateWindow",
    "SlidingWindowRateLimiter",
    "RedisSlidingWindowRateLimiter",
]
