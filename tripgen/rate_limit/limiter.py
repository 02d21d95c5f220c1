"""
Per-user sliding-window rate limiter for plan generation.

Each user gets independent rolling windows (by default 5 admissions per
hour and 50 per day). A request is admitted only if every window has room,
and the admission is recorded in the same critical section as the check, so
concurrent requests for one user cannot over-admit.

SlidingWindowRateLimiter keeps that section in process memory;
RedisSlidingWindowRateLimiter (redis_limiter.py) keeps it in a Redis
transaction so every API process shares one count.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Hashable, List, Optional, Sequence


logger = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    """A user's generation quota is used up for one of the windows."""

    def __init__(self, window: str, limit: int, retry_after_seconds: float):
        super().__init__(
            f"Generation limit of {limit} per {window} reached; "
            f"retry in {retry_after_seconds:.0f}s"
        )
        self.window = window
        self.limit = limit
        self.retry_after_seconds = retry_after_seconds


@dataclass(frozen=True)
class RateWindow:
    name: str
    seconds: float
    limit: int


DEFAULT_WINDOWS = (
    RateWindow(name="hour", seconds=3600, limit=5),
    RateWindow(name="day", seconds=86400, limit=50),
)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    exceeded: Optional[RateLimitExceeded] = None


class RateLimiter:
    """
    Window bookkeeping shared by the limiter backends.

    Subclasses store admission timestamps however they like and hand them to
    _first_exceeded, sorted oldest first, to decide.
    """

    def __init__(self, windows: Sequence[RateWindow] = DEFAULT_WINDOWS):
        if not windows:
            raise ValueError("At least one rate window is required")
        self.windows = tuple(windows)
        self._horizon = max(w.seconds for w in self.windows)

    def check_and_increment(self, user_id: Hashable) -> RateLimitDecision:
        raise NotImplementedError

    def remaining(self, user_id: Hashable) -> Dict[str, int]:
        raise NotImplementedError

    def reset(self, user_id: Optional[Hashable] = None) -> None:
        raise NotImplementedError

    def _first_exceeded(
        self, user_id: Hashable, admissions: Sequence[float], now: float
    ) -> Optional[RateLimitExceeded]:
        for window in self.windows:
            in_window = self._in_window(admissions, now, window)
            if len(in_window) >= window.limit:
                # The oldest admission still inside the window leaves it first.
                oldest = in_window[-window.limit]
                retry_after = max(oldest + window.seconds - now, 0.0)
                logger.info(
                    f"[rate_limit] [user={user_id}] Denied | window={window.name}, "
                    f"limit={window.limit}, retry_after={retry_after:.0f}s"
                )
                return RateLimitExceeded(window.name, window.limit, retry_after)
        return None

    def _remaining(self, admissions: Sequence[float], now: float) -> Dict[str, int]:
        return {
            window.name: max(window.limit - len(self._in_window(admissions, now, window)), 0)
            for window in self.windows
        }

    @staticmethod
    def _in_window(admissions: Sequence[float], now: float, window: RateWindow) -> List[float]:
        cutoff = now - window.seconds
        return [t for t in admissions if t > cutoff]


class SlidingWindowRateLimiter(RateLimiter):
    """
    Thread-safe in-memory sliding-window limiter.

    Stores one timestamp per admission, pruned to the longest window. Users
    with no admission left inside the horizon are swept out once per horizon.
    Only correct within one process; RedisSlidingWindowRateLimiter is the
    shared variant.

    Args:
        windows: Windows that must all have room for an admission
        clock: Monotonic time source in seconds (injected by tests)
    """

    def __init__(
        self,
        windows: Sequence[RateWindow] = DEFAULT_WINDOWS,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(windows)
        self._clock = clock
        self._admissions: Dict[Hashable, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def check_and_increment(self, user_id: Hashable) -> RateLimitDecision:
        """
        Admit and record one generation for `user_id`, or deny it.

        Returns:
            RateLimitDecision(allowed=True) on admission, otherwise
            allowed=False with the RateLimitExceeded describing the window
        """
        with self._lock:
            now = self._clock()
            self._sweep(now)
            admissions = self._admissions.get(user_id, deque())
            self._prune(admissions, now)

            exceeded = self._first_exceeded(user_id, admissions, now)
            if exceeded is not None:
                return RateLimitDecision(allowed=False, exceeded=exceeded)

            admissions.append(now)
            self._admissions[user_id] = admissions
            return RateLimitDecision(allowed=True)

    def remaining(self, user_id: Hashable) -> Dict[str, int]:
        """Remaining admissions per window name."""
        with self._lock:
            return self._remaining(self._admissions.get(user_id, ()), self._clock())

    def reset(self, user_id: Optional[Hashable] = None) -> None:
        with self._lock:
            if user_id is None:
                self._admissions.clear()
            else:
                self._admissions.pop(user_id, None)

    def _prune(self, admissions: Deque[float], now: float) -> None:
        while admissions and admissions[0] <= now - self._horizon:
            admissions.popleft()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._horizon:
            return
        self._last_sweep = now
        for user_id in list(self._admissions):
            admissions = self._admissions[user_id]
            self._prune(admissions, now)
            if not admissions:
                del self._admissions[user_id]
