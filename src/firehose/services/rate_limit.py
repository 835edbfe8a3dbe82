"""Fixed-window rate limiting for user actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from firehose.db.time import SECONDS_PER_DAY, SECONDS_PER_HOUR, Clock, now_epoch
from firehose.services.counter_store import CounterStore, get_counter_store
from firehose.services.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Allowance of `limit` actions per `window_seconds`."""

    limit: int
    window_seconds: int
    message: str = "Rate limit exceeded"


RATE_LIMITS: Final[dict[str, RateLimitPolicy]] = {
    "post": RateLimitPolicy(1, SECONDS_PER_DAY, "Rate limit exceeded. One post per day."),
    "comment": RateLimitPolicy(10, SECONDS_PER_HOUR, "Rate limit exceeded. 10 comments per hour max."),
    "vote": RateLimitPolicy(100, SECONDS_PER_HOUR),
    # Keyed by email rather than user id: the requester is not signed in yet.
    "magic_link": RateLimitPolicy(3, SECONDS_PER_HOUR),
}


def rate_limit_key(action: str, subject: str) -> str:
    """Return the counter key for an action performed by `subject`."""
    return f"{action}_limit:{subject}"


class RateLimiter:
    """Counter-based guard over a `CounterStore`.

    A window opens with the first counted action for a key and closes
    `window_seconds` later, when the store expires the counter.
    """

    def __init__(self, store: CounterStore, clock: Clock = now_epoch) -> None:
        self.store = store
        self._clock = clock

    def check_and_consume(self, key: str, limit: int, window_seconds: int) -> bool:
        """Count one action against `key` and report whether it is allowed.

        Rejected attempts are not counted: the check and the increment are a
        single atomic store operation.
        """
        if self.store.incr_below(key, limit, window_seconds) is None:
            logger.warning("Rate limit hit for %s (limit %d per %ds)", key, limit, window_seconds)
            return False
        return True

    def peek(self, key: str, limit: int) -> bool:
        """Return True if one more action would be allowed, without counting it."""
        return self.store.get(key) < limit

    def consume(self, key: str, window_seconds: int) -> int:
        """Count one action unconditionally and return the new count."""
        return self.store.incr(key, window_seconds)

    def remaining(self, key: str, limit: int) -> int:
        return max(0, limit - self.store.get(key))

    def reset_at(self, key: str) -> int:
        """Epoch second at which the current window for `key` closes."""
        ttl = self.store.ttl(key)
        now = self._clock()
        return now + ttl if ttl is not None else now

    # Policy helpers ------------------------------------------------------------

    def enforce(self, action: str, subject: str) -> None:
        """Consume one `action` for `subject` or raise `RateLimitExceededError`."""
        policy = RATE_LIMITS[action]
        key = rate_limit_key(action, subject)
        if not self.check_and_consume(key, policy.limit, policy.window_seconds):
            raise RateLimitExceededError(action, policy.message)

    def ensure_available(self, action: str, subject: str) -> None:
        """Raise if `subject` has no allowance left, without consuming any."""
        policy = RATE_LIMITS[action]
        if not self.peek(rate_limit_key(action, subject), policy.limit):
            raise RateLimitExceededError(action, policy.message)

    def record(self, action: str, subject: str) -> None:
        """Count a completed `action`; used when consumption follows success."""
        policy = RATE_LIMITS[action]
        self.consume(rate_limit_key(action, subject), policy.window_seconds)


def get_rate_limiter() -> RateLimiter:
    """Return a rate limiter bound to the configured counter store."""
    return RateLimiter(get_counter_store())
