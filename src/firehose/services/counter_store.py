"""Expiring key/value stores backing rate-limit counters and cached views."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import Lock

import redis

from firehose.core.settings import settings
from firehose.db.time import Clock, now_epoch

logger = logging.getLogger(__name__)

# KEYS[1]: counter; ARGV[1]: limit; ARGV[2]: window seconds.
# Returns the new count, or nil when the counter is already full.
_INCR_BELOW_LUA = """
local current = tonumber(redis.call("GET", KEYS[1]) or "0")
if current >= tonumber(ARGV[1]) then
    return false
end
local value = redis.call("INCR", KEYS[1])
if redis.call("TTL", KEYS[1]) < 0 then
    redis.call("EXPIRE", KEYS[1], ARGV[2])
end
return value
"""


class CounterStore(ABC):
    """Key -> string store with per-key expiry.

    Counters are stored as decimal strings so both backends can share keys
    with other tooling that inspects them.
    """

    @abstractmethod
    def incr(self, key: str, ttl_seconds: int) -> int:
        """Increment `key` and return the new value.

        The expiry is set only when the increment creates the key; later
        increments keep the original deadline.
        """

    @abstractmethod
    def incr_below(self, key: str, limit: int, ttl_seconds: int) -> int | None:
        """Atomically increment `key` unless it already holds `limit` or more.

        Returns the new value, or None when the counter is full and was left
        untouched. Expiry follows the same rule as `incr`.
        """

    @abstractmethod
    def get(self, key: str) -> int:
        """Return the counter stored at `key`, 0 if absent or expired."""

    @abstractmethod
    def ttl(self, key: str) -> int | None:
        """Return the seconds left before `key` expires, None if absent."""

    @abstractmethod
    def get_value(self, key: str) -> str | None:
        """Return the raw string stored at `key`."""

    @abstractmethod
    def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store `value` at `key` for `ttl_seconds`."""


class RedisCounterStore(CounterStore):
    """Counter store backed by Redis keys with native TTLs."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client
        self._incr_below = client.register_script(_INCR_BELOW_LUA)

    @classmethod
    def from_url(cls, url: str) -> RedisCounterStore:
        return cls(redis.from_url(url))

    def incr(self, key: str, ttl_seconds: int) -> int:
        # SET NX seeds the key with its deadline; INCR never touches the expiry.
        pipe = self._redis.pipeline()
        pipe.set(key, 0, ex=max(1, int(ttl_seconds)), nx=True)
        pipe.incr(key)
        _, value = pipe.execute()
        return int(value)

    def incr_below(self, key: str, limit: int, ttl_seconds: int) -> int | None:
        value = self._incr_below(keys=[key], args=[int(limit), max(1, int(ttl_seconds))])
        return int(value) if value is not None else None

    def get(self, key: str) -> int:
        raw = self._redis.get(key)
        return int(raw) if raw is not None else 0

    def ttl(self, key: str) -> int | None:
        remaining = int(self._redis.ttl(key))
        # -2: missing key, -1: no expiry
        return remaining if remaining >= 0 else None

    def get_value(self, key: str) -> str | None:
        raw = self._redis.get(key)
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else str(raw)

    def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        self._redis.set(key, value, ex=max(1, int(ttl_seconds)))


class MemoryCounterStore(CounterStore):
    """In-process store for single-worker deployments and tests.

    Expiry is evaluated lazily against the injected clock.
    """

    def __init__(self, clock: Clock = now_epoch) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, int]] = {}
        self._lock = Lock()

    def _live(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return value

    def _incr_locked(self, key: str, current: str | None, ttl_seconds: int) -> int:
        if current is None:
            self._entries[key] = ("1", self._clock() + max(1, int(ttl_seconds)))
            return 1
        value = int(current) + 1
        _, expires_at = self._entries[key]
        self._entries[key] = (str(value), expires_at)
        return value

    def incr(self, key: str, ttl_seconds: int) -> int:
        with self._lock:
            return self._incr_locked(key, self._live(key), ttl_seconds)

    def incr_below(self, key: str, limit: int, ttl_seconds: int) -> int | None:
        with self._lock:
            current = self._live(key)
            if int(current or 0) >= limit:
                return None
            return self._incr_locked(key, current, ttl_seconds)

    def get(self, key: str) -> int:
        with self._lock:
            current = self._live(key)
            return int(current) if current is not None else 0

    def ttl(self, key: str) -> int | None:
        with self._lock:
            if self._live(key) is None:
                return None
            return self._entries[key][1] - self._clock()

    def get_value(self, key: str) -> str | None:
        with self._lock:
            return self._live(key)

    def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + max(1, int(ttl_seconds)))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


@lru_cache
def get_counter_store() -> CounterStore:
    """Return the process-wide counter store selected by configuration."""
    if settings.counter_backend == "memory":
        logger.info("Using in-process counter store")
        return MemoryCounterStore()
    return RedisCounterStore.from_url(settings.redis_url)
