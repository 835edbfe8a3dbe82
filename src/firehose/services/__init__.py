# src/firehose/services/__init__.py
"""Business logic services for the Firehose application."""

from .counter_store import CounterStore, MemoryCounterStore, RedisCounterStore
from .hotness import HotnessParams, compute_hotness, recompute_hotness
from .leaderboard import LeaderboardCache, LeaderboardPeriod, compute_leaderboard
from .rate_limit import RateLimiter
from .voting import VoteResult, cast_vote

__all__ = [
    "CounterStore", "MemoryCounterStore", "RedisCounterStore",
    "HotnessParams", "compute_hotness", "recompute_hotness",
    "LeaderboardCache", "LeaderboardPeriod", "compute_leaderboard",
    "RateLimiter",
    "VoteResult", "cast_vote",
]
