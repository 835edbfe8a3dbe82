# src/firehose/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    cron_router,
    leaderboard_router,
    posts_router,
    system_router,
    users_router,
    votes_router,
)

__all__ = [
    "posts_router",
    "comments_router",
    "votes_router",
    "leaderboard_router",
    "users_router",
    "cron_router",
    "system_router",
]
