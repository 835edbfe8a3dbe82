# src/firehose/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .cron import router as cron_router
from .leaderboard import router as leaderboard_router
from .posts import router as posts_router
from .system import router as system_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "cron_router",
    "leaderboard_router",
    "posts_router",
    "system_router",
    "users_router",
    "votes_router",
]
