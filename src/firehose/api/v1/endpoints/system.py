"""System and transparency endpoints for Firehose API."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from firehose.services.rate_limit import RATE_LIMITS

from ..dependencies import ClockDep, CounterStoreDep, SessionDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config(settings: SettingsDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for transparency UIs.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "rate_limits": {
            action: {"limit": policy.limit, "window_seconds": policy.window_seconds}
            for action, policy in RATE_LIMITS.items()
        },
        "hotness": {
            "comment_weight": settings.hotness_comment_weight,
            "age_offset_hours": settings.hotness_age_offset_hours,
            "decay_exponent": settings.hotness_decay_exponent,
            "window_days": settings.hotness_window_days,
        },
        "leaderboard": {
            "window_days": settings.leaderboard_window_days,
            "cache_seconds": settings.leaderboard_cache_seconds,
        },
        "posts": {"edit_window_seconds": settings.post_edit_window_seconds},
    }


@router.get("/health")
async def get_system_health(
    db: SessionDep,
    store: CounterStoreDep,
    clock: ClockDep,
    settings: SettingsDep,
) -> dict[str, object]:
    """Health check covering the database and the counter store."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        db_status = f"unhealthy: {e}"

    try:
        store.get("health:probe")
        store_status = "healthy"
    except (RedisError, OSError) as e:
        logger.warning("Counter store health check failed: %s", e)
        store_status = f"unhealthy: {e}"

    healthy = db_status == "healthy" and store_status == "healthy"
    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": clock(),
        "components": {
            "database": db_status,
            "counter_store": store_status,
        },
        "version": settings.app_version,
    }
