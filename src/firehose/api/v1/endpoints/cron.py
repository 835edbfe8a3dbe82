# src/firehose/api/v1/endpoints/cron.py
"""Batch jobs triggered by an external scheduler."""

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status

from firehose.services.errors import FirehoseError
from firehose.services.hotness import HotnessParams, recompute_hotness
from firehose.services.leaderboard import refresh_leaderboard_cache

from ..dependencies import ClockDep, LeaderboardCacheDep, SessionDep, SettingsDep, raise_http_error

logger = logging.getLogger(__name__)


def verify_cron_secret(
    settings: SettingsDep,
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Reject callers that do not present the configured cron secret.

    With no secret configured every call is rejected.
    """
    expected = settings.cron_secret
    if not expected or not x_cron_secret or not hmac.compare_digest(expected, x_cron_secret):
        logger.warning("Rejected cron call with missing or invalid secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid cron secret",
        )


router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


@router.post("/update-hotness")
async def update_hotness(db: SessionDep, clock: ClockDep, settings: SettingsDep) -> dict[str, object]:
    """Recompute hotness for every post inside the ranking window."""
    try:
        updated = recompute_hotness(db, clock(), HotnessParams.from_settings(settings))
    except FirehoseError as err:
        raise_http_error(err)
    return {"success": True, "updated": updated}


@router.post("/update-leaderboard")
async def update_leaderboard(
    db: SessionDep,
    clock: ClockDep,
    cache: LeaderboardCacheDep,
    settings: SettingsDep,
) -> dict[str, object]:
    """Recompute and cache the first page of each leaderboard period."""
    sizes = refresh_leaderboard_cache(
        db,
        cache,
        now=clock(),
        window_days=settings.leaderboard_window_days,
    )
    return {"success": True, "authors": sizes}
