# src/firehose/api/v1/endpoints/leaderboard.py
"""Author leaderboard endpoint."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Query

from firehose.schemas.common import Pagination
from firehose.schemas.leaderboard import AuthorStandingResponse, LeaderboardResponse
from firehose.services.leaderboard import LeaderboardPeriod, query_leaderboard

from ..dependencies import ClockDep, LeaderboardCacheDep, SessionDep, SettingsDep

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    db: SessionDep,
    clock: ClockDep,
    cache: LeaderboardCacheDep,
    settings: SettingsDep,
    period: LeaderboardPeriod = LeaderboardPeriod.TOTAL,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> LeaderboardResponse:
    """Rank authors by reputation, all-time or over the last week.

    Served from the cached first page when it covers the request.
    """
    standings = query_leaderboard(
        db,
        period=period,
        limit=limit,
        offset=offset,
        now=clock(),
        cache=cache,
        window_days=settings.leaderboard_window_days,
    )
    return LeaderboardResponse(
        period=period,
        authors=[AuthorStandingResponse(**asdict(standing)) for standing in standings],
        pagination=Pagination.for_page(limit, offset, len(standings)),
    )
