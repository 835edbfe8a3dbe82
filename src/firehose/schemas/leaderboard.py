"""Leaderboard Pydantic schemas."""

from pydantic import BaseModel, ConfigDict

from firehose.services.leaderboard import LeaderboardPeriod

from .common import Pagination


class AuthorStatsResponse(BaseModel):
    post_upvotes: int
    comment_upvotes: int
    total_clicks: int
    posts_count: int
    comments_count: int
    total_score: float

    model_config = ConfigDict(from_attributes=True)


class AuthorStandingResponse(AuthorStatsResponse):
    """One ranked author."""

    id: str
    display_name: str
    avatar_url: str | None = None
    bio: str | None = None
    created_at: int


class LeaderboardResponse(BaseModel):
    period: LeaderboardPeriod
    authors: list[AuthorStandingResponse]
    pagination: Pagination
