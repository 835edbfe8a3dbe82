"""Author reputation aggregated from posts, comments, votes and clicks.

    total_score = post_upvotes + 0.5 * comment_upvotes + total_clicks

Each term aggregates the author's content; for the weekly period the content
itself must have been created inside the window. Votes are attributed to the
era of the content they target, not to the time they were cast.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from sqlalchemy import Select, and_, func, literal, select
from sqlalchemy.orm import Session

from firehose.db.time import SECONDS_PER_DAY
from firehose.models import POST_TYPE_LINK, Comment, EntityType, Post, User, Vote, VoteDirection
from firehose.services.counter_store import CounterStore

logger = logging.getLogger(__name__)

COMMENT_UPVOTE_WEIGHT = 0.5
MAX_PAGE_SIZE = 100


class LeaderboardPeriod(str, Enum):
    TOTAL = "total"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class AuthorStats:
    """Reputation components for one author."""

    post_upvotes: int = 0
    comment_upvotes: int = 0
    total_clicks: int = 0
    posts_count: int = 0
    comments_count: int = 0
    total_score: float = 0.0


@dataclass(frozen=True)
class AuthorStanding:
    """One leaderboard row."""

    id: str
    display_name: str
    avatar_url: str | None
    bio: str | None
    created_at: int
    post_upvotes: int
    comment_upvotes: int
    total_clicks: int
    posts_count: int
    comments_count: int
    total_score: float


def _stat_columns(since: int | None) -> tuple[list[Any], Any, list[tuple[Any, Any]]]:
    """Build the per-author aggregate subqueries.

    Returns the selectable stat columns, the total score expression and the
    (subquery, onclause) pairs to outer-join against ``users``.
    """
    post_window = [Post.created_at > since] if since is not None else []
    comment_window = [Comment.created_at > since] if since is not None else []

    post_upvotes = (
        select(Post.author_id.label("author_id"), func.count(Vote.id).label("total"))
        .select_from(Post)
        .outerjoin(
            Vote,
            and_(
                Vote.entity_type == EntityType.POST.value,
                Vote.entity_id == Post.id,
                Vote.direction == VoteDirection.UP.value,
            ),
        )
        .where(*post_window)
        .group_by(Post.author_id)
        .subquery("post_upvotes")
    )
    comment_upvotes = (
        select(Comment.user_id.label("author_id"), func.count(Vote.id).label("total"))
        .select_from(Comment)
        .outerjoin(
            Vote,
            and_(
                Vote.entity_type == EntityType.COMMENT.value,
                Vote.entity_id == Comment.id,
                Vote.direction == VoteDirection.UP.value,
            ),
        )
        .where(*comment_window)
        .group_by(Comment.user_id)
        .subquery("comment_upvotes")
    )
    clicks = (
        select(Post.author_id.label("author_id"), func.sum(Post.clicks).label("total"))
        .where(Post.type == POST_TYPE_LINK, *post_window)
        .group_by(Post.author_id)
        .subquery("click_stats")
    )
    post_counts = (
        select(Post.author_id.label("author_id"), func.count().label("total"))
        .select_from(Post)
        .where(*post_window)
        .group_by(Post.author_id)
        .subquery("post_stats")
    )
    comment_counts = (
        select(Comment.user_id.label("author_id"), func.count().label("total"))
        .select_from(Comment)
        .where(*comment_window)
        .group_by(Comment.user_id)
        .subquery("comment_stats")
    )

    post_upvotes_col = func.coalesce(post_upvotes.c.total, 0)
    comment_upvotes_col = func.coalesce(comment_upvotes.c.total, 0)
    clicks_col = func.coalesce(clicks.c.total, 0)
    total_score = post_upvotes_col + literal(COMMENT_UPVOTE_WEIGHT) * comment_upvotes_col + clicks_col

    columns = [
        post_upvotes_col.label("post_upvotes"),
        comment_upvotes_col.label("comment_upvotes"),
        clicks_col.label("total_clicks"),
        func.coalesce(post_counts.c.total, 0).label("posts_count"),
        func.coalesce(comment_counts.c.total, 0).label("comments_count"),
        total_score.label("total_score"),
    ]
    joins = [
        (sub, sub.c.author_id == User.id)
        for sub in (post_upvotes, comment_upvotes, clicks, post_counts, comment_counts)
    ]
    return columns, total_score, joins


def _author_query(since: int | None, *extra_columns: Any) -> tuple[Select[Any], Any]:
    columns, total_score, joins = _stat_columns(since)
    stmt = select(*extra_columns, *columns).select_from(User)
    for subquery, onclause in joins:
        stmt = stmt.outerjoin(subquery, onclause)
    return stmt, total_score


def window_start(period: LeaderboardPeriod, now: int, window_days: int = 7) -> int | None:
    """Return the exclusive lower bound on content creation time for `period`."""
    if period is LeaderboardPeriod.WEEKLY:
        return now - window_days * SECONDS_PER_DAY
    return None


def compute_leaderboard(
    db: Session,
    *,
    period: LeaderboardPeriod | str = LeaderboardPeriod.TOTAL,
    limit: int = 50,
    offset: int = 0,
    now: int,
    window_days: int = 7,
) -> list[AuthorStanding]:
    """Rank authors by total score.

    Authors whose score is not positive are left out entirely. Ties are broken
    by author id ascending so that pages are stable.
    """
    period = LeaderboardPeriod(period)
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = max(0, int(offset))

    stmt, total_score = _author_query(
        window_start(period, now, window_days),
        User.id,
        User.display_name,
        User.avatar_url,
        User.bio,
        User.created_at,
    )
    stmt = (
        stmt.where(total_score > 0)
        .order_by(total_score.desc(), User.id.asc())
        .limit(limit)
        .offset(offset)
    )
    rows = db.execute(stmt).mappings().all()
    return [
        AuthorStanding(
            id=row["id"],
            display_name=row["display_name"],
            avatar_url=row["avatar_url"],
            bio=row["bio"],
            created_at=int(row["created_at"]),
            post_upvotes=int(row["post_upvotes"]),
            comment_upvotes=int(row["comment_upvotes"]),
            total_clicks=int(row["total_clicks"]),
            posts_count=int(row["posts_count"]),
            comments_count=int(row["comments_count"]),
            total_score=float(row["total_score"]),
        )
        for row in rows
    ]


def get_author_stats(db: Session, user_id: str) -> AuthorStats:
    """Return all-time reputation components for one author."""
    stmt, _ = _author_query(None)
    row = db.execute(stmt.where(User.id == user_id)).mappings().first()
    if row is None:
        return AuthorStats()
    return AuthorStats(
        post_upvotes=int(row["post_upvotes"]),
        comment_upvotes=int(row["comment_upvotes"]),
        total_clicks=int(row["total_clicks"]),
        posts_count=int(row["posts_count"]),
        comments_count=int(row["comments_count"]),
        total_score=float(row["total_score"]),
    )


class LeaderboardCache:
    """First page of each period's leaderboard kept in the counter store.

    A weekly page keeps the window of its refresh time until it expires, so
    content that ages out meanwhile still counts for at most `ttl_seconds`.
    """

    def __init__(self, store: CounterStore, *, ttl_seconds: int = 3600, size: int = MAX_PAGE_SIZE) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.size = size

    @staticmethod
    def _key(period: LeaderboardPeriod) -> str:
        return f"leaderboard:{period.value}"

    def store_page(self, period: LeaderboardPeriod, standings: list[AuthorStanding]) -> None:
        payload = json.dumps([asdict(standing) for standing in standings])
        self.store.set_value(self._key(period), payload, self.ttl_seconds)

    def read(self, period: LeaderboardPeriod, limit: int, offset: int) -> list[AuthorStanding] | None:
        """Return the requested slice if the cached page covers it."""
        raw = self.store.get_value(self._key(period))
        if raw is None:
            return None
        cached = [AuthorStanding(**item) for item in json.loads(raw)]
        # A short page means the cache holds every ranked author.
        if offset + limit <= len(cached) or len(cached) < self.size:
            return cached[offset:offset + limit]
        return None


def refresh_leaderboard_cache(
    db: Session,
    cache: LeaderboardCache,
    *,
    now: int,
    window_days: int = 7,
) -> dict[str, int]:
    """Recompute and cache the first page of every period."""
    sizes: dict[str, int] = {}
    for period in LeaderboardPeriod:
        standings = compute_leaderboard(
            db,
            period=period,
            limit=cache.size,
            offset=0,
            now=now,
            window_days=window_days,
        )
        cache.store_page(period, standings)
        sizes[period.value] = len(standings)
    logger.info("Refreshed leaderboard cache: %s", sizes)
    return sizes


def query_leaderboard(
    db: Session,
    *,
    period: LeaderboardPeriod | str,
    limit: int,
    offset: int,
    now: int,
    cache: LeaderboardCache | None = None,
    window_days: int = 7,
) -> list[AuthorStanding]:
    """Serve a leaderboard page, from the cache when it covers the request."""
    period = LeaderboardPeriod(period)
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = max(0, int(offset))
    if cache is not None:
        cached = cache.read(period, limit, offset)
        if cached is not None:
            return cached
    return compute_leaderboard(
        db,
        period=period,
        limit=limit,
        offset=offset,
        now=now,
        window_days=window_days,
    )
