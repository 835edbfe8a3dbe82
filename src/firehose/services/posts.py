"""Service-level helpers for submitting, reading and listing posts."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firehose.db.session import new_id
from firehose.db.time import SECONDS_PER_DAY, SECONDS_PER_HOUR
from firehose.models import POST_TYPE_LINK, POST_TYPE_SELF, Post, User
from firehose.services.errors import (
    DuplicatePostError,
    EntityNotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from firehose.services.rate_limit import RATE_LIMITS, RateLimiter

logger = logging.getLogger(__name__)

TRACKING_PARAMS = frozenset(
    {"utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content", "ref", "source"}
)
SLUG_BASE_LENGTH = 60
MAX_PAGE_SIZE = 100


class FeedSort(str, Enum):
    HOT = "hot"
    NEW = "new"
    TOP = "top"


class TopPeriod(str, Enum):
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    ALL = "all"


_TOP_PERIOD_SECONDS: dict[TopPeriod, int | None] = {
    TopPeriod.DAY: SECONDS_PER_DAY,
    TopPeriod.WEEK: 7 * SECONDS_PER_DAY,
    TopPeriod.MONTH: 30 * SECONDS_PER_DAY,
    TopPeriod.ALL: None,
}


# URL helpers -----------------------------------------------------------------------


def normalize_url(url: str) -> str:
    """Strip tracking parameters and the fragment from a URL."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRACKING_PARAMS]
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, urlencode(query), ""))


def get_domain(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def hash_url(url: str) -> str:
    """SHA-256 hex digest of the normalized URL, used for duplicate detection."""
    return hashlib.sha256(normalize_url(url).encode("utf-8")).hexdigest()


def create_slug(title: str, post_id: str) -> str:
    base = title.lower()
    base = re.sub(r"[^\w\s-]", "", base)
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"-+", "-", base)
    base = base.strip()[:SLUG_BASE_LENGTH]
    return f"{base}-{post_id[:8]}"


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


# Submission ------------------------------------------------------------------------


@dataclass(frozen=True)
class NewPost:
    """Validated-at-the-edge submission payload."""

    type: str
    title: str
    url: str | None = None
    content: str | None = None
    image_url: str | None = None


def submit_post(
    db: Session,
    *,
    author: User,
    data: NewPost,
    limiter: RateLimiter,
    now: int,
) -> Post:
    """Create a link or self post.

    The daily allowance is checked up front but only consumed once the post
    is committed, so failed submissions do not cost the author their post.

    Raises:
        RateLimitExceededError: The author already posted in the current window.
        ValidationError: Missing title, URL or content.
        DuplicatePostError: A link post with the same normalized URL exists.
        PersistenceError: The store failed.
    """
    limiter.ensure_available("post", author.id)

    title = (data.title or "").strip()
    if not title or data.type not in {POST_TYPE_LINK, POST_TYPE_SELF}:
        raise ValidationError("Invalid post data")
    if data.type == POST_TYPE_LINK and not (data.url and is_valid_url(data.url.strip())):
        raise ValidationError("URL required for link posts")
    if data.type == POST_TYPE_SELF and not (data.content and data.content.strip()):
        raise ValidationError("Content required for self posts")

    post_id = new_id()
    domain = None
    url_hash = None
    url = None
    body_md = None
    if data.type == POST_TYPE_LINK:
        url = data.url.strip()  # type: ignore[union-attr]
        domain = get_domain(url)
        url_hash = hash_url(url)
        duplicate = db.execute(
            select(Post.id).where(Post.normalized_url_hash == url_hash)
        ).first()
        if duplicate is not None:
            raise DuplicatePostError("This URL has already been posted")
    else:
        body_md = data.content.strip()  # type: ignore[union-attr]

    post = Post(
        id=post_id,
        type=data.type,
        title=title,
        url=url,
        slug=create_slug(title, post_id),
        domain=domain,
        normalized_url_hash=url_hash,
        image_url=data.image_url or None,
        body_md=body_md,
        author_id=author.id,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(post)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Submit post failed for author %s", author.id)
        raise PersistenceError("Failed to submit post") from err

    # Only now count the submission against the daily allowance.
    limiter.record("post", author.id)
    logger.info("Post %s submitted by %s", post.id, author.id)
    return post


def post_rate_limit_status(db: Session, user_id: str, now: int) -> dict[str, object]:
    """Describe when `user_id` may submit their next post.

    Derived from the author's latest post so it survives counter-store resets.
    """
    policy = RATE_LIMITS["post"]
    last_created = db.execute(
        select(Post.created_at)
        .where(Post.author_id == user_id)
        .order_by(Post.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()

    can_post = True
    next_post_at = now
    time_remaining = 0
    if last_created is not None:
        next_allowed = int(last_created) + policy.window_seconds
        if now < next_allowed:
            can_post = False
            next_post_at = next_allowed
            time_remaining = next_allowed - now

    return {
        "can_post": can_post,
        "next_post_at": next_post_at,
        "time_remaining": time_remaining,
        "rate_limit": {
            "limit": policy.limit,
            "window": policy.window_seconds,
            "window_hours": policy.window_seconds // SECONDS_PER_HOUR,
        },
    }


# Reading ---------------------------------------------------------------------------


def get_post(db: Session, post_ref: str) -> Post:
    """Return a post by id or slug, or raise `EntityNotFoundError`."""
    post = db.execute(
        select(Post).where((Post.id == post_ref) | (Post.slug == post_ref))
    ).scalars().first()
    if post is None:
        raise EntityNotFoundError("post", post_ref)
    return post


def can_edit(post: Post, user: User | None, now: int, edit_window_seconds: int) -> bool:
    if user is None or post.author_id != user.id:
        return False
    return now - post.created_at <= edit_window_seconds


def list_feed(
    db: Session,
    *,
    sort: FeedSort | str = FeedSort.HOT,
    period: TopPeriod | str = TopPeriod.DAY,
    limit: int = 50,
    offset: int = 0,
    now: int,
) -> list[Post]:
    """Return one page of the global feed.

    ``hot`` orders by the cached hotness, ``new`` by creation time and ``top``
    by score within `period`. Post id breaks ties.
    """
    sort = FeedSort(sort)
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = max(0, int(offset))

    stmt = select(Post)
    if sort is FeedSort.NEW:
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.asc())
    elif sort is FeedSort.TOP:
        span = _TOP_PERIOD_SECONDS[TopPeriod(period)]
        if span is not None:
            stmt = stmt.where(Post.created_at > now - span)
        stmt = stmt.order_by(Post.score.desc(), Post.id.asc())
    else:
        stmt = stmt.order_by(Post.hotness.desc(), Post.id.asc())

    return list(db.execute(stmt.limit(limit).offset(offset)).scalars())


# Mutations -------------------------------------------------------------------------


def edit_post(
    db: Session,
    *,
    post_ref: str,
    user: User,
    title: str,
    content: str | None,
    image_url: str | None,
    now: int,
    edit_window_seconds: int,
) -> Post:
    """Update the title, body and image of a post its author created recently."""
    if not title or not title.strip():
        raise ValidationError("Title is required")

    post = get_post(db, post_ref)
    if post.author_id != user.id:
        raise PermissionDeniedError("You can only edit your own posts")
    if now - post.created_at > edit_window_seconds:
        raise PermissionDeniedError("Posts can only be edited within 2 hours of creation")
    if post.type == POST_TYPE_SELF and not (content and content.strip()):
        raise ValidationError("Content is required for self posts")

    post.title = title.strip()
    post.image_url = image_url or None
    if post.type == POST_TYPE_SELF and content:
        post.body_md = content.strip()
    post.updated_at = now
    try:
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Edit of post %s failed", post.id)
        raise PersistenceError("Failed to update post") from err
    return post


def track_click(db: Session, post_id: str) -> None:
    """Count one outbound click on a link post."""
    post = db.execute(
        select(Post).where(Post.id == post_id, Post.type == POST_TYPE_LINK)
    ).scalars().first()
    if post is None:
        raise EntityNotFoundError("link post", post_id)
    # Increment in SQL so concurrent clicks do not overwrite each other.
    post.clicks = Post.clicks + 1
    try:
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Click tracking failed for post %s", post_id)
        raise PersistenceError("Failed to track click") from err
