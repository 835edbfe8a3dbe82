"""Comment listing and submission."""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firehose.models import Comment, Post, User
from firehose.services.errors import EntityNotFoundError, PersistenceError, ValidationError
from firehose.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 10_000
MAX_PAGE_SIZE = 100


class CommentSort(str, Enum):
    BEST = "best"
    NEW = "new"


def _require_post(db: Session, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise EntityNotFoundError("post", post_id)
    return post


def list_comments(
    db: Session,
    post_id: str,
    *,
    sort: CommentSort | str = CommentSort.BEST,
    limit: int = 50,
    offset: int = 0,
) -> list[Comment]:
    """Return top-level comments of a post."""
    _require_post(db, post_id)
    sort = CommentSort(sort)
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = max(0, int(offset))

    if sort is CommentSort.NEW:
        ordering = (Comment.created_at.desc(), Comment.id.asc())
    else:
        ordering = (Comment.score.desc(), Comment.created_at.desc(), Comment.id.asc())

    stmt = (
        select(Comment)
        .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
        .order_by(*ordering)
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars())


def recompute_comments_count(db: Session, post: Post) -> int:
    """Rebuild a post's cached comment count from the comment rows."""
    db.flush()
    post.comments_count = int(
        db.execute(
            select(func.count()).select_from(Comment).where(Comment.post_id == post.id)
        ).scalar_one()
    )
    return post.comments_count


def submit_comment(
    db: Session,
    *,
    user: User,
    post_id: str,
    body: str,
    parent_id: str | None,
    limiter: RateLimiter,
    now: int,
) -> Comment:
    """Add a comment (or reply) to a post.

    The hourly comment allowance is consumed before the write.

    Raises:
        ValidationError: Empty or oversized body.
        EntityNotFoundError: Unknown post, or parent not in the same post.
        RateLimitExceededError: Allowance exhausted.
        PersistenceError: The store failed.
    """
    text = (body or "").strip()
    if not text:
        raise ValidationError("Comment body required")
    if len(body) > MAX_COMMENT_LENGTH:
        raise ValidationError("Comment too long (max 10,000 characters)")

    post = _require_post(db, post_id)
    if parent_id:
        parent = db.execute(
            select(Comment.id).where(Comment.id == parent_id, Comment.post_id == post_id)
        ).first()
        if parent is None:
            raise EntityNotFoundError("parent comment", parent_id)

    limiter.enforce("comment", user.id)

    comment = Comment(
        post_id=post_id,
        user_id=user.id,
        body=text,
        parent_id=parent_id or None,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(comment)
        recompute_comments_count(db, post)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Comment on post %s failed", post_id)
        raise PersistenceError("Failed to submit comment") from err
    return comment
