"""Public profile reads and owner edits."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firehose.models import Post, User
from firehose.services.errors import EntityNotFoundError, PersistenceError, ValidationError
from firehose.services.leaderboard import AuthorStats, get_author_stats
from firehose.services.posts import is_valid_url

logger = logging.getLogger(__name__)

MAX_DISPLAY_NAME_LENGTH = 50
MAX_BIO_LENGTH = 500
RECENT_POSTS_LIMIT = 10


@dataclass(frozen=True)
class UserProfile:
    user: User
    stats: AuthorStats
    recent_posts: list[Post]


def get_profile(db: Session, user_id: str) -> UserProfile:
    user = db.get(User, user_id)
    if user is None:
        raise EntityNotFoundError("user", user_id)
    recent = db.execute(
        select(Post)
        .where(Post.author_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.asc())
        .limit(RECENT_POSTS_LIMIT)
    ).scalars()
    return UserProfile(user=user, stats=get_author_stats(db, user_id), recent_posts=list(recent))


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def update_profile(
    db: Session,
    user: User,
    *,
    display_name: str,
    bio: str | None = None,
    website_url: str | None = None,
    avatar_url: str | None = None,
    now: int,
) -> User:
    """Validate and store the owner's editable profile fields."""
    name = (display_name or "").strip()
    if not name:
        raise ValidationError("Display name is required")
    if len(name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError("Display name must be 50 characters or less")
    if bio and len(bio) > MAX_BIO_LENGTH:
        raise ValidationError("Bio must be 500 characters or less")

    website = _clean(website_url)
    if website and not is_valid_url(website):
        raise ValidationError("Please provide a valid website URL")
    avatar = _clean(avatar_url)
    if avatar and not is_valid_url(avatar):
        raise ValidationError("Please provide a valid avatar URL")

    user.display_name = name
    user.bio = _clean(bio)
    user.website_url = website
    user.avatar_url = avatar
    user.updated_at = now
    try:
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Profile update failed for %s", user.id)
        raise PersistenceError("Failed to update profile") from err
    return user
