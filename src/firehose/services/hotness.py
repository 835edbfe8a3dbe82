"""Decay-weighted ranking for the hot feed.

Hotness is refreshed in batch rather than on every vote:

    hotness = (score + w * comments_count) / (age_hours + c) ** alpha

Only cached post fields are read, so a refresh costs O(1) per post and the
ranking lags the ledger by at most one refresh period.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firehose.core.settings import Settings
from firehose.db.time import SECONDS_PER_DAY, SECONDS_PER_HOUR
from firehose.models import Post
from firehose.services.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HotnessParams:
    """Constants of the hotness formula."""

    comment_weight: float = 0.2
    age_offset_hours: float = 2.0
    decay_exponent: float = 1.5
    window_days: int = 7

    @classmethod
    def from_settings(cls, settings: Settings) -> HotnessParams:
        return cls(
            comment_weight=settings.hotness_comment_weight,
            age_offset_hours=settings.hotness_age_offset_hours,
            decay_exponent=settings.hotness_decay_exponent,
            window_days=settings.hotness_window_days,
        )

    @property
    def window_seconds(self) -> int:
        return self.window_days * SECONDS_PER_DAY


DEFAULT_PARAMS = HotnessParams()


def age_hours(created_at: int, now: int) -> float:
    """Hours elapsed since `created_at`, clamped at zero for future timestamps."""
    return max(0.0, (now - created_at) / SECONDS_PER_HOUR)


def compute_hotness(
    score: int,
    comments_count: int,
    hours: float,
    params: HotnessParams = DEFAULT_PARAMS,
) -> float:
    """Return the hotness of a post with the given cached fields and age."""
    numerator = score + params.comment_weight * comments_count
    return numerator / ((max(0.0, hours) + params.age_offset_hours) ** params.decay_exponent)


def recompute_hotness(db: Session, now: int, params: HotnessParams = DEFAULT_PARAMS) -> int:
    """Rewrite `hotness` for every post created inside the recency window.

    Posts older than the window keep their last computed value.

    Returns:
        Number of posts updated.
    """
    cutoff = now - params.window_seconds
    try:
        posts = db.execute(select(Post).where(Post.created_at > cutoff)).scalars().all()
        for post in posts:
            post.hotness = compute_hotness(
                post.score,
                post.comments_count,
                age_hours(post.created_at, now),
                params,
            )
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Hotness recompute failed")
        raise PersistenceError("Failed to update hotness") from err

    logger.info("Recomputed hotness for %d posts", len(posts))
    return len(posts)
