# src/firehose/models/post.py
"""SQLAlchemy models for posts and related attributes."""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from firehose.db.session import Base, new_id
from firehose.db.time import now_epoch
from firehose.models.user import User

POST_TYPE_LINK = "link"
POST_TYPE_SELF = "self"


class Post(Base):
    """Submitted link or self post.

    `score`, `comments_count` and `hotness` are caches. The vote ledger and the
    comment rows are authoritative; see `firehose.services.voting` and
    `firehose.services.hotness` for the code that owns them.
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("type IN ('link', 'self')", name="ck_posts_type"),
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_hotness", "hotness"),
        Index("ix_posts_score", "score"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    type: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    # NULL for self posts.
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    domain: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    normalized_url_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Markdown source; only self posts carry a body.
    body_md: Mapped[str | None] = mapped_column(Text, nullable=True)

    author_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hotness: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)

    author: Mapped[User] = relationship(User, lazy="joined")
