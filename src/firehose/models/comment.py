# src/firehose/models/comment.py
"""SQLAlchemy model for comments on posts."""

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from firehose.db.session import Base, new_id
from firehose.db.time import now_epoch
from firehose.models.user import User


class Comment(Base):
    """Comment attached to a post, optionally replying to another comment."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_id", "post_id"),
        Index("ix_comments_user_id", "user_id"),
        Index("ix_comments_parent_id", "parent_id"),
        Index("ix_comments_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id"), nullable=False)
    # Top-level comments have parent_id = NULL.
    parent_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("comments.id"),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    # Cached net votes; rebuilt from the ledger by the score aggregator.
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)

    author: Mapped[User] = relationship(User, lazy="joined")
