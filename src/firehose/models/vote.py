# src/firehose/models/vote.py
"""Models capturing voting interactions on posts and comments."""

from enum import Enum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from firehose.db.session import Base, new_id
from firehose.db.time import now_epoch


class EntityType(str, Enum):
    """Content types that can receive votes."""

    POST = "post"
    COMMENT = "comment"


class VoteDirection(str, Enum):
    """Direction of a single vote."""

    UP = "up"
    DOWN = "down"


class Vote(Base):
    """Ledger row holding one user's current vote on one entity.

    The ledger is the source of truth for scores. A user changing their mind
    overwrites `direction` on the existing row.
    """

    __tablename__ = "votes"
    __table_args__ = (
        # At most one row per voter and entity.
        UniqueConstraint("user_id", "entity_type", "entity_id", name="uq_votes_user_entity"),
        CheckConstraint("entity_type IN ('post', 'comment')", name="ck_votes_entity_type"),
        CheckConstraint("direction IN ('up', 'down')", name="ck_votes_direction"),
        Index("ix_votes_entity", "entity_type", "entity_id"),
        Index("ix_votes_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id"), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(8), nullable=False)
    # Not a foreign key: points at posts.id or comments.id depending on entity_type.
    entity_id: Mapped[str] = mapped_column(String(32), nullable=False)
    direction: Mapped[str] = mapped_column(String(4), nullable=False)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
