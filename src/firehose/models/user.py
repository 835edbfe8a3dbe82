# src/firehose/models/user.py
"""SQLAlchemy models for user accounts."""

from __future__ import annotations

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from firehose.db.session import Base, new_id
from firehose.db.time import now_epoch


class User(Base):
    """Registered account identified by email.

    Accounts are created by the authentication collaborator; this service only
    reads them and lets owners edit their public profile fields.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    trust_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_epoch)
