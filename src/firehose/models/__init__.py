# src/firehose/models/__init__.py
"""SQLAlchemy models for the Firehose application."""

from .comment import Comment
from .post import POST_TYPE_LINK, POST_TYPE_SELF, Post
from .user import User
from .vote import EntityType, Vote, VoteDirection

__all__ = [
    "Comment",
    "Post", "POST_TYPE_LINK", "POST_TYPE_SELF",
    "User",
    "Vote", "EntityType", "VoteDirection",
]
