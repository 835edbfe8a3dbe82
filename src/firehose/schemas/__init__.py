# src/firehose/schemas/__init__.py
"""Pydantic schemas for API request and response models."""

from .comment import CommentCreate, CommentCreated, CommentListResponse, CommentResponse
from .common import Pagination, StatusResponse
from .leaderboard import AuthorStandingResponse, AuthorStatsResponse, LeaderboardResponse
from .post import (
    FeedResponse,
    PostCreate,
    PostCreated,
    PostRateLimitStatus,
    PostResponse,
    PostUpdate,
)
from .user import UserProfileResponse, UserProfileUpdate, UserPublic
from .vote import MyVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentCreated", "CommentListResponse", "CommentResponse",
    "Pagination", "StatusResponse",
    "AuthorStandingResponse", "AuthorStatsResponse", "LeaderboardResponse",
    "FeedResponse", "PostCreate", "PostCreated", "PostRateLimitStatus", "PostResponse", "PostUpdate",
    "UserProfileResponse", "UserProfileUpdate", "UserPublic",
    "MyVoteResponse", "VoteCreate", "VoteResponse",
]
