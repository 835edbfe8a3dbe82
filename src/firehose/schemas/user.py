"""User profile Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .leaderboard import AuthorStatsResponse
from .post import PostResponse


class UserPublic(BaseModel):
    """Public fields of an account; the email is never exposed."""

    id: str
    display_name: str
    avatar_url: str | None = None
    bio: str | None = None
    website_url: str | None = None
    created_at: int

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(BaseModel):
    user: UserPublic
    stats: AuthorStatsResponse
    recent_posts: list[PostResponse]
    can_edit_profile: bool = False


class UserProfileUpdate(BaseModel):
    display_name: str = Field(..., description="Shown next to posts and comments")
    bio: str | None = None
    website_url: str | None = None
    avatar_url: str | None = None
