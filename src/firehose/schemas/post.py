"""Post-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import Pagination


class PostCreate(BaseModel):
    """Schema for submitting a new post."""

    type: Literal["link", "self"] = Field(..., description="link or self post")
    title: str = Field(..., min_length=1, max_length=300)
    url: str | None = Field(None, description="Target URL, required for link posts")
    content: str | None = Field(None, max_length=40_000, description="Markdown body for self posts")
    image_url: str | None = None


class PostUpdate(BaseModel):
    """Schema for editing a post inside its edit window."""

    title: str = Field(..., max_length=300)
    content: str | None = Field(None, max_length=40_000)
    image_url: str | None = None


class PostCreated(BaseModel):
    success: bool = True
    id: str
    slug: str


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    type: str
    title: str
    url: str | None
    slug: str
    domain: str | None
    image_url: str | None
    body_markdown: str | None
    author_id: str
    author_display_name: str | None = None
    author_avatar_url: str | None = None
    score: int
    clicks: int
    comments_count: int
    hotness: float
    created_at: int
    updated_at: int
    can_edit: bool = False
    is_author: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten_author(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        extracted: dict[str, object | None] = {}
        for field_name in cls.model_fields:
            extracted[field_name] = getattr(data, field_name, None)
        extracted["body_markdown"] = getattr(data, "body_md", None)
        author = getattr(data, "author", None)
        if author is not None:
            extracted["author_display_name"] = author.display_name
            extracted["author_avatar_url"] = author.avatar_url
        extracted["can_edit"] = bool(extracted.get("can_edit"))
        extracted["is_author"] = bool(extracted.get("is_author"))
        return extracted

    model_config = ConfigDict(from_attributes=True)


class FeedResponse(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination


class RateLimitWindow(BaseModel):
    limit: int
    window: int
    window_hours: int


class PostRateLimitStatus(BaseModel):
    can_post: bool
    next_post_at: int
    time_remaining: int
    rate_limit: RateLimitWindow
