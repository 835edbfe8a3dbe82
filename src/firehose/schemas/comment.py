"""Comment-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import Pagination


class CommentCreate(BaseModel):
    body: str = Field(..., description="Markdown body of the comment")
    parent_id: str | None = Field(None, description="Comment being replied to")


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    id: str
    post_id: str
    user_id: str
    parent_id: str | None
    body: str
    score: int
    created_at: int
    updated_at: int
    user_display_name: str | None = None
    user_avatar_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_author(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        extracted = {name: getattr(data, name, None) for name in cls.model_fields}
        author = getattr(data, "author", None)
        if author is not None:
            extracted["user_display_name"] = author.display_name
            extracted["user_avatar_url"] = author.avatar_url
        return extracted

    model_config = ConfigDict(from_attributes=True)


class CommentCreated(BaseModel):
    success: bool = True
    id: str
    comments_count: int


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination
