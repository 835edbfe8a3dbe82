# src/firehose/api/v1/endpoints/comments.py
"""Comment endpoints, nested under their post."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from firehose.models import Post
from firehose.schemas.comment import (
    CommentCreate,
    CommentCreated,
    CommentListResponse,
    CommentResponse,
)
from firehose.schemas.common import Pagination
from firehose.services import comments as comment_service
from firehose.services.comments import CommentSort
from firehose.services.errors import FirehoseError

from ..dependencies import ClockDep, CurrentUserDep, RateLimiterDep, SessionDep, raise_http_error

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.get("", response_model=CommentListResponse)
async def list_comments(
    post_id: str,
    db: SessionDep,
    sort: CommentSort = CommentSort.BEST,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CommentListResponse:
    """List the top-level comments of a post."""
    try:
        comments = comment_service.list_comments(db, post_id, sort=sort, limit=limit, offset=offset)
    except FirehoseError as err:
        raise_http_error(err)
    return CommentListResponse(
        comments=[CommentResponse.model_validate(comment) for comment in comments],
        pagination=Pagination.for_page(limit, offset, len(comments)),
    )


@router.post("", response_model=CommentCreated, status_code=status.HTTP_201_CREATED)
async def submit_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
    clock: ClockDep,
) -> CommentCreated:
    """Comment on a post, or reply to one of its comments."""
    try:
        comment = comment_service.submit_comment(
            db,
            user=current_user,
            post_id=post_id,
            body=comment_data.body,
            parent_id=comment_data.parent_id,
            limiter=limiter,
            now=clock(),
        )
    except FirehoseError as err:
        raise_http_error(err)
    post = db.get(Post, post_id)
    return CommentCreated(id=comment.id, comments_count=post.comments_count if post else 0)
