# src/firehose/api/v1/endpoints/posts.py
"""Post-related endpoints for the Firehose API."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from firehose.models import Post, User
from firehose.schemas.common import Pagination, StatusResponse
from firehose.schemas.post import (
    FeedResponse,
    PostCreate,
    PostCreated,
    PostRateLimitStatus,
    PostResponse,
    PostUpdate,
)
from firehose.services import posts as post_service
from firehose.services.errors import FirehoseError
from firehose.services.posts import FeedSort, NewPost, TopPeriod

from ..dependencies import (
    ClockDep,
    CurrentUserDep,
    OptionalUserDep,
    RateLimiterDep,
    SessionDep,
    SettingsDep,
    raise_http_error,
)

router = APIRouter(prefix="/posts", tags=["posts"])


def _to_response(post: Post, viewer: User | None, now: int, edit_window: int) -> PostResponse:
    response = PostResponse.model_validate(post)
    response.is_author = viewer is not None and viewer.id == post.author_id
    response.can_edit = post_service.can_edit(post, viewer, now, edit_window)
    return response


@router.post("/", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def submit_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
    clock: ClockDep,
) -> PostCreated:
    """Submit a link or self post. Authors get one post per day."""
    try:
        post = post_service.submit_post(
            db,
            author=current_user,
            data=NewPost(
                type=post_data.type,
                title=post_data.title,
                url=post_data.url,
                content=post_data.content,
                image_url=post_data.image_url,
            ),
            limiter=limiter,
            now=clock(),
        )
    except FirehoseError as err:
        raise_http_error(err)
    return PostCreated(id=post.id, slug=post.slug)


@router.get("/rate-limit-status", response_model=PostRateLimitStatus)
async def rate_limit_status(
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> PostRateLimitStatus:
    """Tell the caller when they may submit their next post."""
    return PostRateLimitStatus.model_validate(
        post_service.post_rate_limit_status(db, current_user.id, clock())
    )


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    db: SessionDep,
    clock: ClockDep,
    settings: SettingsDep,
    viewer: OptionalUserDep,
    sort: FeedSort = FeedSort.HOT,
    period: TopPeriod = TopPeriod.DAY,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> FeedResponse:
    """List posts ordered by hotness, recency or score."""
    now = clock()
    posts = post_service.list_feed(db, sort=sort, period=period, limit=limit, offset=offset, now=now)
    return FeedResponse(
        posts=[_to_response(post, viewer, now, settings.post_edit_window_seconds) for post in posts],
        pagination=Pagination.for_page(limit, offset, len(posts)),
    )


@router.get("/{post_ref}", response_model=PostResponse)
async def get_post(
    post_ref: str,
    db: SessionDep,
    clock: ClockDep,
    settings: SettingsDep,
    viewer: OptionalUserDep,
) -> PostResponse:
    """Get a post by id or slug."""
    try:
        post = post_service.get_post(db, post_ref)
    except FirehoseError as err:
        raise_http_error(err)
    return _to_response(post, viewer, clock(), settings.post_edit_window_seconds)


@router.put("/{post_ref}", response_model=PostResponse)
async def edit_post(
    post_ref: str,
    update: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
    settings: SettingsDep,
) -> PostResponse:
    """Edit a post; only its author may, and only shortly after submitting it."""
    now = clock()
    try:
        post = post_service.edit_post(
            db,
            post_ref=post_ref,
            user=current_user,
            title=update.title,
            content=update.content,
            image_url=update.image_url,
            now=now,
            edit_window_seconds=settings.post_edit_window_seconds,
        )
    except FirehoseError as err:
        raise_http_error(err)
    return _to_response(post, current_user, now, settings.post_edit_window_seconds)


@router.post("/{post_id}/click", response_model=StatusResponse)
async def track_click(post_id: str, db: SessionDep) -> StatusResponse:
    """Count an outbound click on a link post. No authentication required."""
    try:
        post_service.track_click(db, post_id)
    except FirehoseError as err:
        raise_http_error(err)
    return StatusResponse()
