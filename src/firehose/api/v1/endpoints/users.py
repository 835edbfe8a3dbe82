"""Public user profiles."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from firehose.schemas.leaderboard import AuthorStatsResponse
from firehose.schemas.post import PostResponse
from firehose.schemas.user import UserProfileResponse, UserProfileUpdate, UserPublic
from firehose.services import users as user_service
from firehose.services.errors import FirehoseError

from ..dependencies import ClockDep, CurrentUserDep, OptionalUserDep, SessionDep, raise_http_error

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me", response_model=UserPublic)
async def update_me(
    update: UserProfileUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> UserPublic:
    """Update the caller's display name, bio and links."""
    try:
        user = user_service.update_profile(
            db,
            current_user,
            display_name=update.display_name,
            bio=update.bio,
            website_url=update.website_url,
            avatar_url=update.avatar_url,
            now=clock(),
        )
    except FirehoseError as err:
        raise_http_error(err)
    return UserPublic.model_validate(user)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(user_id: str, db: SessionDep, viewer: OptionalUserDep) -> UserProfileResponse:
    """Return a user's public profile, reputation stats and recent posts."""
    try:
        profile = user_service.get_profile(db, user_id)
    except FirehoseError as err:
        raise_http_error(err)
    return UserProfileResponse(
        user=UserPublic.model_validate(profile.user),
        stats=AuthorStatsResponse(**asdict(profile.stats)),
        recent_posts=[PostResponse.model_validate(post) for post in profile.recent_posts],
        can_edit_profile=viewer is not None and viewer.id == profile.user.id,
    )
