# src/firehose/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Firehose API."""

from fastapi import APIRouter, status

from firehose.models.vote import EntityType
from firehose.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from firehose.services.errors import FirehoseError
from firehose.services.voting import cast_vote, get_user_vote

from ..dependencies import ClockDep, CurrentUserDep, RateLimiterDep, SessionDep, raise_http_error

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
    clock: ClockDep,
) -> VoteResponse:
    """Cast or change a vote on a post or comment.

    A second vote by the same user on the same entity replaces the first, so
    the entity's score moves by two when the direction flips.
    """
    try:
        result = cast_vote(
            db,
            user=current_user,
            entity_type=vote_data.entity_type,
            entity_id=vote_data.entity_id,
            direction=vote_data.direction,
            limiter=limiter,
            now=clock(),
        )
    except FirehoseError as err:
        raise_http_error(err)

    return VoteResponse(
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        direction=result.direction,
        new_score=result.score,
    )


@router.get("/{entity_type}/{entity_id}/my-vote", response_model=MyVoteResponse)
async def my_vote(
    entity_type: EntityType,
    entity_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    """Return the caller's current vote on an entity, or null."""
    return MyVoteResponse(direction=get_user_vote(db, current_user.id, entity_type, entity_id))
