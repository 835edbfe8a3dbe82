"""Vote ledger writes and score aggregation.

Scores are caches: every vote rebuilds the target's `score` from a full scan
of its ledger rows instead of applying a delta, so concurrent writers
converge on the correct value once the last of them commits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firehose.db.session import new_id
from firehose.models import Comment, EntityType, Post, User, Vote, VoteDirection
from firehose.services.errors import EntityNotFoundError, InvalidVoteError, PersistenceError
from firehose.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

_ENTITY_MODELS: dict[EntityType, type[Post] | type[Comment]] = {
    EntityType.POST: Post,
    EntityType.COMMENT: Comment,
}


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a successful vote."""

    entity_type: EntityType
    entity_id: str
    direction: VoteDirection
    score: int


def parse_entity_type(value: str | EntityType) -> EntityType:
    try:
        return EntityType(value)
    except ValueError as err:
        raise InvalidVoteError(f"Invalid entity type: {value!r}") from err


def parse_direction(value: str | VoteDirection) -> VoteDirection:
    try:
        return VoteDirection(value)
    except ValueError as err:
        raise InvalidVoteError("Invalid vote type") from err


def get_entity(db: Session, entity_type: EntityType, entity_id: str) -> Post | Comment:
    """Return the vote target or raise `EntityNotFoundError`."""
    model = _ENTITY_MODELS[entity_type]
    entity = db.get(model, entity_id)
    if entity is None:
        raise EntityNotFoundError(entity_type.value, entity_id)
    return entity


def tally(db: Session, entity_type: EntityType, entity_id: str) -> int:
    """Return `count(up) - count(down)` over the ledger for one entity."""
    net = db.execute(
        select(
            func.coalesce(
                func.sum(case((Vote.direction == VoteDirection.UP.value, 1), else_=-1)),
                0,
            )
        ).where(
            Vote.entity_type == entity_type.value,
            Vote.entity_id == entity_id,
        )
    ).scalar_one()
    return int(net)


def recompute_score(db: Session, entity_type: EntityType, entity_id: str) -> int:
    """Rebuild the cached score of an entity from its ledger rows.

    Flushes pending ledger writes first; the caller owns the commit.
    """
    entity = get_entity(db, entity_type, entity_id)
    db.flush()
    entity.score = tally(db, entity_type, entity_id)
    return entity.score


def _upsert_vote(
    db: Session,
    *,
    user_id: str,
    entity_type: EntityType,
    entity_id: str,
    direction: VoteDirection,
    now: int,
) -> None:
    # A repeated vote replaces the previous direction; the ledger never holds two
    # rows. A single INSERT .. ON CONFLICT keeps simultaneous first votes from
    # tripping the unique key.
    insert = _UPSERT_INSERTS[db.get_bind().dialect.name]
    stmt = insert(Vote).values(
        id=new_id(),
        user_id=user_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        direction=direction.value,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Vote.user_id, Vote.entity_type, Vote.entity_id],
        set_={"direction": stmt.excluded.direction, "updated_at": stmt.excluded.updated_at},
    )
    db.execute(stmt)


def cast_vote(
    db: Session,
    *,
    user: User,
    entity_type: str | EntityType,
    entity_id: str,
    direction: str | VoteDirection,
    limiter: RateLimiter,
    now: int,
) -> VoteResult:
    """Record `user`'s vote on an entity and refresh the entity's score.

    Args:
        db: Database session; committed on success, rolled back on failure.
        user: Authenticated voter.
        entity_type: ``"post"`` or ``"comment"``.
        entity_id: Identifier of the target.
        direction: ``"up"`` or ``"down"``.
        limiter: Rate limiter; one vote is consumed before the write.
        now: Current epoch seconds.

    Returns:
        The stored direction and the recomputed score.

    Raises:
        InvalidVoteError: Unknown direction or entity type.
        EntityNotFoundError: The target does not exist.
        RateLimitExceededError: The voter exhausted the hourly allowance.
        PersistenceError: The store failed; neither the vote nor the score changed.
    """
    kind = parse_entity_type(entity_type)
    vote_direction = parse_direction(direction)
    get_entity(db, kind, entity_id)

    # Consumed before the write: a failed write still costs the voter one vote.
    limiter.enforce("vote", user.id)

    try:
        _upsert_vote(
            db,
            user_id=user.id,
            entity_type=kind,
            entity_id=entity_id,
            direction=vote_direction,
            now=now,
        )
        score = recompute_score(db, kind, entity_id)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Vote on %s %s failed", kind.value, entity_id)
        raise PersistenceError("Failed to vote") from err

    logger.debug("User %s voted %s on %s %s -> %d", user.id, vote_direction.value, kind.value, entity_id, score)
    return VoteResult(entity_type=kind, entity_id=entity_id, direction=vote_direction, score=score)


def get_user_vote(
    db: Session,
    user_id: str,
    entity_type: str | EntityType,
    entity_id: str,
) -> VoteDirection | None:
    """Return the direction of `user_id`'s vote on an entity, if any."""
    kind = parse_entity_type(entity_type)
    stored = db.execute(
        select(Vote.direction).where(
            Vote.user_id == user_id,
            Vote.entity_type == kind.value,
            Vote.entity_id == entity_id,
        )
    ).scalar_one_or_none()
    return VoteDirection(stored) if stored is not None else None
