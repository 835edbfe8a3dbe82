"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field

from firehose.models.vote import EntityType, VoteDirection


class VoteCreate(BaseModel):
    """Schema for casting or changing a vote."""

    entity_type: EntityType = Field(EntityType.POST, description="post or comment")
    entity_id: str = Field(..., min_length=1, max_length=64)
    direction: VoteDirection = Field(..., description="up or down")


class VoteResponse(BaseModel):
    """Result of a vote, with the entity's recomputed score."""

    success: bool = True
    entity_type: EntityType
    entity_id: str
    direction: VoteDirection
    new_score: int


class MyVoteResponse(BaseModel):
    direction: VoteDirection | None = None
