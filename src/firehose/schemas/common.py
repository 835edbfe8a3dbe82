"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Offset pagination envelope returned by list endpoints."""

    limit: int
    offset: int
    has_more: bool = Field(..., description="True when the page came back full.")

    @classmethod
    def for_page(cls, limit: int, offset: int, returned: int) -> Pagination:
        return cls(limit=limit, offset=offset, has_more=returned == limit)


class StatusResponse(BaseModel):
    success: bool = True
    message: str | None = None
