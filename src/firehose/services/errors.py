"""Domain exceptions raised by the service layer.

The API layer maps each of these onto an HTTP status; services never build
HTTP responses themselves.
"""

from __future__ import annotations


class FirehoseError(Exception):
    """Base class for all service-level failures."""


class ValidationError(FirehoseError, ValueError):
    """Input failed validation before any mutation took place."""


class InvalidVoteError(ValidationError):
    """Unknown vote direction or entity type."""


class EntityNotFoundError(FirehoseError):
    """The referenced post, comment or user does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity.capitalize()} not found")
        self.entity = entity
        self.entity_id = entity_id


class RateLimitExceededError(FirehoseError):
    """The caller used up the allowance for an action in the current window."""

    def __init__(self, action: str, message: str | None = None) -> None:
        super().__init__(message or "Rate limit exceeded")
        self.action = action


class DuplicatePostError(FirehoseError):
    """A link post with the same normalized URL already exists."""


class PermissionDeniedError(FirehoseError):
    """The caller may not perform this operation on the target."""


class PersistenceError(FirehoseError):
    """The store rejected or failed a write; nothing was applied."""
