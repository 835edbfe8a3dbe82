"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from firehose.core.security import decode_access_token
from firehose.core.settings import Settings, get_settings
from firehose.db.session import get_db
from firehose.db.time import Clock, now_epoch
from firehose.models import User
from firehose.services.counter_store import CounterStore, get_counter_store
from firehose.services.errors import (
    DuplicatePostError,
    EntityNotFoundError,
    FirehoseError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from firehose.services.leaderboard import LeaderboardCache
from firehose.services.rate_limit import RateLimiter


# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_clock() -> Clock:
    """Return the time source used by request handlers."""
    return now_epoch


ClockDep = Annotated[Clock, Depends(get_clock)]
CounterStoreDep = Annotated[CounterStore, Depends(get_counter_store)]


def get_rate_limiter_dep(store: CounterStoreDep, clock: ClockDep) -> RateLimiter:
    """Get RateLimiter dependency for dependency injection."""
    return RateLimiter(store, clock)


def get_leaderboard_cache_dep(store: CounterStoreDep, settings: SettingsDep) -> LeaderboardCache:
    return LeaderboardCache(
        store,
        ttl_seconds=settings.leaderboard_cache_seconds,
        size=settings.leaderboard_cache_size,
    )


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter_dep)]
LeaderboardCacheDep = Annotated[LeaderboardCache, Depends(get_leaderboard_cache_dep)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_user(token: str, db: Session) -> User:
    try:
        user_id = decode_access_token(token)
    except JWTError as err:
        raise _credentials_error() from err
    if user_id is None:
        raise _credentials_error()

    user = db.get(User, user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Like `get_current_user`, but anonymous requests yield None.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _resolve_user(credentials.credentials, db)


# Type aliases for user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


_ERROR_STATUS: tuple[tuple[type[FirehoseError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (DuplicatePostError, status.HTTP_409_CONFLICT),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
)


def raise_http_error(err: FirehoseError) -> NoReturn:
    """Translate a service error into the matching HTTP response."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(err, error_type):
            raise HTTPException(status_code=status_code, detail=str(err)) from err
    # PersistenceError and anything unexpected from the service layer.
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(err) or "Internal server error",
    ) from err
