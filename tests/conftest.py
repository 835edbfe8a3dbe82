# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("COUNTER_BACKEND", "memory")

from firehose.api.v1.dependencies import get_clock  # noqa: E402
from firehose.core.security import create_access_token  # noqa: E402
from firehose.core.settings import Settings, get_settings  # noqa: E402
from firehose.db.session import Base  # noqa: E402
from firehose.db.session import get_db as app_get_session  # noqa: E402
from firehose.db.session import new_id  # noqa: E402
from firehose.db.time import SECONDS_PER_HOUR  # noqa: E402
from firehose.main import app as fastapi_app  # noqa: E402
from firehose.models import POST_TYPE_LINK, POST_TYPE_SELF, Comment, Post, User  # noqa: E402
from firehose.services.counter_store import MemoryCounterStore, get_counter_store  # noqa: E402
from firehose.services.posts import create_slug, get_domain, hash_url  # noqa: E402
from firehose.services.rate_limit import RateLimiter  # noqa: E402

TEST_DB_URL = "sqlite://"
START_TIME = 1_760_000_000
CRON_SECRET = "test-cron-secret"

_USER_COUNTER = count(1)


class FakeClock:
    """Settable epoch-seconds clock shared by the app and the counter store."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def counter_store(clock: FakeClock) -> MemoryCounterStore:
    return MemoryCounterStore(clock=clock)


@pytest.fixture()
def limiter(counter_store: MemoryCounterStore, clock: FakeClock) -> RateLimiter:
    return RateLimiter(counter_store, clock)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Runtime settings with a known cron secret."""
    return Settings(CRON_SECRET=CRON_SECRET)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    clock: FakeClock,
    counter_store: MemoryCounterStore,
    test_settings: Settings,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., object], Callable[..., object]] = {
        app_get_session: _get_session_override,
        get_clock: lambda: clock,
        get_counter_store: lambda: counter_store,
        get_settings: lambda: test_settings,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session, clock: FakeClock) -> Callable[..., User]:
    """Return a factory that persists users."""

    def _make(display_name: str | None = None, **fields: object) -> User:
        n = next(_USER_COUNTER)
        user = User(
            email=f"user{n}@example.com",
            display_name=display_name or f"User {n}",
            created_at=clock(),
            updated_at=clock(),
            **fields,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def test_user(make_user) -> User:
    """Create and return a persisted test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user) -> User:
    """Create and return a second persisted user."""
    return make_user("Other User")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture()
def make_post(db_session: Session, clock: FakeClock) -> Callable[..., Post]:
    """Return a factory that persists posts, backdated by `age_hours`."""

    def _make(author: User, *, title: str = "A post", url: str | None = None,
              age_hours: float = 0, **fields: object) -> Post:
        created_at = clock() - int(age_hours * SECONDS_PER_HOUR)
        post_id = new_id()
        post = Post(
            id=post_id,
            type=POST_TYPE_LINK if url else POST_TYPE_SELF,
            title=title,
            url=url,
            slug=create_slug(title, post_id),
            domain=get_domain(url) if url else None,
            normalized_url_hash=hash_url(url) if url else None,
            body_md=None if url else "Body text",
            author_id=author.id,
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        db_session.add(post)
        db_session.flush()
        return post

    return _make


@pytest.fixture()
def test_post(make_post, test_user: User) -> Post:
    """Create a baseline post for tests."""
    return make_post(test_user, title="Test post")


@pytest.fixture()
def make_comment(db_session: Session, clock: FakeClock) -> Callable[..., Comment]:
    def _make(post: Post, author: User, *, body: str = "Nice", age_hours: float = 0,
              parent: Comment | None = None, **fields: object) -> Comment:
        created_at = clock() - int(age_hours * SECONDS_PER_HOUR)
        comment = Comment(
            post_id=post.id,
            user_id=author.id,
            parent_id=parent.id if parent else None,
            body=body,
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        db_session.add(comment)
        post.comments_count += 1
        db_session.flush()
        return comment

    return _make
