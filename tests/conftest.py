"""Test fixtures for API and database."""

from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime

# Configure the app *before* importing folio modules so nothing touches the
# default on-disk database and the limiter starts disabled.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from folio.database import Base  # noqa: E402
from folio.database import get_db as db_dependency  # noqa: E402
from folio.main import app  # noqa: E402
from folio.models.post import Post, SeriesMembership  # noqa: E402
from folio.schemas.post import Category  # noqa: E402
from folio.security.rate_limit import limiter  # noqa: E402
from folio.store import Store  # noqa: E402

# Disable rate limiting in tests to prevent cross-test 429 flakes
limiter.enabled = False


@pytest.fixture
def engine():
    # One shared in-memory connection so the TestClient's worker threads see
    # the rows written by the test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session) -> Store:
    return Store(db_session)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[db_dependency] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(db_dependency, None)


@pytest.fixture
def make_post(db_session):
    """Factory inserting a committed post."""

    def _make(
        title: str,
        *,
        content: str = "",
        tags: list[str] | None = None,
        category: Category = Category.DEVELOPMENT,
        created_at: datetime | None = None,
        slug: str | None = None,
        post_id: str | None = None,
        excerpt: str = "",
    ) -> Post:
        post = Post(
            id=post_id or str(uuid.uuid4()),
            slug=slug,
            title=title,
            excerpt=excerpt,
            content=content,
            category=category.value,
            tags=tags or [],
            created_at=created_at or datetime(2024, 1, 1, tzinfo=UTC),
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make


@pytest.fixture
def add_membership(db_session):
    """Factory inserting a raw series row (no post existence check)."""

    def _add(
        post_id: str,
        series_slug: str = "rust-basics",
        series_title: str = "Rust Basics",
        position: int | None = None,
    ) -> SeriesMembership:
        row = SeriesMembership(
            post_id=post_id,
            series_slug=series_slug,
            series_title=series_title,
            position=position,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _add
