"""Service test fixtures — in-memory stores, async DB, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - app.state.db_manager set for the readiness probe (ASGITransport does
      not run the lifespan)
    - Ledger/engine/reconciler fixtures run over the in-memory fakes

Design Decisions:
    - SQLite in-memory for route and repository tests: fast, no external
      dependency; row locks (FOR UPDATE) are exercised only on PostgreSQL
    - Concurrency tests use the fakes, where asyncio.gather interleaves
      calls deterministically
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from fundfeed.db.base import Base
import fundfeed.models  # noqa: F401
from fundfeed.infrastructure.database import get_db, DatabaseSessionManager
from fundfeed.main import app
from fundfeed.services.engagement_ledger import EngagementLedger
from fundfeed.services.ranking_engine import RankingEngine
from fundfeed.services.reconciliation import CounterReconciler
from fundfeed.services.round_lifecycle import RoundLifecycle
from tests.services.fake_store import (
    FakeIntroRequestRepository, FakeRoundRepository, FakeUserRepository,
)


# ─── In-memory stores ───────────────────────────────────────────

@pytest.fixture
def rounds():
    return FakeRoundRepository()


@pytest.fixture
def users():
    return FakeUserRepository()


@pytest.fixture
def intro_requests():
    return FakeIntroRequestRepository()


@pytest.fixture
def ledger(rounds, users, intro_requests):
    return EngagementLedger(rounds, users, intro_requests)


@pytest.fixture
def ranking_engine(rounds):
    return RankingEngine(rounds)


@pytest.fixture
def lifecycle(rounds):
    return RoundLifecycle(rounds)


@pytest.fixture
def reconciler(rounds, users, intro_requests):
    return CounterReconciler(rounds, users, intro_requests, settle_seconds=0)


# ─── SQLite ─────────────────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    app.state.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    del app.state.db_manager
