"""Service test fixtures — async DB, fake model, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched: chat turns open their own session from it
    - Controller and analyzer providers overridden: no network, scripted model output

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - fake_model exposed as its own fixture so tests script replies before calling
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from mindful_reframe.db.base import Base
from mindful_reframe import models  # noqa: F401
from mindful_reframe.api.dependencies import (
    get_journal_analyzer, get_reframe_controller,
)
from mindful_reframe.core.reframe_rules import DEFAULT_RULES
from mindful_reframe.infrastructure.database import get_db, DatabaseSessionManager
import mindful_reframe.infrastructure.database as db_module
from mindful_reframe.main import app
from mindful_reframe.services.journal_analyzer import JournalAnalyzer
from mindful_reframe.services.reframe_controller import ReframeController

from tests.services.fake_model import FakeModelAdapter
from tests.services.mock_anthropic import resilient_client


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
def db_manager(test_engine, test_session_factory):
    """Point the module-level db_manager at the test engine."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    yield fake_manager
    db_module.db_manager = original_manager


@pytest.fixture
def fake_model():
    return FakeModelAdapter()


@pytest.fixture
def controller(fake_model):
    return ReframeController(fake_model, DEFAULT_RULES, model_timeout_seconds=0.5)


@pytest.fixture
def analysis_responses():
    """Raw SDK responses consumed by the journal analyzer, in order."""
    return []


@pytest.fixture
def analyzer(analysis_responses):
    return JournalAnalyzer(
        resilient_client(analysis_responses, max_retries=0),
        "claude-test", DEFAULT_RULES,
    )


@pytest.fixture
async def client(test_session_factory, db_manager, controller, analyzer):
    """FastAPI test client with DB, controller and analyzer overridden."""
    async def override_get_db():
        async with db_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reframe_controller] = lambda: controller
    app.dependency_overrides[get_journal_analyzer] = lambda: analyzer

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
