import os

# Settings are read at import time; configure before importing ruleadmin.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"

from datetime import datetime, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from ruleadmin.core.context import RequestContext  # noqa: E402
from ruleadmin.core.database import get_db  # noqa: E402
from ruleadmin.main import app  # noqa: E402
from ruleadmin.models import Base  # noqa: E402
from ruleadmin.repositories.engagement_rule_repository import (  # noqa: E402
    EngagementRuleRepository,
)
from ruleadmin.services.rule_versioning import (  # noqa: E402
    RuleFields,
    RuleVersioningService,
)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema, one per test.

    ``StaticPool`` keeps a single connection so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def actor() -> RequestContext:
    """Authenticated context used as the acting user in service tests."""
    return RequestContext(
        user_id=uuid4(),
        email="analyst@example.com",
        token="a" * 64,
        expires_at=datetime(2099, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def rule_service(db_session: AsyncSession) -> RuleVersioningService:
    return RuleVersioningService(rule_repo=EngagementRuleRepository(db_session))


@pytest.fixture
def cpx_fields() -> RuleFields:
    return RuleFields(billing_type="CPX", is_engagement=1, is_exposure=0)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the app and the test database."""

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
