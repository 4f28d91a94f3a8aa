"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator
from datetime import date, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.deps import get_chat_service
from app.db.base import Base
from app.db.models import MoodRecord
from app.db.session import get_db
from app.main import app
from app.services.chat_service import ChatService
from app.services.clock import FixedClock
from app.services.intent_classifier import (
    DataNeedClassifier,
    FallbackIntentClassifier,
    LLMIntentClassifier,
)
from app.services.response_composer import ResponseComposer
from tests.fakes import FakeLLMClient

# Wednesday afternoon in the reference zone
FIXED_NOW = datetime(2025, 10, 15, 14, 30)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """File-backed SQLite so background tasks get their own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def chat_service(fake_llm, clock, session_factory) -> ChatService:
    return ChatService(
        intents=FallbackIntentClassifier(primary=LLMIntentClassifier(fake_llm)),
        data_need=DataNeedClassifier(fake_llm),
        composer=ResponseComposer(fake_llm),
        clock=clock,
        session_factory=session_factory,
    )


@pytest.fixture
async def client(session_factory, chat_service) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_record(db_session):
    """Insert a MoodRecord and return it."""

    async def _make(user_id: str = "mom1", **fields) -> MoodRecord:
        fields.setdefault("date", date(2025, 10, 10))
        fields.setdefault("fatigue", 5)
        record = MoodRecord(user_id=user_id, **fields)
        db_session.add(record)
        await db_session.commit()
        return record

    return _make
