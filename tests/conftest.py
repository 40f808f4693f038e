from __future__ import annotations

import os
from collections.abc import Callable
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"
os.environ["RATE_LIMIT_CHAT"] = "1000/minute"
os.environ["RATE_LIMIT_CHATS"] = "1000/minute"

from assistant_api.database.base import Base
from assistant_api.database.database import get_db
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.llm_services.dispatcher import get_dispatcher
from assistant_api.main import app

ADMIN_HEADERS = {"x-token": "test-admin-token"}


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    # Fresh in-memory database per test; StaticPool keeps it on one connection.
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest_asyncio.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def dispatched() -> list[list[dict[str, str]]]:
    """Conversations seen by the stubbed dispatcher."""
    return []


@pytest.fixture
def stub_reply(dispatched: list[list[dict[str, str]]]):
    """Replace the provider dispatcher with one that answers with a fixed reply."""
    state = {"reply": "Use a 12V supply.", "error": None}

    async def _dispatch(config: AiSettingsConfig, messages) -> str:
        dispatched.append([m.to_wire() for m in messages])
        if state["error"] is not None:
            raise state["error"]
        return state["reply"]

    app.dependency_overrides[get_dispatcher] = lambda: _dispatch
    yield state
    app.dependency_overrides.pop(get_dispatcher, None)


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], tuple[httpx.AsyncClient, list[httpx.Request]]]:
    """Build an httpx client whose requests are answered by ``handler`` and recorded."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
        calls: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(_record)), calls

    return _make


@pytest.fixture
def enable_assistant(async_client: AsyncClient):
    """Save active assistant settings through the admin endpoint."""

    async def _enable(**overrides) -> None:
        body = {
            "enabled": True,
            "chatbot_enabled": True,
            "provider": "openai",
            "api_key": "sk-test",
            "global_greeting_message": "Hi! How can I help you today?",
            **overrides,
        }
        response = await async_client.put("/api/v1/ai-settings", json=body, headers=ADMIN_HEADERS)
        assert response.status_code == 200

    return _enable
