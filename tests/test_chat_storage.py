from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from assistant_api.chat_store.session_store import ChatSessionStore
from assistant_api.database.base import Base
from assistant_api.utils.database_utils.chat_storage_utils import edit_chat_state, load_chat_state


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    # One connection per session, so concurrent edits do not share a transaction.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chats.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
async def test_edit_saves_changes(session_factory) -> None:
    async with session_factory() as db:
        async with edit_chat_state(db, "installer-1") as state:
            chat_id = ChatSessionStore(state).create_session()

    async with session_factory() as db:
        state = await load_chat_state(db, "installer-1")
    assert state.active_chat == chat_id
    assert [c.id for c in state.chats] == [chat_id]


@pytest.mark.asyncio
async def test_failed_edit_saves_nothing(session_factory) -> None:
    async with session_factory() as db:
        with pytest.raises(LookupError):
            async with edit_chat_state(db, "installer-1") as state:
                ChatSessionStore(state).create_session()
                raise LookupError("chat not found")

    async with session_factory() as db:
        state = await load_chat_state(db, "installer-1")
    assert state.chats == []


@pytest.mark.asyncio
async def test_concurrent_edits_keep_both_changes(file_session_factory) -> None:
    first_loaded = asyncio.Event()
    release_first = asyncio.Event()

    async def slow_edit() -> None:
        async with file_session_factory() as db:
            async with edit_chat_state(db, "installer-1") as state:
                ChatSessionStore(state).create_session()
                first_loaded.set()
                await release_first.wait()

    async def quick_edit() -> None:
        await first_loaded.wait()
        async with file_session_factory() as db:
            async with edit_chat_state(db, "installer-1") as state:
                ChatSessionStore(state).create_session()

    tasks = [asyncio.create_task(slow_edit()), asyncio.create_task(quick_edit())]
    await first_loaded.wait()
    for _ in range(5):
        await asyncio.sleep(0)
    release_first.set()
    await asyncio.gather(*tasks)

    async with file_session_factory() as db:
        state = await load_chat_state(db, "installer-1")
    assert len(state.chats) == 2
