from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_api.chat_store.schemas import ChatState
from assistant_api.config import settings
from assistant_api.models.chat_storage import ChatStorage

# Per-user locks for read-modify-write of the chat blob, with the number of
# requests holding or waiting on each. An entry goes away with its last user.
_state_locks: dict[str, asyncio.Lock] = {}
_state_lock_users: dict[str, int] = {}


async def get_chat_storage(db: AsyncSession, user_id: str, namespace: str | None = None) -> ChatStorage | None:
    return await db.scalar(
        select(ChatStorage)
        .where(
            ChatStorage.user_id == user_id,
            ChatStorage.namespace == (namespace or settings.chat_storage_namespace),
        )
        # Another request may have saved since this session last read the row.
        .execution_options(populate_existing=True)
    )


async def load_chat_state(db: AsyncSession, user_id: str, namespace: str | None = None) -> ChatState:
    row = await get_chat_storage(db, user_id, namespace)
    if not row:
        return ChatState()
    return ChatState.model_validate(row.payload)


async def save_chat_state(
    db: AsyncSession,
    user_id: str,
    state: ChatState,
    namespace: str | None = None,
) -> ChatStorage:
    payload = state.model_dump(mode="json")
    row = await get_chat_storage(db, user_id, namespace)
    if row:
        row.payload = payload
    else:
        row = ChatStorage(
            user_id=user_id,
            namespace=namespace or settings.chat_storage_namespace,
            payload=payload,
        )
        db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


@asynccontextmanager
async def edit_chat_state(
    db: AsyncSession,
    user_id: str,
    namespace: str | None = None,
) -> AsyncIterator[ChatState]:
    """
    Load a user's chat state, hand it out for changes and save it.

    Concurrent edits for the same user run one after another, so none of them
    overwrites a change it never saw. Nothing is saved when the block raises.
    """
    lock = _state_locks.setdefault(user_id, asyncio.Lock())
    _state_lock_users[user_id] = _state_lock_users.get(user_id, 0) + 1
    try:
        async with lock:
            state = await load_chat_state(db, user_id, namespace)
            yield state
            await save_chat_state(db, user_id, state, namespace)
    finally:
        _state_lock_users[user_id] -= 1
        if not _state_lock_users[user_id]:
            _state_lock_users.pop(user_id)
            _state_locks.pop(user_id, None)
