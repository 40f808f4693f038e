import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_api.chat_store.schemas import ChatSession
from assistant_api.chat_store.session_store import ChatSessionStore
from assistant_api.config import settings
from assistant_api.database.database import get_db
from assistant_api.dto.req.chat_req import SetActiveChatReq
from assistant_api.dto.res.chat_res import ChatListRes, ChatSummary, DeleteChatRes
from assistant_api.services.assistant_service import ensure_active_session
from assistant_api.utils.database_utils.ai_settings_utils import get_active_settings
from assistant_api.utils.database_utils.chat_storage_utils import edit_chat_state, load_chat_state
from assistant_api.utils.jwtutils import get_current_user_id
from assistant_api.utils.rate_limiter import limiter

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_store(db: AsyncSession, user_id: str) -> ChatSessionStore:
    return ChatSessionStore(await load_chat_state(db, user_id))


def _require_chat(store: ChatSessionStore, chat_id: str) -> ChatSession:
    chat = store.get_session(chat_id)
    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found.")
    return chat


@router.get("/chats")
async def list_chats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatListRes:
    store = await _load_store(db, user_id)
    return ChatListRes(
        active_chat=store.active_chat,
        chats=[ChatSummary.from_session(c) for c in store.list_sessions()],
    )


@router.post("/chats")
@limiter.limit(settings.rate_limit_chats)
async def create_chat(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatSession:
    """Start a new chat, make it active and greet it when a greeting is configured."""
    config = await get_active_settings(db)
    async with edit_chat_state(db, user_id) as state:
        store = ChatSessionStore(state)
        chat_id = store.create_session()
        if config.global_greeting_message:
            store.seed_welcome_message(config.global_greeting_message)
    logger.info(f"Chat created for user {user_id}: {chat_id}")
    return store.get_session(chat_id)


@router.get("/chats/active")
async def get_active_chat(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatSession:
    """
    Return the active chat.

    A user without one gets a fresh, greeted chat, as on the first visit
    to the assistant.
    """
    store = await _load_store(db, user_id)
    chat = store.get_active_session()
    if chat and (chat.messages or chat.has_welcome_message):
        return chat

    config = await get_active_settings(db)
    async with edit_chat_state(db, user_id) as state:
        chat = ensure_active_session(ChatSessionStore(state), config)
    return chat


@router.put("/chats/active")
async def set_active_chat(
    body: SetActiveChatReq,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatSession:
    async with edit_chat_state(db, user_id) as state:
        store = ChatSessionStore(state)
        if not store.set_active_session(body.chat_id):
            raise HTTPException(status_code=404, detail="Chat not found.")
    return store.get_active_session()


@router.get("/chats/{chat_id}")
async def get_chat(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatSession:
    store = await _load_store(db, user_id)
    return _require_chat(store, chat_id)


@router.delete("/chats/{chat_id}")
async def delete_chat(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> DeleteChatRes:
    async with edit_chat_state(db, user_id) as state:
        store = ChatSessionStore(state)
        if not store.delete_session(chat_id):
            raise HTTPException(status_code=404, detail="Chat not found.")
    logger.info(f"Chat deleted for user {user_id}: {chat_id}")
    return DeleteChatRes(deleted=chat_id, active_chat=store.active_chat)


@router.post("/chats/{chat_id}/clear")
async def clear_chat(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ChatSession:
    async with edit_chat_state(db, user_id) as state:
        store = ChatSessionStore(state)
        _require_chat(store, chat_id)
        store.clear_session(chat_id)
    return store.get_session(chat_id)
