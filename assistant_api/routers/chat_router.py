import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_api.chat_store.session_store import ChatSessionStore
from assistant_api.config import settings
from assistant_api.database.database import get_db
from assistant_api.dto.req.chat_req import SendMessageReq
from assistant_api.dto.res.chat_res import SendMessageRes
from assistant_api.llm_services.dispatcher import get_dispatcher
from assistant_api.services.assistant_service import Dispatcher, begin_turn, complete_turn, inflight
from assistant_api.utils.database_utils.ai_settings_utils import get_active_settings
from assistant_api.utils.database_utils.chat_storage_utils import edit_chat_state
from assistant_api.utils.jwtutils import get_current_user_id
from assistant_api.utils.rate_limiter import limiter

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat")
@limiter.limit(settings.rate_limit_chat)
async def chat(
    request: Request,
    body: SendMessageReq,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> SendMessageRes:
    config = await get_active_settings(db)

    with inflight.hold(user_id):
        # The user's message is saved before dispatch and kept if the provider call fails.
        async with edit_chat_state(db, user_id) as state:
            chat_id, conversation = begin_turn(ChatSessionStore(state), config, body.message)

        reply = await complete_turn(config, conversation, dispatcher)

        async with edit_chat_state(db, user_id) as state:
            ChatSessionStore(state).append_message(reply, session_id=chat_id)

    logger.info(f"Reply sent for user {user_id} in chat {chat_id} via {config.provider}")
    return SendMessageRes(chat_id=chat_id, reply=reply)
