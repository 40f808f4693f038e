from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager

from assistant_api.chat_store.schemas import ChatMessage, ChatSession
from assistant_api.chat_store.session_store import ChatSessionStore
from assistant_api.config import settings
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import AssistantDisabledError, AssistantError, DispatchInProgressError
from assistant_api.llm_services.dispatcher import dispatch_chat
from assistant_api.llm_services.system_prompt import build_system_prompt
from assistant_api.models.enums import ChatRole

logger = logging.getLogger(__name__)

Dispatcher = Callable[[AiSettingsConfig, list[ChatMessage]], Awaitable[str]]


class InflightGuard:
    """Allows one outstanding reply per user; the event loop serialises access."""

    def __init__(self) -> None:
        self._users: set[str] = set()

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        if user_id in self._users:
            raise DispatchInProgressError(user_id)
        self._users.add(user_id)
        try:
            yield
        finally:
            self._users.discard(user_id)


inflight = InflightGuard()


def ensure_active_session(store: ChatSessionStore, config: AiSettingsConfig) -> ChatSession:
    """Return the active session, creating one on first use, and greet it once."""
    chat = store.get_active_session()
    if chat is None:
        store.create_session()
        chat = store.get_active_session()
    if config.global_greeting_message:
        store.seed_welcome_message(config.global_greeting_message)
    return chat


def build_conversation(
    config: AiSettingsConfig,
    prior: list[ChatMessage],
    user_message: ChatMessage,
) -> list[ChatMessage]:
    system = ChatMessage(
        role=ChatRole.SYSTEM,
        content=build_system_prompt(
            config.global_prompt_template,
            config.personality_type,
            config.custom_personality,
        ),
    )
    return [system, *prior, user_message]


def begin_turn(store: ChatSessionStore, config: AiSettingsConfig, content: str) -> tuple[str, list[ChatMessage]]:
    """
    Record the user's message and build what the provider will see.

    Returns:
        The id of the session the message went to, and the outgoing conversation
    """
    if not config.enabled:
        raise AssistantDisabledError()

    chat = ensure_active_session(store, config)
    prior = list(chat.messages)
    user_message = ChatMessage(role=ChatRole.USER, content=content)
    store.append_message(user_message, session_id=chat.id)
    return chat.id, build_conversation(config, prior, user_message)


async def complete_turn(
    config: AiSettingsConfig,
    conversation: list[ChatMessage],
    dispatcher: Dispatcher = dispatch_chat,
) -> ChatMessage:
    """Ask the provider for a reply; failures become the fixed apology message."""
    try:
        reply = await dispatcher(config, conversation)
    except AssistantError as e:
        logger.error(f"Error sending message: {e}")
        reply = settings.fallback_reply
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while sending message")
        reply = settings.fallback_reply
    return ChatMessage(role=ChatRole.ASSISTANT, content=reply)


async def send_message(
    store: ChatSessionStore,
    config: AiSettingsConfig,
    content: str,
    dispatcher: Dispatcher = dispatch_chat,
) -> ChatMessage:
    """Run a whole turn against an in-memory store and return the assistant message."""
    chat_id, conversation = begin_turn(store, config, content)
    reply = await complete_turn(config, conversation, dispatcher)
    store.append_message(reply, session_id=chat_id)
    return reply
