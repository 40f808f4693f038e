from __future__ import annotations

import logging

from assistant_api.chat_store.schemas import ChatMessage, ChatSession, ChatState, utcnow
from assistant_api.config import settings
from assistant_api.models.enums import ChatRole

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 30


def derive_title(content: str) -> str:
    """First 30 characters of a message, with "..." when it was cut."""
    if len(content) > TITLE_MAX_CHARS:
        return content[:TITLE_MAX_CHARS] + "..."
    return content


class ChatSessionStore:
    """
    In-memory operations over one user's chat state.

    The store never talks to the database; callers load a ChatState,
    run operations on it and save ``store.state`` back.
    """

    def __init__(self, state: ChatState | None = None, *, placeholder_title: str | None = None) -> None:
        self.state = state or ChatState()
        self.placeholder_title = placeholder_title or settings.new_chat_title

    @property
    def active_chat(self) -> str | None:
        return self.state.active_chat

    def list_sessions(self) -> list[ChatSession]:
        return list(self.state.chats)

    def get_session(self, session_id: str) -> ChatSession | None:
        for chat in self.state.chats:
            if chat.id == session_id:
                return chat
        return None

    def get_active_session(self) -> ChatSession | None:
        if self.state.active_chat is None:
            return None
        return self.get_session(self.state.active_chat)

    def create_session(self) -> str:
        now = utcnow()
        chat = ChatSession(title=self.placeholder_title, created_at=now, updated_at=now)
        self.state.chats.insert(0, chat)
        self.state.active_chat = chat.id
        logger.debug(f"Chat session created: {chat.id}")
        return chat.id

    def append_message(self, message: ChatMessage, session_id: str | None = None) -> None:
        target_id = session_id or self.state.active_chat
        chat = self.get_session(target_id) if target_id else None
        if chat is None:
            logger.warning(f"Dropping {message.role.value} message: no chat session {target_id!r}")
            return

        if chat.title == self.placeholder_title and message.role == ChatRole.USER:
            chat.title = derive_title(message.content)
        chat.messages.append(message)
        chat.updated_at = utcnow()

    def seed_welcome_message(self, text: str) -> bool:
        """Add the greeting as the only message of a fresh active session. Returns True when seeded."""
        chat = self.get_active_session()
        if chat is None or chat.messages or chat.has_welcome_message:
            return False
        chat.messages.append(ChatMessage(role=ChatRole.ASSISTANT, content=text))
        chat.has_welcome_message = True
        chat.updated_at = utcnow()
        return True

    def set_active_session(self, session_id: str) -> bool:
        if self.get_session(session_id) is None:
            return False
        self.state.active_chat = session_id
        return True

    def delete_session(self, session_id: str) -> bool:
        remaining = [chat for chat in self.state.chats if chat.id != session_id]
        if len(remaining) == len(self.state.chats):
            return False
        self.state.chats = remaining
        if self.state.active_chat == session_id:
            self.state.active_chat = remaining[0].id if remaining else None
        logger.debug(f"Chat session deleted: {session_id}")
        return True

    def clear_session(self, session_id: str) -> bool:
        """Empty a session. A greeted session stays greeted, so it is not seeded again."""
        chat = self.get_session(session_id)
        if chat is None:
            return False
        chat.messages = []
        chat.updated_at = utcnow()
        return True
