from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from assistant_api.chat_store.schemas import ChatMessage, ChatSession


class ChatSummary(BaseModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int

    @classmethod
    def from_session(cls, chat: ChatSession) -> "ChatSummary":
        return cls(
            id=chat.id,
            title=chat.title,
            created_at=chat.created_at,
            updated_at=chat.updated_at,
            message_count=len(chat.messages),
        )


class ChatListRes(BaseModel):
    active_chat: str | None
    chats: list[ChatSummary]


class SendMessageRes(BaseModel):
    chat_id: str
    reply: ChatMessage


class DeleteChatRes(BaseModel):
    deleted: str
    active_chat: str | None
