from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from assistant_api.database.base import Base

DEFAULT_PROMPT_TEMPLATE = (
    "You are a helpful security system installation assistant. "
    "Use the provided manuals and standards to answer questions accurately."
)
DEFAULT_GREETING_MESSAGE = "Hi! How can I help you today?"


class AiAssistantSettings(Base):
    __tablename__ = "ai_assistant_settings"

    settings_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    chatbot_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    provider: Mapped[str] = mapped_column(String(32), default="openai")
    api_url: Mapped[str] = mapped_column(String(2000), default="")
    api_key: Mapped[str] = mapped_column(String(512), default="")
    model_name: Mapped[str] = mapped_column(String(120), default="")
    temperature: Mapped[float] = mapped_column(Float, default=0.7)
    max_tokens: Mapped[int] = mapped_column(Integer, default=2048)
    global_prompt_template: Mapped[str] = mapped_column(Text, default=DEFAULT_PROMPT_TEMPLATE)
    global_greeting_message: Mapped[str] = mapped_column(Text, default=DEFAULT_GREETING_MESSAGE)
    flowise_chatflow_id: Mapped[str] = mapped_column(String(120), default="")
    flowise_api_host: Mapped[str] = mapped_column(String(2000), default="")
    personality_type: Mapped[str] = mapped_column(String(32), default="professional")
    custom_personality: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
