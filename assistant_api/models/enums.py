from __future__ import annotations

import enum


class ChatRole(str, enum.Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Provider(str, enum.Enum):
    OPENAI = "openai"
    OLLAMA = "ollama"
    FLOWISE = "flowise"


class PersonalityType(str, enum.Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    FUNNY = "funny"
    CUSTOM = "custom"
