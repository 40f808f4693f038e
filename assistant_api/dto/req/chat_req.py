from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class SendMessageReq(BaseModel):
    message: str = Field(min_length=1, max_length=10000)

    @field_validator("message")
    @classmethod
    def _reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be blank.")
        return v


class SetActiveChatReq(BaseModel):
    chat_id: str = Field(min_length=1, max_length=64)
