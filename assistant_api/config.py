from __future__ import annotations

import warnings

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Core
    database_url: str = "sqlite+aiosqlite:///./assistant.db"
    allowed_cors_origins: str = "*"

    # Auth - these have dev defaults but will warn if used
    secret_key: str = "dev-secret"
    admin_api_token: str = "dev-admin-token"

    @model_validator(mode="after")
    def _warn_insecure_defaults(self) -> "Settings":
        if self.secret_key == "dev-secret":
            warnings.warn(
                "SECRET_KEY is using insecure default 'dev-secret'. "
                "Set SECRET_KEY environment variable for production.",
                UserWarning,
                stacklevel=2,
            )
        if self.admin_api_token == "dev-admin-token":
            warnings.warn(
                "ADMIN_API_TOKEN is using insecure default 'dev-admin-token'. "
                "Set ADMIN_API_TOKEN environment variable for production.",
                UserWarning,
                stacklevel=2,
            )
        return self

    # Chat storage
    chat_storage_namespace: str = "chat-storage"
    new_chat_title: str = "New Chat"
    fallback_reply: str = "Sorry, I encountered an error. Please try again."

    # Providers
    openai_base_url: str = "https://api.openai.com/v1"
    default_openai_model: str = "gpt-3.5-turbo"
    flowise_no_response: str = "Sorry, I could not generate a response."

    # Rate limiting
    rate_limit_chat: str = "20/minute"
    rate_limit_chats: str = "60/minute"


settings = Settings()
