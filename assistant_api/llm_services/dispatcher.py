from __future__ import annotations

import httpx

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.llm_services.registry import choose_provider


async def dispatch_chat(
    config: AiSettingsConfig,
    messages: list[ChatMessage],
    *,
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """
    Perform one round trip against the configured provider.

    Raises:
        ProviderConfigError before any request when the provider is unknown or misconfigured
        ProviderDispatchError when the provider call fails
    """
    if not messages:
        raise ValueError("messages must not be empty")
    cls = choose_provider(config.provider)
    service = cls(config, http_client=http_client)
    return await service.generate_reply(messages)


def get_dispatcher():
    """FastAPI dependency; tests override it to stub the providers."""
    return dispatch_chat
