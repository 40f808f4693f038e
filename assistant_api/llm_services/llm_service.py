from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import ProviderConfigError


class ChatProviderService(ABC):
    """
    Abstract base class for chat completion providers.

    One instance serves one request. Subclasses check their required
    settings in ``__init__`` so a misconfigured provider fails before any
    network traffic.
    """

    provider: str = ""
    label: str = ""

    def __init__(self, config: AiSettingsConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._http_client = http_client

    def _require(self, field: str) -> str:
        value = (getattr(self._config, field, "") or "").strip()
        if not value:
            raise ProviderConfigError(f"{field} is required for {self.provider}")
        return value

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        # An injected client belongs to the caller and stays open.
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient() as client:
            yield client

    @abstractmethod
    async def generate_reply(self, messages: list[ChatMessage]) -> str:
        """
        Send one conversation and return the assistant's reply.

        Args:
            messages: System prompt, prior turns and the newest user message, in order

        Returns:
            The reply text

        Raises:
            ProviderDispatchError on a non-success status or transport failure
        """
        ...
