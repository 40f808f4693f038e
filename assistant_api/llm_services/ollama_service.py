from __future__ import annotations

import logging
from typing import Any

import httpx

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import ProviderDispatchError
from assistant_api.llm_services.llm_service import ChatProviderService
from assistant_api.models.enums import Provider

logger = logging.getLogger(__name__)


class OllamaService(ChatProviderService):
    """
    Self-hosted Ollama server.

    Sends the whole conversation to ``{api_url}/api/chat`` without auth and
    asks for a single, non-streamed answer.
    """

    provider = Provider.OLLAMA.value
    label = "Ollama"

    def __init__(self, config: AiSettingsConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        super().__init__(config, http_client=http_client)
        self._base_url = self._require("api_url").rstrip("/")

    async def generate_reply(self, messages: list[ChatMessage]) -> str:
        payload: dict[str, Any] = {
            "messages": [m.to_wire() for m in messages],
            "stream": False,
        }
        if self._config.model_name:
            payload["model"] = self._config.model_name

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self._base_url}/api/chat",
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.warning(f"Ollama request failed: {e}")
            raise ProviderDispatchError(self.label) from e

        if response.is_error:
            logger.warning(f"Ollama returned status {response.status_code}")
            raise ProviderDispatchError(self.label)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderDispatchError(self.label) from e
        message = (data.get("message") or {}) if isinstance(data, dict) else None
        if not isinstance(message, dict):
            logger.warning(f"Ollama returned an unexpected body: {data!r}")
            raise ProviderDispatchError(self.label)
        return message.get("content", "")
