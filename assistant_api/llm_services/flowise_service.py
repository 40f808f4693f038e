from __future__ import annotations

import logging

import httpx

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.config import settings
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import ProviderDispatchError
from assistant_api.llm_services.llm_service import ChatProviderService
from assistant_api.models.enums import Provider

logger = logging.getLogger(__name__)


class FlowiseService(ChatProviderService):
    """
    Flowise prediction endpoint.

    Flowise takes the newest message as ``question`` and everything before it
    as ``history``, and answers in ``text`` (older flows use ``response``).
    """

    provider = Provider.FLOWISE.value
    label = "Flowise"

    def __init__(self, config: AiSettingsConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        super().__init__(config, http_client=http_client)
        self._api_host = self._require("flowise_api_host").rstrip("/")
        self._chatflow_id = self._require("flowise_chatflow_id")

    def prediction_url(self) -> str:
        return f"{self._api_host}/api/v1/prediction/{self._chatflow_id}"

    async def generate_reply(self, messages: list[ChatMessage]) -> str:
        *history, latest = messages
        try:
            async with self._client() as client:
                response = await client.post(
                    self.prediction_url(),
                    headers={"Content-Type": "application/json"},
                    json={
                        "question": latest.content,
                        "history": [m.to_wire() for m in history],
                    },
                )
        except httpx.HTTPError as e:
            logger.warning(f"Flowise request failed: {e}")
            raise ProviderDispatchError(self.label) from e

        if response.is_error:
            logger.warning(f"Flowise returned status {response.status_code}")
            raise ProviderDispatchError(self.label)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderDispatchError(self.label) from e
        if not isinstance(data, dict):
            return settings.flowise_no_response
        return data.get("text") or data.get("response") or settings.flowise_no_response
