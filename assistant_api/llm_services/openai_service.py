from __future__ import annotations

import logging

import httpx
from openai import APIError, AsyncOpenAI

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.config import settings
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import ProviderDispatchError
from assistant_api.llm_services.llm_service import ChatProviderService
from assistant_api.models.enums import Provider

logger = logging.getLogger(__name__)


class OpenAiService(ChatProviderService):
    """Hosted chat completions, bearer-token auth, first choice wins."""

    provider = Provider.OPENAI.value
    label = "OpenAI"

    def __init__(self, config: AiSettingsConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        super().__init__(config, http_client=http_client)
        self._api_key = self._require("api_key")
        self._model = (config.model_name or "").strip() or settings.default_openai_model

    def model_name(self) -> str:
        return self._model

    async def generate_reply(self, messages: list[ChatMessage]) -> str:
        client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
            http_client=self._http_client,
        )
        try:
            completion = await client.chat.completions.create(
                model=self._model,
                messages=[m.to_wire() for m in messages],
            )
        except APIError as e:
            logger.warning(f"OpenAI request failed: {e}")
            raise ProviderDispatchError(self.label) from e
        finally:
            if self._http_client is None:
                await client.close()

        try:
            return completion.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            logger.warning(f"OpenAI returned an unexpected completion: {completion!r}")
            raise ProviderDispatchError(self.label) from e
