from __future__ import annotations

from typing import Type

from assistant_api.errors import ProviderConfigError
from assistant_api.llm_services.flowise_service import FlowiseService
from assistant_api.llm_services.llm_service import ChatProviderService
from assistant_api.llm_services.ollama_service import OllamaService
from assistant_api.llm_services.openai_service import OpenAiService

PROVIDER_REGISTRY: dict[str, Type[ChatProviderService]] = {}


def register_providers(*provider_classes: Type[ChatProviderService]) -> None:
    for cls in provider_classes:
        PROVIDER_REGISTRY[cls.provider] = cls


def choose_provider(provider: str | None) -> Type[ChatProviderService]:
    p = (provider or "").strip().lower()
    cls = PROVIDER_REGISTRY.get(p)
    if not cls:
        raise ProviderConfigError("Invalid provider")
    return cls


register_providers(OpenAiService, OllamaService, FlowiseService)
