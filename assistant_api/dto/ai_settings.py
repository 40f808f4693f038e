from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from assistant_api.models.ai_assistant_settings import DEFAULT_GREETING_MESSAGE, DEFAULT_PROMPT_TEMPLATE
from assistant_api.models.enums import PersonalityType, Provider


class AiSettingsConfig(BaseModel):
    """
    The active assistant configuration as the chat flow consumes it.

    ``provider`` and ``personality_type`` stay plain strings here: a stored
    value outside the known set must fail the dispatch, not the load.
    """

    model_config = ConfigDict(from_attributes=True)

    enabled: bool = False
    chatbot_enabled: bool = False
    provider: str = Provider.OPENAI.value
    api_url: str = ""
    api_key: str = ""
    model_name: str = ""
    # Shown and saved on the admin screen only; no provider request carries them.
    temperature: float = 0.7
    max_tokens: int = 2048
    global_prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    global_greeting_message: str = DEFAULT_GREETING_MESSAGE
    flowise_chatflow_id: str = ""
    flowise_api_host: str = ""
    personality_type: str = PersonalityType.PROFESSIONAL.value
    custom_personality: str = ""


class AiSettingsPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    chatbot_enabled: bool
    provider: str
    model_name: str
    global_greeting_message: str
    personality_type: str


class AiSettingsUpdate(BaseModel):
    enabled: bool = False
    chatbot_enabled: bool = False
    provider: Provider = Provider.OPENAI
    api_url: str = Field(default="", max_length=2000)
    api_key: str = Field(default="", max_length=512)
    model_name: str = Field(default="", max_length=120)
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=2048, ge=1)
    global_prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    global_greeting_message: str = DEFAULT_GREETING_MESSAGE
    flowise_chatflow_id: str = Field(default="", max_length=120)
    flowise_api_host: str = Field(default="", max_length=2000)
    personality_type: PersonalityType = PersonalityType.PROFESSIONAL
    custom_personality: str = ""
