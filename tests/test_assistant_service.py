from __future__ import annotations

from functools import partial

import httpx
import pytest

from assistant_api.chat_store.schemas import ChatMessage
from assistant_api.chat_store.session_store import ChatSessionStore
from assistant_api.dto.ai_settings import AiSettingsConfig
from assistant_api.errors import AssistantDisabledError, DispatchInProgressError
from assistant_api.llm_services.dispatcher import dispatch_chat
from assistant_api.models.enums import ChatRole
from assistant_api.services.assistant_service import InflightGuard, send_message

APOLOGY = "Sorry, I encountered an error. Please try again."

PROVIDER_CONFIGS = {
    "openai": AiSettingsConfig(enabled=True, provider="openai", api_key="sk-test"),
    "ollama": AiSettingsConfig(enabled=True, provider="ollama", api_url="http://ollama.local:11434"),
    "flowise": AiSettingsConfig(
        enabled=True,
        provider="flowise",
        flowise_api_host="https://flowise.example.com",
        flowise_chatflow_id="flow-1",
    ),
}


def recording_dispatcher(reply: str = "Use a 12V supply."):
    seen: list[list[ChatMessage]] = []

    async def _dispatch(config: AiSettingsConfig, messages: list[ChatMessage]) -> str:
        seen.append(list(messages))
        return reply

    return _dispatch, seen


@pytest.mark.asyncio
async def test_turn_appends_user_then_reply() -> None:
    store = ChatSessionStore()
    dispatcher, seen = recording_dispatcher()
    config = AiSettingsConfig(enabled=True, global_greeting_message="Hi!", personality_type="friendly")

    reply = await send_message(store, config, "What PSU for 4 cameras?", dispatcher)

    chat = store.get_active_session()
    assert reply == ChatMessage(role=ChatRole.ASSISTANT, content="Use a 12V supply.")
    assert [(m.role, m.content) for m in chat.messages] == [
        (ChatRole.ASSISTANT, "Hi!"),
        (ChatRole.USER, "What PSU for 4 cameras?"),
        (ChatRole.ASSISTANT, "Use a 12V supply."),
    ]
    assert chat.title == "What PSU for 4 cameras?"

    conversation = seen[0]
    assert conversation[0].role == ChatRole.SYSTEM
    assert conversation[0].content.endswith("Personality: You are warm, approachable, and conversational")
    assert [m.content for m in conversation[1:]] == ["Hi!", "What PSU for 4 cameras?"]


@pytest.mark.asyncio
async def test_history_carries_prior_turns() -> None:
    store = ChatSessionStore()
    dispatcher, seen = recording_dispatcher("ok")
    config = AiSettingsConfig(enabled=True, global_greeting_message="")

    await send_message(store, config, "first", dispatcher)
    await send_message(store, config, "second", dispatcher)

    assert [(m.role, m.content) for m in seen[1][1:]] == [
        (ChatRole.USER, "first"),
        (ChatRole.ASSISTANT, "ok"),
        (ChatRole.USER, "second"),
    ]
    assert sum(1 for m in seen[1] if m.role == ChatRole.SYSTEM) == 1


@pytest.mark.asyncio
async def test_disabled_assistant_records_nothing() -> None:
    store = ChatSessionStore()
    dispatcher, seen = recording_dispatcher()

    with pytest.raises(AssistantDisabledError):
        await send_message(store, AiSettingsConfig(enabled=False), "Hello", dispatcher)

    assert store.list_sessions() == []
    assert seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", sorted(PROVIDER_CONFIGS))
async def test_transport_failure_leaves_apology(provider: str, mock_http) -> None:
    client, calls = mock_http(lambda request: httpx.Response(503, text="unavailable"))
    store = ChatSessionStore()
    store.create_session()

    async with client:
        reply = await send_message(
            store,
            PROVIDER_CONFIGS[provider],
            "Is the panel online?",
            partial(dispatch_chat, http_client=client),
        )

    messages = store.get_active_session().messages
    assert reply.content == APOLOGY
    assert [(m.role, m.content) for m in messages[-2:]] == [
        (ChatRole.USER, "Is the panel online?"),
        (ChatRole.ASSISTANT, APOLOGY),
    ]
    assert sum(1 for m in messages if m.content == APOLOGY) == 1
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_configuration_error_also_apologises(mock_http) -> None:
    client, calls = mock_http(lambda request: httpx.Response(200, json={}))
    store = ChatSessionStore()
    config = AiSettingsConfig(enabled=True, provider="openai", api_key="", global_greeting_message="")

    async with client:
        reply = await send_message(store, config, "Hello", partial(dispatch_chat, http_client=client))

    assert reply.content == APOLOGY
    assert [m.content for m in store.get_active_session().messages] == ["Hello", APOLOGY]
    assert calls == []


@pytest.mark.asyncio
async def test_unexpected_dispatcher_error_apologises() -> None:
    async def broken(config, messages):
        raise RuntimeError("provider SDK blew up")

    store = ChatSessionStore()
    reply = await send_message(store, AiSettingsConfig(enabled=True), "Hello", broken)
    assert reply.content == APOLOGY


def test_inflight_guard_rejects_second_hold() -> None:
    guard = InflightGuard()
    with guard.hold("user-1"):
        with pytest.raises(DispatchInProgressError):
            with guard.hold("user-1"):
                pass
        with guard.hold("user-2"):
            pass

    # Released on exit, so the same user can send again.
    with guard.hold("user-1"):
        pass
