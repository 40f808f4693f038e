from __future__ import annotations

from assistant_api.models.enums import PersonalityType

PERSONALITY_TEXT: dict[str, str] = {
    PersonalityType.PROFESSIONAL.value: "You are professional and precise",
    PersonalityType.FRIENDLY.value: "You are warm, approachable, and conversational",
    PersonalityType.FUNNY.value: "You are funny and talk like you're down with the kids",
}


def personality_text(personality_type: str | None, custom_personality: str | None = None) -> str:
    if personality_type == PersonalityType.CUSTOM.value:
        return custom_personality or ""
    # Anything unrecognised falls back to the professional voice.
    return PERSONALITY_TEXT.get(personality_type or "", PERSONALITY_TEXT[PersonalityType.PROFESSIONAL.value])


def build_system_prompt(
    template: str | None,
    personality_type: str | None,
    custom_personality: str | None = None,
) -> str:
    return f"{template or ''}\n\nPersonality: {personality_text(personality_type, custom_personality)}"
