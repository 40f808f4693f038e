from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_api.dto.ai_settings import AiSettingsConfig, AiSettingsUpdate
from assistant_api.models.ai_assistant_settings import AiAssistantSettings


async def get_active_settings_row(db: AsyncSession) -> AiAssistantSettings | None:
    return await db.scalar(
        select(AiAssistantSettings)
        .where(AiAssistantSettings.is_active.is_(True))
        .order_by(AiAssistantSettings.updated_at.desc())
        .limit(1)
    )


async def get_active_settings(db: AsyncSession) -> AiSettingsConfig:
    """Active settings, or the built-in defaults when none were saved yet."""
    row = await get_active_settings_row(db)
    if not row:
        return AiSettingsConfig()
    return AiSettingsConfig.model_validate(row)


async def upsert_active_settings(db: AsyncSession, update: AiSettingsUpdate) -> tuple[AiAssistantSettings, bool]:
    """
    Write ``update`` into the active settings row.

    Returns:
        The saved row and whether it was newly created
    """
    values = update.model_dump(mode="json")
    row = await get_active_settings_row(db)
    created = row is None
    if created:
        row = AiAssistantSettings(is_active=True, **values)
        db.add(row)
    else:
        for key, value in values.items():
            setattr(row, key, value)
    await db.commit()
    await db.refresh(row)
    return row, created
