from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_api.config import settings
from assistant_api.database.database import get_db
from assistant_api.dto.ai_settings import AiSettingsPublic, AiSettingsUpdate
from assistant_api.utils.audit_logger import log_admin_action, log_suspicious_access
from assistant_api.utils.database_utils.ai_settings_utils import get_active_settings, upsert_active_settings

router = APIRouter()
logger = logging.getLogger(__name__)


def validate_admin_token(token: str | None, request: Request) -> None:
    if not token or token != settings.admin_api_token:
        log_suspicious_access("invalid_admin_token", request, {"token_present": bool(token)})
        raise HTTPException(status_code=403, detail="Invalid or missing admin token.")


@router.get("/ai-settings")
async def read_ai_settings(db: AsyncSession = Depends(get_db)) -> AiSettingsPublic:
    """Settings the chat surfaces need; credentials are never returned."""
    config = await get_active_settings(db)
    return AiSettingsPublic.model_validate(config.model_dump())


@router.put("/ai-settings")
async def update_ai_settings(
    request: Request,
    body: AiSettingsUpdate,
    x_token: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create or update the active assistant settings. Requires admin token."""
    validate_admin_token(x_token, request)

    row, created = await upsert_active_settings(db, body)
    action = "created" if created else "updated"
    logger.info(f"AI settings {action}: provider={row.provider}")
    log_admin_action(
        f"ai_settings_{action}",
        request,
        {"settings_id": row.settings_id, "provider": row.provider, "enabled": row.enabled},
    )
    return {"settings_id": row.settings_id, "provider": row.provider, "action": action}
