from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request

audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)

if not audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[AUDIT] %(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    audit_logger.addHandler(handler)


def _request_context(request: Request) -> dict[str, Any]:
    client_ip = request.headers.get("x-forwarded-for") or (
        request.client.host if request.client else "unknown"
    )
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
        "path": str(request.url.path),
        "method": request.method,
    }


def log_admin_action(action: str, request: Request, details: dict[str, Any] | None = None) -> None:
    """
    Record a change made through an admin endpoint.

    Args:
        action: What happened (e.g., "ai_settings_created", "ai_settings_updated")
        request: The FastAPI request object
        details: Additional details to log; never pass credentials here
    """
    entry = {"action": action, **_request_context(request)}
    if details:
        entry["details"] = details
    audit_logger.info(f"Admin action: {entry}")


def log_suspicious_access(reason: str, request: Request, details: dict[str, Any] | None = None) -> None:
    entry = {"reason": reason, **_request_context(request)}
    if details:
        entry["details"] = details
    audit_logger.warning(f"Suspicious access: {entry}")
