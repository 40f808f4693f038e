from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Header, HTTPException
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from assistant_api.config import settings

logger = logging.getLogger(__name__)

USER_ID_CLAIMS = ("userId", "user_id", "sub")


@dataclass
class AuthenticatedUser:
    user_id: str
    claims: dict[str, Any]


def validate_token(token: str) -> AuthenticatedUser | None:
    """
    Decode an HS256 JWT signed with the application secret.

    Returns:
        The user and claims if the token is valid and names a user, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        return None
    except InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
        return None

    user_id = next((payload[c] for c in USER_ID_CLAIMS if payload.get(c)), None)
    if not user_id:
        logger.warning("JWT missing userId/user_id/sub claim")
        return None
    return AuthenticatedUser(user_id=str(user_id), claims=payload)


def extract_bearer_token(authorization_header: str | None) -> str | None:
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


async def get_current_user_id(
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> str:
    """
    Resolve the signed-in user.

    Order of precedence:
    1. Authorization: Bearer <jwt> - JWT with userId claim
    2. x-user-id header - Direct user ID (for development/testing)
    """
    token = extract_bearer_token(authorization)
    if token:
        user = validate_token(token)
        if user:
            return user.user_id
        logger.warning("Invalid JWT token provided")

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    raise HTTPException(status_code=401, detail="Authentication required.")
