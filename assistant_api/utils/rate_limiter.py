from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from assistant_api.utils.jwtutils import extract_bearer_token, validate_token


def get_client_identifier(request: Request) -> str:
    """
    Key requests by the signed-in user where one can be read from the headers.

    Falls back to the remote address.
    """
    token = extract_bearer_token(request.headers.get("authorization"))
    if token:
        user = validate_token(token)
        if user:
            return f"user:{user.user_id}"
    user_id = request.headers.get("x-user-id")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_identifier)
