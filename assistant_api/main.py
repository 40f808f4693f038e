from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from assistant_api.config import settings
from assistant_api.database.database import create_tables
from assistant_api.errors import AssistantDisabledError, DispatchInProgressError
from assistant_api.routers.ai_settings_router import router as ai_settings_router
from assistant_api.routers.chat_router import router as chat_router
from assistant_api.routers.chats_router import router as chats_router
from assistant_api.utils.rate_limiter import limiter

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = (settings.allowed_cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


app = FastAPI(title="Installer Assistant API", version="1.0.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "status_code": status_code})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, exc.detail)


@app.exception_handler(AssistantDisabledError)
async def assistant_disabled_handler(request: Request, exc: AssistantDisabledError) -> JSONResponse:
    return _error(403, "The AI assistant is disabled.")


@app.exception_handler(DispatchInProgressError)
async def dispatch_in_progress_handler(request: Request, exc: DispatchInProgressError) -> JSONResponse:
    logger.info(f"Rejected duplicate submission for user {exc}")
    return _error(409, "A reply is already being generated.")


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "details": exc.errors(),
            "status_code": 422,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error: {exc}")
    return _error(500, "Database error")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error: {exc}")
    return _error(500, "Internal server error")


@app.on_event("startup")
async def on_startup() -> None:
    await create_tables()


app.include_router(chats_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(ai_settings_router, prefix="/api/v1")
