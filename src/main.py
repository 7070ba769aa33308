"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.bk_alerts.api.router import router as alerts_router
from src.bk_analytics.api.router import router as analytics_router
from src.bk_common.database import engine
from src.bk_common.errors import AppError
from src.bk_common.events import EventPublisher
from src.bk_common.rate_limit import build_rate_limiter, create_redis
from src.bk_common.response import error_response
from src.bk_gateway.middleware.request_log import RequestLogMiddleware
from src.bk_ledger.api.parties_router import router as parties_router
from src.bk_ledger.api.router import router as entries_router
from src.bk_settlement.api.router import router as settlements_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, wire rate limiter + event publisher. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    redis = create_redis() if settings.RATE_LIMIT_ENABLED else None
    app.state.rate_limiter = build_rate_limiter(redis)
    app.state.events = EventPublisher()
    logger.info("%s started (rate limiting %s)", settings.APP_NAME,
                "on" if redis is not None else "off")
    yield
    await engine.dispose()
    if redis is not None:
        await redis.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(entries_router, prefix="/api/v1")
app.include_router(parties_router, prefix="/api/v1")
app.include_router(settlements_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(alerts_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
