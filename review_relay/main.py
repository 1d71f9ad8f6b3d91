"""
Review Relay API

Collects guest ratings, relays them to the staff Telegram chat and points
5-star guests to the public Google review page.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from review_relay.config import Settings, get_settings
from review_relay.errors import ReviewRelayError
from review_relay.logging_config import configure_logging
from review_relay.middleware import (
    HTTPSRedirectMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    UnhandledErrorMiddleware,
)
from review_relay.routers import review
from review_relay.services.alerts import AlertThrottle
from review_relay.services.context import ReviewRelayContext

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body."


def install_loop_guard(loop: asyncio.AbstractEventLoop, alerts: AlertThrottle) -> Any:
    """Log and alert on exceptions nobody awaited (e.g. failed background tasks).

    Returns the previously installed handler so it can be restored.
    """
    previous = loop.get_exception_handler()
    pending: set[asyncio.Task] = set()

    def handle(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        loop.default_exception_handler(context)
        exc = context.get("exception")
        if exc is None:
            return
        task = loop.create_task(
            alerts.report_exception("🔥 Unhandled background exception", exc)
        )
        pending.add(task)
        task.add_done_callback(pending.discard)

    loop.set_exception_handler(handle)
    return previous


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the ASGI app with its own relay context.

    Args:
        settings: Defaults to the environment-backed ``get_settings()``.
        transport: Optional httpx transport for outbound Telegram calls.
    """
    settings = settings or get_settings()
    relay = ReviewRelayContext.from_settings(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan: startup and shutdown."""
        configure_logging(settings.log_level)
        loop = asyncio.get_running_loop()
        guarded = settings.alerts_enabled
        if guarded:
            previous_handler = install_loop_guard(loop, relay.alerts)
        if not relay.telegram.is_configured:
            logger.warning("TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set, reviews will fail")
        yield
        if guarded:
            loop.set_exception_handler(previous_handler)
        await relay.aclose()

    app = FastAPI(
        title="Review Relay API",
        description="Guest review relay to the staff Telegram chat",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.relay = relay

    # Middleware added last runs first: request ID is outermost, the error
    # catch-all innermost
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)
    if settings.is_production:
        app.add_middleware(HTTPSRedirectMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(review.router, prefix="/api")

    @app.exception_handler(ReviewRelayError)
    async def relay_error_handler(request: Request, exc: ReviewRelayError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.public_message}
        )

    @app.exception_handler(RequestValidationError)
    async def body_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> PlainTextResponse:
        """Liveness probe. Never cached, never touches Telegram."""
        return PlainTextResponse("ok", headers={"Cache-Control": "no-store"})

    return app


app = create_app()
