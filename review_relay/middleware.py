"""Middleware: request IDs, security headers, HTTPS redirect, error catch-all."""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from review_relay.errors import GENERIC_ERROR_MESSAGE

logger = logging.getLogger(__name__)

# Context var accessible from anywhere during a request lifecycle
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "base-uri 'self'",
        "object-src 'none'",
        "frame-ancestors 'none'",
        "img-src 'self' data:",
        "connect-src 'self'",
        "style-src 'self'",
        "script-src 'self'",
        "require-trusted-types-for 'script'",
    ]
)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request/response cycle.

    Reads ``X-Request-ID`` from the incoming request headers; if absent,
    generates a new UUID4.  The ID is stored in a context variable so that
    log lines and alerts can include it, and is echoed back on the
    response as ``X-Request-ID``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(rid)

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers to every response.

    HSTS and the content security policy are only sent in production, where
    the site is served over HTTPS from a single origin.
    """

    def __init__(self, app: ASGIApp, production: bool = False) -> None:
        super().__init__(app)
        self.production = production

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        if self.production:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
            response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect plain-HTTP requests to HTTPS, except the health check.

    Behind a TLS-terminating proxy the original scheme arrives in
    ``X-Forwarded-Proto``.
    """

    exempt_paths = frozenset({"/healthz"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.exempt_paths or _is_secure(request):
            return await call_next(request)
        host = request.headers.get("host") or request.url.netloc
        target = f"https://{host}{request.url.path}"
        if request.url.query:
            target += f"?{request.url.query}"
        return RedirectResponse(target, status_code=301)


def _is_secure(request: Request) -> bool:
    if request.url.scheme == "https":
        return True
    forwarded = request.headers.get("X-Forwarded-Proto", "")
    return forwarded.split(",")[0].strip().lower() == "https"


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn any exception that escaped the route handlers into a generic 500.

    Sits inside the request-ID and security-header middleware so the error
    response carries the same headers as every other response. The failure
    is logged and reported through the app's alert throttle.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error("Unhandled route error", exc_info=exc)
            await request.app.state.relay.alerts.report_exception(
                "🔥 Неконтрольована помилка маршруту",
                exc,
                extra_lines=[f"📄 {request.method} {request.url.path}"],
            )
            return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})
