"""Service context: the single owner of the relay's shared mutable state."""

from dataclasses import dataclass

import httpx
from starlette.requests import Request

from review_relay.config import Settings
from review_relay.services.alerts import AlertThrottle
from review_relay.services.dedup import DedupCache
from review_relay.services.rate_limit import RateLimiter
from review_relay.services.telegram import TelegramClient


@dataclass
class ReviewRelayContext:
    """Everything the request handlers share across requests.

    Built once per app by ``create_app()`` and stored on ``app.state.relay``.
    """

    settings: Settings
    telegram: TelegramClient
    alerts: AlertThrottle
    master_clicks: DedupCache
    review_limiter: RateLimiter
    click_limiter: RateLimiter

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ReviewRelayContext":
        telegram = TelegramClient(settings, transport=transport)
        window = settings.rate_limit_window_seconds
        return cls(
            settings=settings,
            telegram=telegram,
            alerts=AlertThrottle(
                telegram,
                enabled=settings.alerts_enabled,
                min_interval=settings.error_alert_min_ms / 1000,
            ),
            master_clicks=DedupCache(window=settings.master_click_dedup_ms / 1000),
            review_limiter=RateLimiter(settings.review_rate_limit_max, window),
            click_limiter=RateLimiter(settings.click_rate_limit_max, window),
        )

    async def aclose(self) -> None:
        await self.telegram.aclose()


def get_relay(request: Request) -> ReviewRelayContext:
    """FastAPI dependency returning the app's relay context."""
    return request.app.state.relay


def client_address(request: Request, trust_proxy: bool = True) -> str:
    """Best guess at the guest's address.

    Behind a proxy the first ``X-Forwarded-For`` entry is the original
    client; otherwise fall back to the socket peer.
    """
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
