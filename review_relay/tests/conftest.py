"""Shared fixtures for review-relay tests."""

import json
from collections.abc import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from review_relay.config import Settings

GOOGLE_URL = "https://g.page/r/test-studio/review"


class FakeTelegram:
    """Stands in for api.telegram.org behind an ``httpx.MockTransport``.

    Every request is recorded. ``responder`` decides what happens; by
    default Telegram answers ``{"ok": true}``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = self.ok
        self.transport = httpx.MockTransport(self._handle)

    @staticmethod
    def ok(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True, "result": {}})

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def texts(self) -> list[str]:
        return [json.loads(r.content)["text"] for r in self.requests]


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    yield
    from review_relay.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with safe test defaults and no .env lookup."""
    return Settings(
        _env_file=None,
        environment="development",
        telegram_bot_token="test-token",
        telegram_chat_id="4242",
        telegram_api_base="https://telegram.test",
        telegram_retry_attempts=1,
        telegram_retry_delay_ms=0,
        google_review_url=GOOGLE_URL,
    )


@pytest.fixture
def alert_settings(test_settings: Settings) -> Settings:
    """Production settings with alerting switched on."""
    return test_settings.model_copy(
        update={"environment": "production", "error_alerts_enabled": True}
    )


@pytest.fixture
def fake_telegram() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture
def make_client(fake_telegram: FakeTelegram):
    """Factory for an in-process client against a fresh app."""
    from review_relay.main import create_app

    def _make(settings: Settings, base_url: str = "http://test") -> AsyncClient:
        app = create_app(settings, transport=fake_telegram.transport)
        return AsyncClient(transport=ASGITransport(app=app), base_url=base_url)

    return _make


@pytest.fixture
async def client(make_client, test_settings: Settings):
    async with make_client(test_settings) as c:
        yield c
