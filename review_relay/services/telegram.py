"""Telegram Bot API delivery with timeout and bounded retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from review_relay.config import Settings
from review_relay.errors import (
    ConfigurationError,
    DeliveryError,
    TerminalDeliveryError,
    TransientDeliveryError,
)

logger = logging.getLogger(__name__)

# Telegram rejects sendMessage text longer than this
TELEGRAM_MAX_MESSAGE_LENGTH = 4096


def is_transient(exc: Exception) -> bool:
    """Return True for failures worth retrying.

    Timeouts (including the overall per-attempt deadline) and
    connection-level errors never produced an HTTP response.
    A response with an error status means Telegram rejected the request, and
    sending the same request again will not change that.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return False
    return isinstance(
        exc, (asyncio.TimeoutError, httpx.TimeoutException, httpx.TransportError)
    )


class TelegramClient:
    """Posts messages to the configured Telegram chat.

    The underlying ``httpx.AsyncClient`` is created lazily and reused for
    the lifetime of the client. Pass ``transport`` to route requests
    somewhere other than the network (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.bot_token = settings.telegram_bot_token
        self.chat_id = settings.telegram_chat_id
        self.base_url = settings.telegram_api_base
        self.timeout = settings.telegram_timeout_ms / 1000
        self.retry_attempts = max(settings.telegram_retry_attempts, 0)
        self.retry_delay = max(settings.telegram_retry_delay_ms, 0) / 1000
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def deliver(self, endpoint: str, payload: dict[str, Any]) -> None:
        """POST *payload* to *endpoint*, retrying transient failures.

        Each attempt, including reading the response body, is cut off after
        ``timeout`` seconds.

        Raises:
            TransientDeliveryError: Every attempt timed out or failed to connect.
            TerminalDeliveryError: Telegram responded with an error status.
        """
        client = self._get_client()
        attempt = 0
        while True:
            try:
                resp = await asyncio.wait_for(
                    client.post(endpoint, json=payload), self.timeout
                )
                resp.raise_for_status()
                return
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                raise TerminalDeliveryError(
                    f"Telegram API responded {status}: {_describe(e.response)}",
                    status_code=status,
                ) from e
            except (httpx.HTTPError, asyncio.TimeoutError) as e:
                if not is_transient(e):
                    raise DeliveryError(f"Telegram request failed: {e}") from e
                attempt += 1
                if attempt > self.retry_attempts:
                    raise TransientDeliveryError(
                        f"Telegram API unreachable after {attempt} attempt(s): "
                        f"{type(e).__name__}"
                    ) from e
                logger.warning(
                    "Telegram delivery attempt %d failed (%s), retrying",
                    attempt,
                    type(e).__name__,
                )
                if self.retry_delay > 0:
                    await self._sleep(self.retry_delay)

    async def send_message(self, text: str) -> None:
        """Send *text* to the configured chat.

        Raises:
            ConfigurationError: Bot token or chat id is not set.
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Telegram configuration is missing. "
                "Please set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID."
            )
        await self.deliver(
            f"/bot{self.bot_token}/sendMessage",
            {
                "chat_id": self.chat_id,
                "text": text[:TELEGRAM_MAX_MESSAGE_LENGTH],
            },
        )


def _describe(response: httpx.Response) -> str:
    """Pull Telegram's ``description`` out of an error body when present."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(data, dict) and data.get("description"):
        return str(data["description"])
    return response.reason_phrase
