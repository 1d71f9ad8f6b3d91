"""Throttled self-alerting: report server failures to the staff chat."""

import logging
import time
import traceback
from collections.abc import Callable, Iterable

from review_relay.services.formatter import format_alert_message
from review_relay.services.telegram import TelegramClient

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 5 * 60


class AlertThrottle:
    """Send at most one alert per ``min_interval`` seconds.

    The throttle is global, not per alert type: a burst of different failures
    still produces a single message. Alerting is advisory, so a failure to
    deliver an alert is logged and never raised.
    """

    def __init__(
        self,
        telegram: TelegramClient,
        *,
        enabled: bool,
        min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.telegram = telegram
        self.enabled = enabled
        self.min_interval = min_interval
        self._clock = clock
        self.last_alert_at: float | None = None

    def _throttled(self, now: float) -> bool:
        return self.last_alert_at is not None and now - self.last_alert_at < self.min_interval

    async def maybe_alert(self, title: str, detail_lines: Iterable[str | None] = ()) -> bool:
        """Send an alert unless disabled or throttled.

        Returns True when a delivery was attempted, whether or not it
        succeeded.
        """
        if not self.enabled:
            return False
        now = self._clock()
        if self._throttled(now):
            logger.info("Alert throttled: %s", title)
            return False
        # Slot is claimed before the await; failures during delivery see it taken
        self.last_alert_at = now

        try:
            await self.telegram.send_message(format_alert_message(title, detail_lines))
        except Exception as e:
            logger.warning("Failed to send server alert to Telegram: %s", e)
        return True

    async def report_exception(
        self, title: str, exc: BaseException, extra_lines: Iterable[str | None] = ()
    ) -> bool:
        """Alert with the exception message and its traceback."""
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return await self.maybe_alert(
            title,
            [*extra_lines, f"⚠️ {exc}", f"Stack:\n{stack.rstrip()}" if stack else None],
        )
