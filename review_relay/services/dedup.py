"""Click deduplication: suppress repeated clicks within a short window."""

import logging
import time

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 30.0

# Entry count above which an insert triggers a stale-entry sweep
DEFAULT_MAX_ENTRIES = 1000


class DedupCache:
    """In-memory idempotency guard keyed by ``(address, subject)`` strings.

    Usage::

        cache = DedupCache(window=30)
        if cache.check_and_record("10.0.0.1::Anna"):
            ...  # duplicate, skip

    Timestamps come from ``time.monotonic()`` unless the caller passes
    ``now``. The size bound is soft: once the map holds more than
    ``max_entries`` keys, each insert sweeps out every entry older than the
    window. Fresh entries are never evicted, so the map can stay above the
    threshold under a burst of distinct keys.
    """

    def __init__(
        self, window: float = DEFAULT_WINDOW_SECONDS, max_entries: int = DEFAULT_MAX_ENTRIES
    ) -> None:
        self._window = window
        self._max_entries = max_entries
        self._seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, key: str) -> bool:
        return key in self._seen

    @staticmethod
    def make_key(address: str, subject: str | None) -> str:
        return f"{address}::{subject or 'unknown'}"

    def should_suppress(self, key: str, now: float | None = None) -> bool:
        """Return True if *key* was recorded less than one window ago."""
        now = time.monotonic() if now is None else now
        last = self._seen.get(key)
        return last is not None and now - last < self._window

    def record(self, key: str, now: float | None = None) -> None:
        """Remember *key* at *now*, sweeping stale entries if over the threshold."""
        now = time.monotonic() if now is None else now
        self._seen[key] = now
        if len(self._seen) > self._max_entries:
            self._sweep(now)

    def check_and_record(self, key: str, now: float | None = None) -> bool:
        """Return True for a duplicate; otherwise record *key* and return False."""
        now = time.monotonic() if now is None else now
        if self.should_suppress(key, now):
            return True
        self.record(key, now)
        return False

    def _sweep(self, now: float) -> None:
        stale = [k for k, ts in self._seen.items() if now - ts > self._window]
        for k in stale:
            del self._seen[k]
        if stale:
            logger.debug("Dedup sweep removed %d stale entries", len(stale))
