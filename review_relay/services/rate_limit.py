"""Sliding-window rate limiting per client address."""

import time


class RateLimiter:
    """Allow at most ``max_requests`` per ``window`` seconds for each key.

    Keeps the request timestamps for each key and drops the ones that fell
    out of the window on every check. Once more than ``max_keys`` addresses
    are tracked, addresses with no hits left inside the window are removed.
    """

    def __init__(
        self, max_requests: int, window: float = 60.0, max_keys: int = 1000
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self.max_keys = max_keys
        self._hits: dict[str, list[float]] = {}

    def __len__(self) -> int:
        return len(self._hits)

    def check(self, key: str, now: float | None = None) -> bool:
        """Return True if the request is allowed, False if rate limited."""
        now = time.monotonic() if now is None else now
        cutoff = now - self.window
        recent = [ts for ts in self._hits.get(key, ()) if ts > cutoff]
        if len(recent) >= self.max_requests:
            self._hits[key] = recent
            return False
        recent.append(now)
        self._hits[key] = recent
        if len(self._hits) > self.max_keys:
            self._sweep(cutoff)
        return True

    def _sweep(self, cutoff: float) -> None:
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for k in idle:
            del self._hits[k]
