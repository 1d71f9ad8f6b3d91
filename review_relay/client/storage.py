"""Durable client-side storage for the one-review-per-device record.

Mirrors what the review page keeps in ``localStorage``: a single JSON record
under a fixed key, expiring 72 hours after submission. Anything unreadable,
expired or inconsistent is dropped on read.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "hataMasazhuReview"
REVIEW_TTL = timedelta(hours=72)


class StorageBackend(Protocol):
    """Minimal ``localStorage``-like key/value interface."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, mostly for tests and one-shot scripts."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """One file per key inside *directory* (created on first write)."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class StoredReview(BaseModel):
    """The persisted record of a submitted review."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    rating: int = Field(..., ge=1, le=5)
    reason: str = ""
    submitted_at: datetime = Field(..., alias="submittedAt")
    redirect_url: str | None = Field(None, alias="redirectUrl")
    google_clicked: bool = Field(False, alias="googleClicked")
    master_clicked: bool = Field(False, alias="masterClicked")

    def is_expired(self, now: datetime, ttl: timedelta = REVIEW_TTL) -> bool:
        submitted = self.submitted_at
        if submitted.tzinfo is None:
            submitted = submitted.replace(tzinfo=timezone.utc)
        return now - submitted > ttl

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ReviewStore:
    """Read and write the device's single stored review."""

    def __init__(
        self,
        backend: StorageBackend,
        *,
        key: str = STORAGE_KEY,
        ttl: timedelta = REVIEW_TTL,
    ) -> None:
        self.backend = backend
        self.key = key
        self.ttl = ttl

    def load(self, now: datetime | None = None) -> StoredReview | None:
        """Return the stored review, or None after discarding a bad record.

        A 5-star review without a redirect URL can only come from a broken
        earlier run, so it is removed like an expired one.
        """
        now = now or datetime.now(timezone.utc)
        try:
            raw = self.backend.get_item(self.key)
        except OSError as e:
            logger.warning("Could not read stored review: %s", e)
            return None
        if not raw:
            return None

        try:
            review = StoredReview.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.info("Discarding malformed stored review")
            self.clear()
            return None

        if review.is_expired(now, self.ttl):
            logger.info("Discarding expired stored review from %s", review.submitted_at)
            self.clear()
            return None
        if review.rating == 5 and not review.redirect_url:
            logger.info("Discarding 5-star stored review without redirect URL")
            self.clear()
            return None
        return review

    def save(self, review: StoredReview) -> None:
        """Persist *review*; storage failures are ignored like quota errors."""
        try:
            self.backend.set_item(self.key, review.to_json())
        except OSError as e:
            logger.warning("Could not store review: %s", e)

    def clear(self) -> None:
        try:
            self.backend.remove_item(self.key)
        except OSError as e:
            logger.warning("Could not remove stored review: %s", e)
