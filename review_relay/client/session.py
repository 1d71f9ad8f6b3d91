"""Guest-side review lifecycle: rate, submit once, report link clicks.

``ReviewSession`` drives the same flow as the review page in the browser,
against the relay's HTTP API::

    async with httpx.AsyncClient(base_url="https://example.com") as http:
        session = ReviewSession(ReviewStore(JsonFileStorage("~/.review")), http)
        session.hydrate()
        session.select_rating(5)
        await session.submit("Olena", "")
        await session.send_google_click()
"""

import asyncio
import enum
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from review_relay.client.storage import ReviewStore, StoredReview

logger = logging.getLogger(__name__)

REVIEW_PATH = "/api/review"
GOOGLE_CLICK_PATH = "/api/review/google-click"
MASTER_CLICK_PATH = "/api/review/master-click"

ALREADY_SUBMITTED_MESSAGE = "Ви вже залишили відгук. Дякуємо!"
RATING_REQUIRED_MESSAGE = "Будь ласка, оберіть оцінку."
COMMENT_REQUIRED_MESSAGE = "Будь ласка, напишіть, що нам варто покращити."
REDIRECTING_MESSAGE = "Дякуємо! Переходимо до Google..."
THANKS_MESSAGE = "Дякуємо за відгук! Ми обов'язково його врахуємо."
SEND_FAILED_MESSAGE = "Не вдалося надіслати відгук."
NETWORK_FAILED_MESSAGE = "Сталася помилка. Спробуйте пізніше."

# Fire-and-forget sender: returns once the request is handed off
Beacon = Callable[[str, dict[str, Any]], None]


class SubmissionState(str, enum.Enum):
    UNRATED = "unrated"
    RATED = "rated"
    SUBMITTING = "submitting"
    AWAITING_CLICK = "awaiting_click"
    SUBMITTED = "submitted"


class ReviewSession:
    """One device's review form.

    A device holds at most one stored review. Once it exists the form stays
    disabled until the record expires or storage is cleared.
    """

    def __init__(
        self,
        store: ReviewStore,
        http: httpx.AsyncClient,
        *,
        beacon: Beacon | None = None,
    ) -> None:
        self.store = store
        self.http = http
        self._beacon = beacon or self._background_post
        self._background: set[asyncio.Task] = set()
        self._sent_clicks: set[str] = set()

        self.state = SubmissionState.UNRATED
        self.rating: int | None = None
        self.review: StoredReview | None = None
        self.status: str = ""
        self.status_kind: str | None = None

    @property
    def form_disabled(self) -> bool:
        return self.review is not None

    def _set_status(self, message: str, kind: str | None = None) -> None:
        self.status = message
        self.status_kind = kind

    def _settle(self, review: StoredReview) -> None:
        self.review = review
        self.rating = review.rating
        if review.redirect_url and not review.google_clicked:
            self.state = SubmissionState.AWAITING_CLICK
        else:
            self.state = SubmissionState.SUBMITTED

    def hydrate(self, now: datetime | None = None) -> StoredReview | None:
        """Restore a previous submission from storage, if still valid."""
        review = self.store.load(now)
        if review is None:
            return None
        self._settle(review)
        self._set_status(ALREADY_SUBMITTED_MESSAGE, "success")
        return review

    def select_rating(self, rating: int) -> SubmissionState:
        if self.form_disabled or self.state is SubmissionState.SUBMITTING:
            return self.state
        if not 1 <= rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {rating}")
        self.rating = rating
        self.state = SubmissionState.RATED
        self._set_status("")
        return self.state

    async def submit(self, name: str, reason: str = "") -> SubmissionState:
        """Send the review once and persist it on success.

        Client-side checks mirror the server's so most mistakes never leave
        the device. Server errors put the session back into ``RATED`` with
        the server's message as status.
        """
        if self.form_disabled or self.store.load() is not None:
            if self.review is None:
                self.hydrate()
            self._set_status(ALREADY_SUBMITTED_MESSAGE, "success")
            return self.state
        if self.rating is None:
            self._set_status(RATING_REQUIRED_MESSAGE, "error")
            return self.state

        payload = {"name": name.strip(), "rating": self.rating, "reason": reason.strip()}
        if self.rating < 5 and not payload["reason"]:
            self._set_status(COMMENT_REQUIRED_MESSAGE, "error")
            return self.state

        self.state = SubmissionState.SUBMITTING
        try:
            resp = await self.http.post(REVIEW_PATH, json=payload)
            result = _json_or_empty(resp)
        except httpx.HTTPError as e:
            logger.warning("Review submission failed: %s", e)
            self.state = SubmissionState.RATED
            self._set_status(NETWORK_FAILED_MESSAGE, "error")
            return self.state

        if resp.is_error:
            self.state = SubmissionState.RATED
            self._set_status(result.get("error") or SEND_FAILED_MESSAGE, "error")
            return self.state

        review = StoredReview(
            name=payload["name"],
            rating=payload["rating"],
            reason=payload["reason"],
            submitted_at=datetime.now(timezone.utc),
            redirect_url=result.get("redirectUrl") or None,
        )
        self.store.save(review)
        self._settle(review)
        if review.redirect_url:
            self._set_status(REDIRECTING_MESSAGE, "success")
        else:
            self._set_status(THANKS_MESSAGE, "success")
        return self.state

    async def send_google_click(self) -> bool:
        """Report that the guest opened the Google review link."""
        name = self.review.name if self.review else ""
        sent = await self._send_click("google_clicked", GOOGLE_CLICK_PATH, {"name": name})
        if sent and self.state is SubmissionState.AWAITING_CLICK:
            self.state = SubmissionState.SUBMITTED
        return sent

    async def send_master_click(self, master: str) -> bool:
        """Report that the guest opened a master's review page."""
        stored = self.store.load()
        payload = {
            "master": master,
            "name": (stored.name if stored else "").strip(),
            "rating": stored.rating if stored else None,
        }
        return await self._send_click("master_clicked", MASTER_CLICK_PATH, payload)

    async def _send_click(self, flag: str, path: str, payload: dict[str, Any]) -> bool:
        """Send a click notice at most once per stored review.

        Tries the fire-and-forget beacon first and counts the click as sent
        as soon as it is handed off. If the beacon cannot even be started,
        falls back to an ordinary request and counts the click only when a
        response arrives. Returns True if the click is now marked as sent.
        """
        if flag in self._sent_clicks:
            return False
        stored = self.store.load()
        if stored is not None and getattr(stored, flag):
            self._sent_clicks.add(flag)
            return False

        try:
            self._beacon(path, payload)
        except Exception as e:
            logger.debug("Beacon unavailable (%s), falling back to a request", e)
            try:
                await self.http.post(path, json=payload)
            except httpx.HTTPError as exc:
                logger.info("Click notice for %s was not delivered: %s", path, exc)
                return False

        self._mark_clicked(flag, stored)
        return True

    def _mark_clicked(self, flag: str, stored: StoredReview | None) -> None:
        self._sent_clicks.add(flag)
        if stored is not None:
            stored = stored.model_copy(update={flag: True})
            self.store.save(stored)
            self.review = stored

    def _background_post(self, path: str, payload: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(self.http.post(path, json=payload))
        self._background.add(task)
        task.add_done_callback(self._finish_background)

    def _finish_background(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.info("Background click notice failed: %s", task.exception())

    async def drain(self) -> None:
        """Wait for in-flight beacon requests (e.g. before closing the client)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)


def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
