"""Telegram message templates for reviews, clicks and server alerts.

All timestamps are rendered in Kyiv time regardless of the host's locale or
timezone, e.g. ``07.03.2025 14:05``.
"""

import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from review_relay.models.review import ReviewSubmission

DISPLAY_TIMEZONE = ZoneInfo("Europe/Kyiv")

UNKNOWN_GUEST = "Невідомо"

NEGATIVE_REVIEW_HEADER = "❗️Гість залишив негативний відгук ❗️"
POSITIVE_REVIEW_HEADER = "✨Гість залишив відгук"
GOOGLE_CLICK_HEADER = "🎉 Гість перейшов за посиланням у Гугл"
MASTER_CLICK_HEADER = "📣 Гість натиснув «Відгук про майстра»"


def format_timestamp(instant: datetime | None = None) -> str:
    """Render *instant* (default: now) as ``DD.MM.YYYY HH:MM`` Kyiv time.

    Naive datetimes are taken to be UTC.
    """
    if instant is None:
        instant = datetime.now(timezone.utc)
    elif instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(DISPLAY_TIMEZONE).strftime("%d.%m.%Y %H:%M")


def _lines(*parts: str | None) -> str:
    """Join template lines, dropping optional lines that are None."""
    return "\n".join(p for p in parts if p is not None)


def _format_rating(rating: Any) -> str | None:
    """Return ``"N/5"`` for a finite numeric rating, else None."""
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return None
    if not math.isfinite(rating):
        return None
    if isinstance(rating, float) and rating.is_integer():
        rating = int(rating)
    return f"{rating}/5"


def format_review_message(
    submission: ReviewSubmission, at: datetime | None = None
) -> str:
    header = NEGATIVE_REVIEW_HEADER if submission.is_negative else POSITIVE_REVIEW_HEADER
    return _lines(
        header,
        "",
        f"👤 Імя: {submission.name or UNKNOWN_GUEST}",
        f"⭐️ {submission.rating}/5",
        f"💬 Коментар: {submission.reason}" if submission.reason else None,
        "",
        f"🕑 {format_timestamp(at)}",
    )


def format_google_click_message(name: str, at: datetime | None = None) -> str:
    return _lines(
        GOOGLE_CLICK_HEADER,
        f"👤 Імя: {name or UNKNOWN_GUEST}",
        f"🕑 {format_timestamp(at)}",
    )


def format_master_click_message(
    name: str,
    master: str | None = None,
    rating: Any = None,
    at: datetime | None = None,
) -> str:
    """Build the master-click notice.

    The master line and the rating line are optional; the rating is shown
    only when it is a finite number.
    """
    rating_text = _format_rating(rating)
    return _lines(
        MASTER_CLICK_HEADER,
        "",
        f"👤 Ім'я: {name or UNKNOWN_GUEST}",
        f"🧑‍🔧 Майстер: {master}" if master else None,
        f"⭐️ {rating_text}" if rating_text else None,
        "",
        f"🕑 {format_timestamp(at)}",
    )


def format_alert_message(
    title: str, detail_lines: Iterable[str | None] = (), at: datetime | None = None
) -> str:
    details = [line for line in detail_lines if line]
    return "\n".join([title, "", *details, "", f"🕑 {format_timestamp(at)}"])
