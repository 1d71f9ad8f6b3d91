"""Review submission and click tracking endpoints."""

import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, Request

from review_relay.errors import RateLimitedError, RequestFailedError
from review_relay.models.review import (
    ClickResponse,
    GoogleClickPayload,
    MasterClickPayload,
    ReviewPayload,
    ReviewResponse,
)
from review_relay.services.context import ReviewRelayContext, client_address, get_relay
from review_relay.services.formatter import (
    format_google_click_message,
    format_master_click_message,
    format_review_message,
)
from review_relay.services.sanitizer import MAX_NAME_LENGTH, sanitize
from review_relay.services.validation import validate_submission

router = APIRouter(prefix="/review", tags=["review"])
logger = logging.getLogger(__name__)

REVIEW_FAILED_MESSAGE = "Не вдалося надіслати відгук. Будь ласка, спробуйте ще раз пізніше."
TELEGRAM_FAILED_MESSAGE = "Не вдалося надіслати повідомлення в Telegram."


def _alert_title(path: str) -> str:
    return f"🔥 Помилка бекенду: {path}"


def _enforce_limit(relay: ReviewRelayContext, request: Request, *, click: bool) -> str:
    """Apply the per-address rate limit and return the address."""
    address = client_address(request, relay.settings.trust_proxy)
    limiter = relay.click_limiter if click else relay.review_limiter
    if not limiter.check(address):
        logger.warning("Rate limited %s on %s", address, request.url.path)
        raise RateLimitedError()
    return address


async def _fail(
    relay: ReviewRelayContext, request: Request, exc: Exception, public_message: str
) -> RequestFailedError:
    """Alert about *exc* and build the generic error to raise."""
    await relay.alerts.report_exception(_alert_title(request.url.path), exc)
    return RequestFailedError(str(exc), public_message=public_message)


def _click_rating(value: Any) -> int | float | None:
    """Numeric rating for the master-click notice, or None if not a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return value
    return None


@router.post("", response_model=ReviewResponse, response_model_exclude_none=True)
async def submit_review(
    payload: ReviewPayload,
    request: Request,
    relay: ReviewRelayContext = Depends(get_relay),
):
    """Relay a review to staff. 5-star guests get the Google review link."""
    _enforce_limit(relay, request, click=False)

    # Validation errors surface as 400s and are not alert-worthy
    submission = validate_submission(payload.name, payload.rating, payload.reason)

    try:
        await relay.telegram.send_message(format_review_message(submission))
    except Exception as e:
        logger.exception("Failed to process review")
        raise await _fail(relay, request, e, REVIEW_FAILED_MESSAGE) from e

    logger.info("Relayed %d-star review", submission.rating)

    redirect_url = relay.settings.google_review_url
    if submission.rating == 5 and redirect_url:
        return ReviewResponse(success=True, redirect_url=redirect_url)
    return ReviewResponse(success=True)


@router.post("/google-click", response_model=ClickResponse, response_model_exclude_none=True)
async def google_click(
    payload: GoogleClickPayload,
    request: Request,
    relay: ReviewRelayContext = Depends(get_relay),
):
    """Notify staff that a guest followed the Google review link."""
    _enforce_limit(relay, request, click=True)

    try:
        guest_name = sanitize(payload.name, MAX_NAME_LENGTH)
        await relay.telegram.send_message(format_google_click_message(guest_name))
    except Exception as e:
        logger.exception("Failed to send Google click notification")
        raise await _fail(relay, request, e, TELEGRAM_FAILED_MESSAGE) from e

    return ClickResponse(success=True)


@router.post("/master-click", response_model=ClickResponse, response_model_exclude_none=True)
async def master_click(
    payload: MasterClickPayload,
    request: Request,
    relay: ReviewRelayContext = Depends(get_relay),
):
    """Notify staff that a guest opened a master's review page.

    Repeated clicks for the same master from the same address within the
    dedup window are acknowledged without sending anything.
    """
    address = _enforce_limit(relay, request, click=True)

    try:
        master = sanitize(payload.master, MAX_NAME_LENGTH)
        key = relay.master_clicks.make_key(address, master)
        if relay.master_clicks.check_and_record(key):
            logger.info("Deduped master click %s", key)
            return ClickResponse(success=True, deduped=True)

        guest_name = sanitize(payload.name, MAX_NAME_LENGTH)
        message = format_master_click_message(
            guest_name, master=master, rating=_click_rating(payload.rating)
        )
        await relay.telegram.send_message(message)
    except Exception as e:
        logger.exception("Failed to send master click notification")
        raise await _fail(relay, request, e, TELEGRAM_FAILED_MESSAGE) from e

    return ClickResponse(success=True)
