"""Rating and submission validation."""

import math
from typing import Any

from review_relay.errors import ValidationError
from review_relay.models.review import ReviewSubmission
from review_relay.services.sanitizer import MAX_NAME_LENGTH, MAX_REASON_LENGTH, sanitize

MIN_RATING = 1
MAX_RATING = 5

RATING_INVALID_MESSAGE = "Rating must be an integer between 1 and 5."
NAME_REQUIRED_MESSAGE = "Name is required."
COMMENT_REQUIRED_MESSAGE = "Please provide a short note about your experience."


def coerce_rating(value: Any) -> int | None:
    """Return *value* as an int if it is integral, else None.

    Accepts ints, integral floats and base-10 integer strings. Booleans are
    rejected even though ``bool`` subclasses ``int``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in "+-" else text
        if digits.isascii() and digits.isdigit() and len(digits) <= 9:
            return int(text)
    return None


def is_valid_rating(value: Any) -> bool:
    rating = coerce_rating(value)
    return rating is not None and MIN_RATING <= rating <= MAX_RATING


def validate_submission(name: Any, rating: Any, reason: Any) -> ReviewSubmission:
    """Validate a raw review body.

    Checks run in a fixed order (rating, name, comment) so a guest always
    sees the first problem with their form.

    Raises:
        ValidationError: With the message to show the guest.
    """
    if not is_valid_rating(rating):
        raise ValidationError(RATING_INVALID_MESSAGE)
    numeric_rating = coerce_rating(rating)

    clean_name = sanitize(name, MAX_NAME_LENGTH)
    if not clean_name:
        raise ValidationError(NAME_REQUIRED_MESSAGE)

    clean_reason = sanitize(reason, MAX_REASON_LENGTH)
    if numeric_rating < MAX_RATING and not clean_reason:
        raise ValidationError(COMMENT_REQUIRED_MESSAGE)

    return ReviewSubmission(name=clean_name, rating=numeric_rating, reason=clean_reason)
