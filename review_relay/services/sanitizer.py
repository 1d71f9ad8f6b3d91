"""Untrusted text normalization for guest-supplied fields."""

import re
from typing import Any

MAX_NAME_LENGTH = 60
MAX_REASON_LENGTH = 500

# C0 controls except tab, LF and CR, plus DEL and the C1 range
CONTROL_CHAR_RE = re.compile("[\u0000-\u0008\u000b\u000c\u000e-\u001f\u007f-\u009f]")


def strip_control_chars(value: str) -> str:
    return CONTROL_CHAR_RE.sub("", value)


def sanitize(raw: Any, max_length: int) -> str:
    """Return *raw* as a clean, bounded single string.

    Non-string input becomes ``""``. Control characters are dropped, the
    result is trimmed and cut to *max_length* characters, and any whitespace
    the cut exposes at the end is trimmed as well so that sanitizing twice
    gives the same result as sanitizing once.
    """
    if not isinstance(raw, str):
        return ""
    cleaned = strip_control_chars(raw).strip()
    return cleaned[:max_length].rstrip()
