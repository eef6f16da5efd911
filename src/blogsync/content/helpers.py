"""Identifier, excerpt and markup helpers for content records."""

from __future__ import annotations

import re
import secrets
import time

EXCERPT_LENGTH = 180
TRUNCATION_MARKER = "…"
ID_PREFIX = "p_"

_TAG_RE = re.compile(r"<[\s\S]*?>")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id(timestamp_ms: int | None = None) -> str:
    """Build a record id from a random base-36 fragment and a base-36 timestamp."""
    stamp = now_ms() if timestamp_ms is None else timestamp_ms
    return f"{ID_PREFIX}{to_base36(secrets.randbits(53))}{to_base36(stamp)}"


def strip_markup(html: str) -> str:
    return _TAG_RE.sub("", html or "")


def derive_excerpt(plain_text: str) -> str:
    """Return the first 180 characters of the trimmed text, marked if truncated."""
    text = (plain_text or "").strip()
    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + TRUNCATION_MARKER
    return text
