# backend/honeypot_intel/services/normalize/timestamps.py
"""
Timestamp normalization for sensor exports.

Sensors write `2024-05-01 10:00:00`, `2024-05-01T10:00:00.123456Z`,
`2024-05-01T13:00:00+03:00` and friends. Everything is turned into the
canonical form `YYYY-MM-DDTHH:MM:SS.mmmZ` (UTC, millisecond precision).

A missing or unparseable value becomes *now*. This is a deliberate lossy
fallback, not an error: callers that care can pass `on_fallback` to count
how often it happens.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"[+-]\d{2}:?\d{2}$")


def format_instant(value: datetime) -> str:
    """Render an aware datetime in canonical UTC ISO form."""
    value = value.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def utc_now_iso() -> str:
    return format_instant(datetime.now(timezone.utc))


def parse_instant(value: str) -> datetime:
    """
    Parse a canonical (or any ISO-8601 with offset) instant to an aware
    datetime. Raises ValueError like `datetime.fromisoformat`.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_timestamp(
    value: Optional[str],
    on_fallback: Optional[Callable[[Optional[str]], None]] = None,
) -> str:
    if not value:
        if on_fallback:
            on_fallback(value)
        return utc_now_iso()

    text = value.strip()
    has_timezone = "Z" in text or _OFFSET_RE.search(text) is not None
    normalized = text if "T" in text else text.replace(" ", "T", 1)
    if not has_timezone:
        normalized = f"{normalized}Z"

    try:
        return format_instant(parse_instant(normalized))
    except (ValueError, OverflowError):
        logger.debug("Unparseable timestamp %r, defaulting to now", value)
        if on_fallback:
            on_fallback(value)
        return utc_now_iso()
