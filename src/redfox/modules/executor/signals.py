"""Throttling signals extracted from target responses."""

from __future__ import annotations

import re
import time
from collections.abc import Mapping
from dataclasses import dataclass
from email.utils import parsedate_to_datetime

_THROTTLE_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"too many (requests|attempts|login attempts)", "too_many_requests"),
    (r"rate limit(ed)?|temporarily blocked|try again later", "rate_limit_text"),
    (r"account (is )?(temporarily )?locked", "account_locked"),
)


@dataclass(frozen=True, slots=True)
class ThrottleSignal:
    """Evidence that the target is throttling us."""

    key: str
    message: str
    retry_after: float | None = None


def parse_retry_after(value: str | None, now: float | None = None) -> float | None:
    """Parse a Retry-After header (delta seconds or HTTP date)."""
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    current = time.time() if now is None else now
    return max(when.timestamp() - current, 0.0)


def detect_throttling(
    text: str,
    *,
    status_code: int | None = None,
    headers: Mapping[str, str] | None = None,
) -> ThrottleSignal | None:
    """Return a throttle signal if the response indicates rate limiting."""
    h = {k.lower(): str(v) for k, v in (headers or {}).items()}
    retry_after = parse_retry_after(h.get("retry-after"))

    if status_code == 429:
        return ThrottleSignal("http_429", "HTTP 429 Too Many Requests", retry_after)
    if status_code == 503 and retry_after is not None:
        return ThrottleSignal("http_503_retry_after", "HTTP 503 with Retry-After", retry_after)
    if h.get("x-ratelimit-remaining", "").strip() == "0":
        return ThrottleSignal(
            "rate_limit_zero", "Rate-limit budget reached (x-ratelimit-remaining=0)", retry_after
        )

    lowered = (text or "").lower()
    for pattern, key in _THROTTLE_PATTERNS:
        if re.search(pattern, lowered):
            return ThrottleSignal(key, f"Throttling text matched: {key}", retry_after)
    return None
