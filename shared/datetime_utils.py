"""
Date/time parsing and conversion utilities, framework-agnostic.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


def parse_duration(value: str | int) -> int:
    """Convert a duration such as ``"15m"`` or ``"7d"`` into seconds.

    Accepted suffixes are ``s``, ``m``, ``h`` and ``d``. A value without a
    suffix (``"3600"`` or ``3600``) is taken as raw seconds.

    Raises:
        ValueError: if *value* is not a non-negative integer with an optional
            known suffix.
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Invalid duration: {value!r}")
        return value
    match = _DURATION_RE.match(str(value).lower())
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    MongoDB hands back naive datetimes unless the client is created with
    ``tz_aware=True``; naive values are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
