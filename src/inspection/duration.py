"""Compact duration tokens (`2d3h15m`) to seconds and back."""

from __future__ import annotations

import re

from .errors import DurationFormatError

DURATION_RE = re.compile(r"(?:(?P<days>\d+)d)?(?:(?P<hours>\d+)h)?(?:(?P<minutes>\d+)m)?")

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


def parse_duration(token: str) -> int:
    """Return the number of seconds in `token`; zero or unparseable raises."""
    match = DURATION_RE.fullmatch((token or "").strip())
    if not match:
        raise DurationFormatError(token)

    days = int(match.group("days") or 0)
    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    total = days * SECONDS_PER_DAY + hours * SECONDS_PER_HOUR + minutes * SECONDS_PER_MINUTE
    if total == 0:
        raise DurationFormatError(token)
    return total


def format_duration(total_seconds: int) -> str:
    """Render seconds as `1d 1h 1m 1s`, hiding leading zero units."""
    days, rest = divmod(int(total_seconds), SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if days > 0 or hours > 0:
        parts.append(f"{hours}h")
    if days > 0 or hours > 0 or minutes > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


__all__ = ["parse_duration", "format_duration"]
