"""Injectable wall clock and day-age arithmetic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 86400


def system_clock() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def fixed_clock(now: datetime) -> Clock:
    """A clock that always returns ``now`` (naive values are taken as UTC)."""
    frozen = _as_aware(now)
    return lambda: frozen


def parse_date(value: Union[str, datetime]) -> datetime:
    """Parse an ISO 8601 timestamp as produced by ``git log --format=%aI``.

    Naive timestamps are taken as UTC. A trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        return _as_aware(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _as_aware(datetime.fromisoformat(text))


def days_ago(date: Union[str, datetime], now: datetime) -> int:
    """Whole days between ``date`` and ``now``: floor(|now - date| / 1 day)."""
    delta = abs((_as_aware(now) - parse_date(date)).total_seconds())
    return int(delta // SECONDS_PER_DAY)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
