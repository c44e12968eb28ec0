from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


_UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 24 * 60 * 60}
_DEFAULT_EXPIRATION = timedelta(days=7)


def parse_duration(value: str) -> timedelta:
    """
    Parse a compact duration such as "15m", "12h" or "7d".

    Unknown units or malformed numbers fall back to seven days.
    """
    unit = value[-1:] if value else ""
    if unit not in _UNIT_SECONDS:
        return _DEFAULT_EXPIRATION
    try:
        amount = int(value[:-1])
    except ValueError:
        return _DEFAULT_EXPIRATION
    return timedelta(seconds=amount * _UNIT_SECONDS[unit])
