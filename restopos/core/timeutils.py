"""
Time helpers.

All timestamps are stored in UTC. SQLite hands back naive datetimes, so
anything read from the database goes through ``as_utc`` before it is
compared with ``utcnow()``.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

from restopos.core.config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def report_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().report_timezone)


def to_local(value: datetime) -> datetime:
    """Convert a stored timestamp to the report timezone."""
    return as_utc(value).astimezone(report_zone())


def local_today() -> date:
    return utcnow().astimezone(report_zone()).date()


def isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Datetime from a stored value or its JSON form (``...Z`` included)."""
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))
