# app/utils/time_utils.py
"""Date, time-of-day and timezone helpers shared by the scheduling services"""
import logging
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_OF_DAY_FORMAT = "%H:%M"


def parse_date(value: str, field_name: str = "date") -> date:
    """Parse a YYYY-MM-DD calendar date."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise BadRequestError(f"invalid {field_name} format")


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    return parse_date(value, field_name)


def parse_time_of_day(value: str, field_name: str) -> time:
    """Parse an HH:MM wall-clock time."""
    try:
        return datetime.strptime(value, TIME_OF_DAY_FORMAT).time()
    except (TypeError, ValueError):
        raise BadRequestError(f"invalid {field_name} format")


def format_time_of_day(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(TIME_OF_DAY_FORMAT)


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """
    Load an IANA timezone, falling back to UTC for unknown names.

    Slot generation keeps working for a rule with a bad timezone instead of
    failing the whole request.
    """
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{name}', falling back to UTC")
    return ZoneInfo("UTC")


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
