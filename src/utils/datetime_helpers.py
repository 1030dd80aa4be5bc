"""
Standardized Date/Time Handling Utilities

This module provides centralized functions for date/time operations to ensure:
1. All session timestamps are handled as timezone-aware UTC datetimes
2. Calendar days are always derived in an explicit IANA timezone
3. Challenge calendar math (end dates, weeks) is done in one place

CRITICAL RULES:
- Never mix naive and aware datetimes (naive input is read as UTC)
- Never derive a calendar day without naming the timezone
"""

import calendar
import logging
import math
from datetime import datetime, date, timedelta, timezone
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Convert datetime to UTC, reading naive datetimes as UTC

    Args:
        dt: Datetime to convert (can be naive or aware)

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        logger.warning(f"Received naive datetime, assuming UTC: {dt}")
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_timezone(tz: Union[str, ZoneInfo]) -> ZoneInfo:
    """
    Resolve an IANA timezone name to a ZoneInfo

    Raises:
        ValueError: If the timezone is unknown
    """
    if isinstance(tz, ZoneInfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Invalid timezone '{tz}'. Please use an IANA timezone (e.g., 'Europe/Paris')") from e


def local_date(dt: datetime, tz: Union[str, ZoneInfo] = "UTC") -> date:
    """Calendar day of a timestamp in the given timezone"""
    return ensure_utc(dt).astimezone(resolve_timezone(tz)).date()


def whole_days_between(later: datetime, earlier: datetime) -> int:
    """
    Floor of the elapsed time between two timestamps, in days

    Negative when `later` is before `earlier`.
    """
    seconds = (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
    return math.floor(seconds / SECONDS_PER_DAY)


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`"""
    return day - timedelta(days=day.weekday())


def add_months(day: date, months: int) -> date:
    """
    Add calendar months to a date

    The day of month is clamped to the last day of the target month
    (Jan 31 + 1 month = Feb 28/29).
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
