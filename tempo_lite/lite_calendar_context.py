"""Calendar context and time utilities for tempo_lite.

All recurrence arithmetic works on local calendar dates. A LiteCalendarContext
pins the timezone used to turn timestamps into those dates, so results do not
depend on the host's local timezone.
"""

from __future__ import annotations

import datetime
import logging
import os
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Default calendar timezone when none is configured
DEFAULT_CALENDAR_TIMEZONE = "UTC"

MILLIS_PER_SECOND = 1000

DateLike = Union[datetime.date, datetime.datetime, int, float]


class LiteCalendarContext:
    """Timezone context for start-of-day normalization."""

    def __init__(self, timezone: str = DEFAULT_CALENDAR_TIMEZONE):
        """Initialize calendar context.

        Args:
            timezone: IANA timezone name used as the local wall clock

        Raises:
            ValueError: If the timezone name is unknown
        """
        try:
            self.tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {timezone!r}") from e
        self.timezone = timezone

    def __repr__(self) -> str:
        return f"LiteCalendarContext({self.timezone!r})"

    def to_local_date(self, value: DateLike) -> datetime.date:
        """Convert a date, datetime or epoch-milliseconds value to a local calendar date.

        Aware datetimes are converted into the context timezone; naive datetimes
        are taken as local wall-clock time.
        """
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                return value.astimezone(self.tz).date()
            return value.date()
        if isinstance(value, datetime.date):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return self.from_millis(value)
        raise TypeError(f"Unsupported date value: {value!r}")

    def from_millis(self, millis: Union[int, float]) -> datetime.date:
        """Local calendar date of an epoch-milliseconds timestamp."""
        moment = datetime.datetime.fromtimestamp(millis / MILLIS_PER_SECOND, tz=self.tz)
        return moment.date()

    def start_of_day(self, value: DateLike) -> datetime.datetime:
        """First instant of the value's local day as an aware datetime.

        Usually local midnight. When a transition skips midnight the result is the
        first wall-clock time after the gap; for a calendar day the zone skipped
        entirely it falls on the following day (see ``day_exists``).
        """
        local_date = self.to_local_date(value)
        wall_midnight = datetime.datetime.combine(local_date, datetime.time.min, tzinfo=self.tz)
        # Round-trip through a timestamp so nonexistent wall times land on a real instant
        return datetime.datetime.fromtimestamp(wall_midnight.timestamp(), tz=self.tz)

    def day_exists(self, value: DateLike) -> bool:
        """False for local calendar days the zone skipped entirely (e.g. Pacific/Apia 2011-12-30)."""
        local_date = self.to_local_date(value)
        return self.start_of_day(local_date).date() == local_date

    def start_of_day_millis(self, value: DateLike) -> int:
        """Epoch milliseconds of the value's local midnight."""
        return int(self.start_of_day(value).timestamp()) * MILLIS_PER_SECOND


def days_between(start: datetime.date, end: datetime.date) -> int:
    """Whole days from start to end."""
    return (end - start).days


def weeks_between(start: datetime.date, end: datetime.date) -> int:
    """Whole 7-day blocks from start to end (floored)."""
    return days_between(start, end) // 7


def months_between(start: datetime.date, end: datetime.date) -> int:
    """Calendar month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def years_between(start: datetime.date, end: datetime.date) -> int:
    """Calendar year difference."""
    return end.year - start.year


def weekday_index(value: datetime.date) -> int:
    """Weekday as 0=Sunday..6=Saturday."""
    return value.isoweekday() % 7


class TimeProvider:
    """Provides current time with test time override support."""

    ENV_TEST_TIME = "TEMPO_TEST_TIME"

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Can be overridden for testing via TEMPO_TEST_TIME environment variable.
        Format: ISO 8601 datetime string (e.g., "2024-01-03T08:20:00-08:00")

        Returns:
            Current time in UTC with timezone info
        """
        test_time = os.environ.get(self.ENV_TEST_TIME)
        if test_time:
            try:
                from dateutil import parser as date_parser

                dt = date_parser.isoparse(test_time)
                if dt.tzinfo is not None:
                    return dt.astimezone(datetime.timezone.utc)
                # Assume naive datetime is already UTC
                return dt.replace(tzinfo=datetime.timezone.utc)
            except (ValueError, OverflowError) as e:
                logger.warning("Failed to parse %s=%r: %s", self.ENV_TEST_TIME, test_time, e)

        return datetime.datetime.now(datetime.timezone.utc)


_time_provider = TimeProvider()


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function).

    Returns:
        Current time in UTC
    """
    return _time_provider.now_utc()
