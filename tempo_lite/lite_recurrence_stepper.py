"""Calendar stepping for recurrence rules - Tempo Lite.

Pure date arithmetic: the next candidate date of a rule after a given date, and an
O(1) fast-forward towards a target date for long ranges.
"""

import logging
from datetime import date, timedelta
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from .lite_calendar_context import (
    days_between,
    months_between,
    weekday_index,
    weeks_between,
    years_between,
)
from .lite_models import LiteRecurrence, RecurrencePattern

logger = logging.getLogger(__name__)


def _pattern_value(rule: Any) -> str:
    pattern = getattr(rule, "pattern", None)
    return getattr(pattern, "value", pattern)


def _interval(rule: Any) -> int:
    return max(getattr(rule, "interval", 1) or 1, 1)


def next_occurrence(rule: LiteRecurrence, from_date: date, anchor: Optional[date] = None) -> date:
    """Compute the next candidate occurrence strictly after from_date.

    Without an anchor, units are added to from_date directly; monthly and yearly
    steps clamp to the last day of shorter months.

    With an anchor, monthly and yearly candidates are taken as whole multiples of
    the interval from the anchor, and weekday sets step through the 7-day blocks
    counted from the anchor, so stepping agrees with the occurrence matcher.

    Args:
        rule: Recurrence rule (pattern, interval, days_of_week)
        from_date: Date to step from
        anchor: Series start date, optional

    Returns:
        Next candidate date
    """
    pattern = _pattern_value(rule)
    interval = _interval(rule)

    if pattern == RecurrencePattern.DAILY.value:
        return from_date + timedelta(days=interval)

    if pattern == RecurrencePattern.WEEKLY.value:
        if rule.has_weekday_set:
            days = rule.days_of_week
            if anchor is not None:
                return _next_weekday_in_block(from_date, days, interval, anchor)
            return _next_matching_day_of_week(from_date, days, interval)
        return from_date + timedelta(weeks=interval)

    if pattern == RecurrencePattern.MONTHLY.value:
        if anchor is not None:
            return _next_anchored(anchor, from_date, months_between(anchor, from_date), interval, "months")
        return from_date + relativedelta(months=interval)

    if pattern == RecurrencePattern.YEARLY.value:
        if anchor is not None:
            return _next_anchored(anchor, from_date, years_between(anchor, from_date), interval, "years")
        return from_date + relativedelta(years=interval)

    logger.warning("Unrecognized recurrence pattern %r, stepping one day", pattern)
    return from_date + timedelta(days=1)


def _next_matching_day_of_week(from_date: date, days: list[int], interval: int) -> date:
    """Next listed weekday later in the current week, else the first one `interval` weeks on."""
    current_day = weekday_index(from_date)
    for target_day in days:
        if target_day > current_day:
            return from_date + timedelta(days=target_day - current_day)

    next_week_start = from_date + timedelta(weeks=interval)
    start_day = weekday_index(next_week_start)
    days_to_add = (days[0] - start_day + 7) % 7
    return next_week_start + timedelta(days=days_to_add)


def _next_weekday_in_block(from_date: date, days: list[int], interval: int, anchor: date) -> date:
    """Next listed weekday in an active 7-day block counted from the anchor."""
    block = weeks_between(anchor, from_date)
    block_end = anchor + timedelta(weeks=block + 1)

    if block >= 0 and block % interval == 0:
        candidate = from_date + timedelta(days=1)
        while candidate < block_end:
            if weekday_index(candidate) in days:
                return candidate
            candidate += timedelta(days=1)

    # First listed weekday of the next active block
    next_block = (block // interval + 1) * interval if block >= 0 else 0
    block_start = anchor + timedelta(weeks=next_block)
    days_to_add = min((day - weekday_index(block_start)) % 7 for day in days)
    return block_start + timedelta(days=days_to_add)


def _next_anchored(anchor: date, from_date: date, elapsed: int, interval: int, unit: str) -> date:
    """Smallest anchor + k*interval units strictly after from_date."""
    step = max(elapsed, 0) // interval
    candidate = anchor + relativedelta(**{unit: step * interval})
    while candidate <= from_date:
        step += 1
        candidate = anchor + relativedelta(**{unit: step * interval})
    return candidate


def fast_forward(rule: LiteRecurrence, anchor: date, target: date) -> date:
    """Jump from the anchor to the last interval-aligned step in or before target's unit.

    The result is a starting point for iteration, not a validated occurrence:
    monthly and yearly steps land in target's month or year (possibly after
    target, possibly clamped into a short month), and weekday-set rules land on
    the first day of an active week block.

    Args:
        rule: Recurrence rule
        anchor: Series start date
        target: Date to approach

    Returns:
        Starting cursor (the anchor itself when target is not after it)
    """
    if target <= anchor:
        return anchor

    pattern = _pattern_value(rule)
    interval = _interval(rule)

    if pattern == RecurrencePattern.DAILY.value:
        steps = days_between(anchor, target) // interval
        return anchor + timedelta(days=steps * interval)

    if pattern == RecurrencePattern.WEEKLY.value:
        steps = weeks_between(anchor, target) // interval
        return anchor + timedelta(weeks=steps * interval)

    if pattern == RecurrencePattern.MONTHLY.value:
        steps = months_between(anchor, target) // interval
        return anchor + relativedelta(months=steps * interval)

    if pattern == RecurrencePattern.YEARLY.value:
        steps = years_between(anchor, target) // interval
        return anchor + relativedelta(years=steps * interval)

    return anchor
