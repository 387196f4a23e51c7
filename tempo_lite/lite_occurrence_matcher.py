"""Occurrence matching for recurring tasks - Tempo Lite."""

import logging
from datetime import date
from typing import Any, Optional

from .lite_calendar_context import (
    DateLike,
    LiteCalendarContext,
    days_between,
    months_between,
    weekday_index,
    years_between,
)
from .lite_models import RecurrencePattern

logger = logging.getLogger(__name__)

_DEFAULT_CONTEXT = LiteCalendarContext()


def should_occur_on(
    template: Any,
    target: DateLike,
    context: Optional[LiteCalendarContext] = None,
) -> bool:
    """Decide whether the template's series has an occurrence on the target day.

    The anchor day (the template's own due date) always matches, although the
    range generator never emits it as a separate instance.

    Args:
        template: Task carrying a recurrence rule
        target: Day to test (date, datetime or epoch milliseconds)
        context: Calendar context for start-of-day normalization

    Returns:
        True if an occurrence falls on the target day
    """
    rule = getattr(template, "recurrence", None)
    if rule is None:
        return False

    ctx = context or _DEFAULT_CONTEXT
    start = ctx.to_local_date(template.due_date)
    day = ctx.to_local_date(target)

    if day < start:
        return False

    if not ctx.day_exists(day):
        return False

    end_date = getattr(rule, "end_date", None)
    if end_date is not None and day > ctx.to_local_date(end_date):
        return False

    if day == start:
        return True

    return matches_pattern(rule, start, day)


def matches_pattern(rule: Any, start: date, day: date) -> bool:
    """Per-pattern modulo check for a day strictly after the series start."""
    if day <= start:
        return False

    pattern = getattr(rule.pattern, "value", rule.pattern)
    interval = max(rule.interval or 1, 1)

    if pattern == RecurrencePattern.DAILY.value:
        return days_between(start, day) % interval == 0

    if pattern == RecurrencePattern.WEEKLY.value:
        diff_days = days_between(start, day)
        diff_weeks = diff_days // 7
        if rule.has_weekday_set:
            if weekday_index(day) not in rule.days_of_week:
                return False
            return interval == 1 or diff_weeks % interval == 0
        return diff_days % 7 == 0 and diff_weeks % interval == 0

    if pattern == RecurrencePattern.MONTHLY.value:
        # No end-of-month substitution: a 31st anchor skips shorter months
        if day.day != start.day:
            return False
        return months_between(start, day) % interval == 0

    if pattern == RecurrencePattern.YEARLY.value:
        if (day.month, day.day) != (start.month, start.day):
            return False
        return years_between(start, day) % interval == 0

    logger.debug("Unrecognized recurrence pattern %r never matches", pattern)
    return False
