"""Display helpers for recurrence rules."""

from datetime import datetime
from typing import Optional, Union

from .lite_models import LiteRecurrence, RecurrencePattern

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def describe_recurrence(rule: LiteRecurrence) -> str:
    """Short human-readable summary such as "Every 2 weeks on Mon, Wed"."""
    pattern = getattr(rule.pattern, "value", rule.pattern)
    interval = rule.interval

    if pattern == RecurrencePattern.DAILY.value:
        return "Daily" if interval == 1 else f"Every {interval} days"

    if pattern == RecurrencePattern.WEEKLY.value:
        if rule.days_of_week:
            days = ", ".join(DAY_NAMES[day] for day in rule.days_of_week)
            return f"Weekly on {days}" if interval == 1 else f"Every {interval} weeks on {days}"
        return "Weekly" if interval == 1 else f"Every {interval} weeks"

    if pattern == RecurrencePattern.MONTHLY.value:
        return "Monthly" if interval == 1 else f"Every {interval} months"

    if pattern == RecurrencePattern.YEARLY.value:
        return "Yearly" if interval == 1 else f"Every {interval} years"

    return "Repeating"


def create_recurrence(
    pattern: Union[RecurrencePattern, str],
    interval: int = 1,
    days_of_week: Optional[list[int]] = None,
    end_date: Optional[datetime] = None,
) -> LiteRecurrence:
    """Build a rule from picker selections; weekdays only apply to weekly rules."""
    pattern = RecurrencePattern(pattern)
    return LiteRecurrence(
        pattern=pattern,
        interval=interval,
        days_of_week=days_of_week if pattern == RecurrencePattern.WEEKLY else None,
        end_date=end_date,
    )
