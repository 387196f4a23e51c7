"""Recurrence expansion logic for Tempo Lite task templates."""

import logging
import time
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

from .lite_calendar_context import DEFAULT_CALENDAR_TIMEZONE, DateLike, LiteCalendarContext
from .lite_instance_identity import make_instance_id
from .lite_models import LiteTask
from .lite_occurrence_matcher import should_occur_on
from .lite_recurrence_stepper import fast_forward, next_occurrence

logger = logging.getLogger(__name__)


class LiteRecurrenceError(Exception):
    """Base exception for recurrence engine errors."""


class LiteRecurrenceExpansionError(LiteRecurrenceError):
    """Error expanding a template into occurrences."""


@dataclass
class RecurrenceExpanderConfig:
    """Configuration for recurrence expansion.

    Consolidates expansion settings with explicit defaults.
    """

    default_timezone: str = DEFAULT_CALENDAR_TIMEZONE
    log_expansion_stats: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "RecurrenceExpanderConfig":
        """Extract expansion configuration from a settings object or dict.

        Args:
            settings: Configuration object with expansion settings

        Returns:
            RecurrenceExpanderConfig with values from settings or defaults
        """
        from .config_manager import get_config_value

        if settings is None:
            return cls()
        return cls(
            default_timezone=get_config_value(settings, "default_timezone", DEFAULT_CALENDAR_TIMEZONE),
            log_expansion_stats=bool(get_config_value(settings, "log_expansion_stats", False)),
        )


class LiteRecurrenceExpander:
    """Expands recurring task templates into virtual occurrences for a date range.

    Expansion is pure and deterministic: no caching, no clock reads, no shared
    state, so one expander can serve concurrent callers.
    """

    def __init__(self, settings: Any = None, context: Optional[LiteCalendarContext] = None):
        """Initialize expander with configuration settings.

        Args:
            settings: Configuration object or dict with expansion settings
            context: Calendar context; built from settings.default_timezone when omitted
        """
        self.config = RecurrenceExpanderConfig.from_settings(settings)
        self.context = context or LiteCalendarContext(self.config.default_timezone)

        logger.debug(
            "LiteRecurrenceExpander initialized: timezone=%s, log_expansion_stats=%s",
            self.context.timezone,
            self.config.log_expansion_stats,
        )

    def should_occur_on(self, template: LiteTask, target: DateLike) -> bool:
        """Matcher bound to this expander's calendar context."""
        return should_occur_on(template, target, self.context)

    def generate_instances(
        self,
        template: LiteTask,
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[LiteTask]:
        """Generate virtual occurrences of a template within [range_start, range_end].

        The template's own due date is occurrence zero and is never generated.

        Args:
            template: Task carrying a recurrence rule
            range_start: First day of the window (inclusive)
            range_end: Last day of the window (inclusive)

        Returns:
            Virtual instances in ascending date order

        Raises:
            LiteRecurrenceExpansionError: If expansion fails unexpectedly
        """
        if not template.is_template:
            return []
        rule = template.recurrence

        start_time = time.time()
        try:
            dates = self._occurrence_dates(template, range_start, range_end)
            instances = [self.create_virtual_instance(template, day) for day in dates]
        except (TypeError, ValueError, OverflowError, AttributeError) as e:
            logger.exception("Recurrence expansion failed for template %s", template.id)
            raise LiteRecurrenceExpansionError(
                f"Failed to expand template {template.id}: {e}"
            ) from e

        if self.config.log_expansion_stats:
            logger.info(
                "Expanded template %s (%s x%d): %d instances in %.1fms",
                template.id,
                getattr(rule.pattern, "value", rule.pattern),
                rule.interval,
                len(instances),
                (time.time() - start_time) * 1000,
            )
        else:
            logger.debug("Expanded template %s: %d instances", template.id, len(instances))
        return instances

    def _occurrence_dates(
        self,
        template: LiteTask,
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[date]:
        """Walk the stepper through the window and keep the dates the matcher accepts."""
        rule = template.recurrence
        ctx = self.context
        anchor = ctx.to_local_date(template.due_date)
        start = ctx.to_local_date(range_start)
        end = ctx.to_local_date(range_end)

        if rule.end_date is not None:
            end = min(end, ctx.to_local_date(rule.end_date))
        if start > end:
            return []

        cursor = anchor
        if anchor < start:
            cursor = fast_forward(rule, anchor, start)

        dates: list[date] = []
        while cursor <= end:
            if cursor >= start and cursor != anchor and should_occur_on(template, cursor, ctx):
                dates.append(cursor)

            following = next_occurrence(rule, cursor, anchor=anchor)
            if following <= cursor:
                logger.warning(
                    "Stepper did not advance past %s for template %s, forcing one day",
                    cursor,
                    template.id,
                )
                following = cursor + timedelta(days=1)
            cursor = following

        return dates

    def create_virtual_instance(self, template: LiteTask, day: DateLike) -> LiteTask:
        """Create a virtual (non-persisted) occurrence of a template.

        Args:
            template: Recurring template
            day: Occurrence day

        Returns:
            LiteTask flagged as a virtual recurring instance
        """
        return template.model_copy(
            update={
                "id": make_instance_id(template.id, day, self.context),
                "due_date": self.context.start_of_day(day),
                "completed": False,
                "completed_at": None,
                "recurring_parent_id": template.id,
                "is_recurring_instance": True,
                # Instances never spawn further occurrences
                "recurrence": None,
                "is_virtual": True,
            }
        )


def generate_instances(
    template: LiteTask,
    range_start: DateLike,
    range_end: DateLike,
    context: Optional[LiteCalendarContext] = None,
) -> list[LiteTask]:
    """Expand one template over a window (convenience function).

    Args:
        template: Task carrying a recurrence rule
        range_start: First day of the window (inclusive)
        range_end: Last day of the window (inclusive)
        context: Calendar context, UTC when omitted

    Returns:
        Virtual instances in ascending date order
    """
    return LiteRecurrenceExpander(context=context).generate_instances(template, range_start, range_end)
