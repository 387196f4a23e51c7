"""Task merging and reconciliation for recurring tasks - Tempo Lite.

This module merges persisted task rows with virtual occurrences generated from
recurring templates, suppressing any virtual occurrence whose deterministic ID
already exists as a persisted row (a completed or edited occurrence).
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from .lite_calendar_context import DateLike, now_utc
from .lite_models import LiteTask
from .lite_recurrence_expander import LiteRecurrenceExpander

logger = logging.getLogger(__name__)


class LiteTaskMerger:
    """Handles merging, deduplication and occurrence materialization for tasks."""

    def __init__(self, expander: Optional[LiteRecurrenceExpander] = None):
        """Initialize merger.

        Args:
            expander: Expander used to generate virtual occurrences
        """
        self.expander = expander or LiteRecurrenceExpander()

    def merge(
        self,
        persisted_tasks: list[LiteTask],
        templates: Iterable[LiteTask],
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[LiteTask]:
        """Merge persisted rows in a window with virtual occurrences of templates.

        Args:
            persisted_tasks: Stored rows whose due date falls in the window
            templates: Stored recurring templates
            range_start: First day of the window (inclusive)
            range_end: Last day of the window (inclusive)

        Returns:
            Persisted rows followed by the virtual occurrences they do not shadow
        """
        persisted = self.deduplicate_tasks(persisted_tasks)
        persisted_ids = {task.id for task in persisted}

        virtual: list[LiteTask] = []
        for template in self._candidate_templates(templates, range_start, range_end):
            virtual.extend(self.expander.generate_instances(template, range_start, range_end))

        surviving, suppressed_count = self._filter_persisted_occurrences(virtual, persisted_ids)

        if suppressed_count > 0:
            logger.debug(
                "Suppressed %d virtual occurrences shadowed by persisted rows", suppressed_count
            )

        logger.debug(
            "Merged %d persisted + %d virtual = %d total tasks",
            len(persisted),
            len(surviving),
            len(persisted) + len(surviving),
        )
        return persisted + surviving

    def _candidate_templates(
        self,
        templates: Iterable[LiteTask],
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[LiteTask]:
        """Cheap pre-filter: templates whose series can intersect the window."""
        ctx = self.expander.context
        start = ctx.to_local_date(range_start)
        end = ctx.to_local_date(range_end)

        candidates = []
        for template in templates:
            if not template.is_template:
                continue
            rule = template.recurrence
            if ctx.to_local_date(template.due_date) > end:
                continue
            if rule.end_date is not None and ctx.to_local_date(rule.end_date) < start:
                continue
            candidates.append(template)
        return candidates

    def _filter_persisted_occurrences(
        self,
        virtual_tasks: list[LiteTask],
        persisted_ids: set[str],
    ) -> tuple[list[LiteTask], int]:
        """Drop virtual occurrences whose ID is already persisted.

        Returns:
            Tuple of (surviving_tasks, suppressed_count)
        """
        surviving = []
        suppressed_count = 0

        for task in virtual_tasks:
            if task.id in persisted_ids:
                logger.debug("Suppressing virtual occurrence %s (persisted)", task.id)
                suppressed_count += 1
                continue
            surviving.append(task)

        return surviving, suppressed_count

    def deduplicate_tasks(self, tasks: list[LiteTask]) -> list[LiteTask]:
        """Remove tasks sharing an ID, keeping the first.

        Args:
            tasks: Tasks to deduplicate

        Returns:
            Deduplicated list in original order
        """
        seen: set[str] = set()
        deduplicated = []

        for task in tasks:
            if task.id not in seen:
                seen.add(task.id)
                deduplicated.append(task)

        if len(tasks) != len(deduplicated):
            logger.debug("Removed %d duplicate tasks", len(tasks) - len(deduplicated))

        return deduplicated

    def materialize_instance(
        self,
        instance: LiteTask,
        now: Optional[datetime] = None,
        completed: bool = True,
    ) -> LiteTask:
        """Turn a virtual occurrence into a row ready to persist.

        The row keeps the occurrence's deterministic ID, so once stored it shadows
        the virtual occurrence for that day in every later merge.

        Args:
            instance: Virtual occurrence
            now: Current time, from the time provider when omitted
            completed: Completion state of the stored row

        Returns:
            Persistable LiteTask

        Raises:
            ValueError: If instance is not a recurring occurrence
        """
        if not instance.is_recurring_instance:
            raise ValueError(f"Task {instance.id} is not a recurring occurrence")

        current = now or now_utc()
        return instance.model_copy(
            update={
                "completed": completed,
                "completed_at": current if completed else None,
                "updated_at": current,
                "is_virtual": False,
            }
        )

    def toggle_complete(self, task: LiteTask, now: Optional[datetime] = None) -> LiteTask:
        """Flip a task's completion, materializing virtual occurrences.

        Args:
            task: Task to toggle
            now: Current time, from the time provider when omitted

        Returns:
            Updated copy of the task
        """
        current = now or now_utc()
        if task.is_virtual:
            return self.materialize_instance(task, now=current, completed=True)

        completed = not task.completed
        return task.model_copy(
            update={
                "completed": completed,
                "completed_at": current if completed else None,
                "updated_at": current,
            }
        )

    def sort_tasks(self, tasks: list[LiteTask]) -> list[LiteTask]:
        """Order tasks for display by local due day, then manual order."""
        ctx = self.expander.context
        return sorted(tasks, key=lambda task: (ctx.to_local_date(task.due_date), task.order))
