"""Data models for recurring task processing - Tempo Lite version."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from .lite_calendar_context import now_utc as _now_utc


class RecurrencePattern(str, Enum):
    """Supported repeat units for a recurrence rule."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class LiteTaskType(str, Enum):
    """Task flavours offered by the application."""

    QUICK = "quick"
    DEEP = "deep"


class LiteTaskKind(str, Enum):
    """Role a task plays in a recurring series."""

    SINGLE = "single"
    TEMPLATE = "template"
    INSTANCE = "instance"


class LiteRecurrence(BaseModel):
    """Repeat rule attached to a template task."""

    pattern: RecurrencePattern = Field(..., description="Repeat unit")
    interval: int = Field(default=1, ge=1, description="Repeat every N units")
    days_of_week: Optional[list[int]] = Field(
        default=None,
        alias="daysOfWeek",
        description="Weekday indices (0=Sunday..6=Saturday), weekly only",
    )
    end_date: Optional[datetime] = Field(
        default=None, alias="endDate", description="No occurrence after this day"
    )
    occurrences: Optional[int] = Field(
        default=None, ge=1, description="Maximum occurrence count (carried, not enforced)"
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("days_of_week")
    @classmethod
    def normalize_days_of_week(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        """Sort and de-duplicate weekdays; an empty selection means none."""
        if not value:
            return None
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"Weekday index out of range (0-6): {day}")
        return sorted(set(value))

    @property
    def has_weekday_set(self) -> bool:
        """True when a weekly rule is restricted to explicit weekdays."""
        return self.pattern == RecurrencePattern.WEEKLY and bool(self.days_of_week)

    @field_serializer("end_date", when_used="unless-none")
    def serialize_end_date(self, dt: datetime) -> str:
        """Serialize end date to ISO format."""
        return dt.isoformat()


class LiteTask(BaseModel):
    """Task record: a single task, a recurring template, or an occurrence of one."""

    # Core properties
    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    type: LiteTaskType = Field(default=LiteTaskType.QUICK, description="Task flavour")
    content: str = Field(default="", description="Markdown body for deep tasks")

    # Scheduling
    due_date: datetime = Field(..., description="Due date/time")
    order: int = Field(default=0, description="Manual sort order within a day")

    # Completion
    completed: bool = Field(default=False, description="Completion flag")
    completed_at: Optional[datetime] = Field(default=None, description="Completion time")

    # Metadata
    created_at: datetime = Field(default_factory=_now_utc, description="Creation time")
    updated_at: datetime = Field(default_factory=_now_utc, description="Last modification time")

    # Recurrence
    recurrence: Optional[LiteRecurrence] = Field(
        default=None, description="Repeat rule, templates only"
    )
    recurring_parent_id: Optional[str] = Field(
        default=None, description="Owning template ID, instances only"
    )
    is_recurring_instance: bool = Field(default=False, description="Occurrence of a template")

    # Generation tracking
    is_virtual: bool = Field(
        default=False, description="True if computed on demand and not persisted"
    )

    model_config = ConfigDict(use_enum_values=True)

    @model_validator(mode="after")
    def check_recurrence_roles(self) -> "LiteTask":
        """Templates and instances are mutually exclusive roles."""
        if self.is_recurring_instance:
            if self.recurrence is not None:
                raise ValueError("A recurring instance cannot carry its own recurrence rule")
            if not self.recurring_parent_id:
                raise ValueError("A recurring instance requires recurring_parent_id")
        return self

    @property
    def kind(self) -> LiteTaskKind:
        """Tag describing the task's role in a series."""
        if self.recurrence is not None:
            return LiteTaskKind.TEMPLATE
        if self.is_recurring_instance:
            return LiteTaskKind.INSTANCE
        return LiteTaskKind.SINGLE

    @property
    def is_template(self) -> bool:
        """Check if the task defines a recurring series."""
        return self.recurrence is not None

    @field_serializer(
        "due_date", "created_at", "updated_at", "completed_at", when_used="unless-none"
    )
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()


class LiteInstanceRef(BaseModel):
    """Decoded instance identifier."""

    template_id: str = Field(..., description="Owning template ID")
    date_millis: int = Field(..., description="Start-of-day timestamp in milliseconds")

    model_config = ConfigDict(frozen=True)


def generate_id() -> str:
    """Return a fresh random task ID."""
    return str(uuid.uuid4())


def _create_task(
    title: str,
    due_date: datetime,
    task_type: LiteTaskType,
    content: str,
    now: Optional[datetime],
) -> LiteTask:
    current = now or _now_utc()
    return LiteTask(
        id=generate_id(),
        title=title,
        type=task_type,
        content=content,
        due_date=due_date,
        completed=False,
        created_at=current,
        updated_at=current,
        # New tasks sort after existing ones on the same day
        order=int(current.timestamp() * 1000),
    )


def create_quick_task(title: str, due_date: datetime, now: Optional[datetime] = None) -> LiteTask:
    """Create a quick (title-only) task."""
    return _create_task(title, due_date, LiteTaskType.QUICK, "", now)


def create_deep_task(
    title: str,
    due_date: datetime,
    content: str = "",
    now: Optional[datetime] = None,
) -> LiteTask:
    """Create a deep task carrying a markdown body."""
    return _create_task(title, due_date, LiteTaskType.DEEP, content, now)
