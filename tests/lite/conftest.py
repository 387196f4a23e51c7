import os
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import pytest

from tempo_lite.lite_calendar_context import LiteCalendarContext
from tempo_lite.lite_models import LiteRecurrence, LiteTask

TEMPO_ENV_KEYS = [
    "TEMPO_TEST_TIME",
    "TEMPO_DEBUG",
    "TEMPO_LOG_LEVEL",
    "TEMPO_DEFAULT_TIMEZONE",
    "TEMPO_LOG_EXPANSION_STATS",
]


@pytest.fixture
def utc_context() -> LiteCalendarContext:
    """Calendar context pinned to UTC so results never depend on the host timezone."""
    return LiteCalendarContext("UTC")


@pytest.fixture
def fixed_now() -> datetime:
    """Deterministic "now" injected into completion and factory calls."""
    return datetime(2024, 1, 3, 18, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_template() -> Callable[..., LiteTask]:
    """Factory for recurring templates anchored at 2024-01-01 09:00 UTC (a Monday)."""

    def _make(
        pattern: str = "daily",
        interval: int = 1,
        days_of_week: Optional[list[int]] = None,
        end_date: Optional[datetime] = None,
        anchor: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        template_id: str = "tpl-1",
    ) -> LiteTask:
        return LiteTask(
            id=template_id,
            title="Water the plants",
            content="Balcony first",
            due_date=anchor,
            order=5,
            created_at=datetime(2023, 12, 1, tzinfo=timezone.utc),
            updated_at=datetime(2023, 12, 1, tzinfo=timezone.utc),
            recurrence=LiteRecurrence(
                pattern=pattern,
                interval=interval,
                days_of_week=days_of_week,
                end_date=end_date,
            ),
        )

    return _make


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear tempo_lite environment overrides before and after each test."""
    for key in TEMPO_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    # .env loading writes os.environ directly, outside monkeypatch
    for key in TEMPO_ENV_KEYS:
        os.environ.pop(key, None)
