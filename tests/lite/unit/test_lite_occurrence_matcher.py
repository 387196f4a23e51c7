"""Unit tests for tempo_lite.lite_occurrence_matcher."""

from datetime import date, datetime, timezone

import pytest

from tempo_lite.lite_calendar_context import LiteCalendarContext
from tempo_lite.lite_models import LiteRecurrence, LiteTask
from tempo_lite.lite_occurrence_matcher import matches_pattern, should_occur_on

pytestmark = pytest.mark.unit


class TestShouldOccurOn:
    """Tests for should_occur_on guards."""

    def test_task_without_rule_never_occurs(self, utc_context):
        task = LiteTask(id="t1", title="Once", due_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert not should_occur_on(task, date(2024, 1, 1), utc_context)

    def test_anchor_day_always_matches(self, make_template, utc_context):
        template = make_template(pattern="monthly", interval=5)
        assert should_occur_on(template, date(2024, 1, 1), utc_context)

    def test_day_before_anchor_never_matches(self, make_template, utc_context):
        template = make_template()
        assert not should_occur_on(template, date(2023, 12, 31), utc_context)

    def test_end_date_is_inclusive(self, make_template, utc_context):
        template = make_template(end_date=datetime(2024, 1, 10, 23, 0, tzinfo=timezone.utc))
        assert should_occur_on(template, date(2024, 1, 10), utc_context)
        assert not should_occur_on(template, date(2024, 1, 11), utc_context)

    def test_accepts_datetimes_and_millis(self, make_template, utc_context):
        template = make_template(interval=2)
        assert should_occur_on(template, datetime(2024, 1, 3, 22, 15, tzinfo=timezone.utc), utc_context)
        # 2024-01-03T00:00:00Z
        assert should_occur_on(template, 1704240000000, utc_context)

    def test_day_boundaries_follow_context_timezone(self, make_template):
        # 09:00 UTC on Jan 1 is 04:00 in New York: the anchor day is the same
        template = make_template(interval=2)
        ny = LiteCalendarContext("America/New_York")
        # 02:00 UTC on Jan 4 is still Jan 3 in New York
        assert should_occur_on(template, datetime(2024, 1, 4, 2, 0, tzinfo=timezone.utc), ny)
        assert not should_occur_on(template, datetime(2024, 1, 4, 2, 0, tzinfo=timezone.utc))

    def test_default_context_is_utc(self, make_template):
        template = make_template()
        assert should_occur_on(template, date(2024, 1, 2))


class TestMatchesPattern:
    """Tests for the per-pattern modulo checks."""

    START = date(2024, 1, 1)  # Monday

    def _rule(self, pattern, interval=1, days_of_week=None):
        return LiteRecurrence(pattern=pattern, interval=interval, days_of_week=days_of_week)

    def test_never_matches_on_or_before_start(self):
        rule = self._rule("daily")
        assert not matches_pattern(rule, self.START, self.START)
        assert not matches_pattern(rule, self.START, date(2023, 12, 30))

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 1, 4), True),
            (date(2024, 1, 5), False),
            (date(2024, 1, 7), True),
        ],
    )
    def test_daily_interval(self, day, expected):
        assert matches_pattern(self._rule("daily", 3), self.START, day) is expected

    def test_weekly_without_days_requires_same_weekday(self):
        rule = self._rule("weekly", 2)
        assert matches_pattern(rule, self.START, date(2024, 1, 15))
        assert not matches_pattern(rule, self.START, date(2024, 1, 8))
        assert not matches_pattern(rule, self.START, date(2024, 1, 16))

    def test_weekly_days_interval_one_matches_any_listed_day(self):
        rule = self._rule("weekly", 1, [2, 4])
        assert matches_pattern(rule, self.START, date(2024, 1, 2))
        assert matches_pattern(rule, self.START, date(2024, 1, 11))
        assert not matches_pattern(rule, self.START, date(2024, 1, 3))

    def test_weekly_days_with_interval_uses_blocks_from_start(self):
        rule = self._rule("weekly", 2, [1, 3])
        assert matches_pattern(rule, self.START, date(2024, 1, 3))
        # Jan 8 and Jan 10 fall in block 1, which is inactive
        assert not matches_pattern(rule, self.START, date(2024, 1, 8))
        assert not matches_pattern(rule, self.START, date(2024, 1, 10))
        assert matches_pattern(rule, self.START, date(2024, 1, 15))

    def test_empty_weekday_list_matches_as_plain_weekly(self):
        rule = LiteRecurrence.model_construct(pattern="weekly", interval=1, days_of_week=[])
        assert matches_pattern(rule, self.START, date(2024, 1, 8))
        assert not matches_pattern(rule, self.START, date(2024, 1, 9))

    def test_monthly_requires_same_day_of_month(self):
        rule = self._rule("monthly")
        start = date(2024, 1, 31)
        assert not matches_pattern(rule, start, date(2024, 2, 29))
        assert matches_pattern(rule, start, date(2024, 3, 31))
        assert not matches_pattern(rule, start, date(2024, 4, 30))

    def test_monthly_interval(self):
        rule = self._rule("monthly", 2)
        assert matches_pattern(rule, self.START, date(2024, 3, 1))
        assert not matches_pattern(rule, self.START, date(2024, 2, 1))

    def test_yearly_leap_day_only_in_leap_years(self):
        rule = self._rule("yearly")
        start = date(2024, 2, 29)
        assert not matches_pattern(rule, start, date(2025, 2, 28))
        assert matches_pattern(rule, start, date(2028, 2, 29))

    def test_yearly_interval(self):
        rule = self._rule("yearly", 2)
        assert matches_pattern(rule, self.START, date(2026, 1, 1))
        assert not matches_pattern(rule, self.START, date(2025, 1, 1))

    def test_unknown_pattern_never_matches(self):
        rule = LiteRecurrence.model_construct(pattern="hourly", interval=1, days_of_week=None)
        assert not matches_pattern(rule, self.START, date(2024, 1, 2))
