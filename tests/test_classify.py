"""Tests for date-based task classification."""

import itertools
from dataclasses import replace
from datetime import date, timedelta

import pytest

from taskcal.core.classify import (
    TaskSummary,
    days_until_due,
    filter_active_periods,
    filter_due_soon,
    filter_overdue,
    is_active_period,
    is_due_soon,
    is_overdue,
    sort_by_due,
    summarize,
    tasks_in_range,
    tasks_on_date,
)
from taskcal.core.tasks import Priority, Task, TaskType


def make_task(task_id="1", task_type=TaskType.SINGLE, start="2024-06-01", due=None, end=None, **kwargs):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        start_date=start,
        task_type=task_type,
        due_date=due,
        end_date=end,
        **kwargs,
    )


@pytest.fixture
def today():
    return date(2024, 6, 2)


@pytest.fixture
def report():
    """Single task due 2024-06-03."""
    return make_task("report", start="2024-06-01", due="2024-06-03")


@pytest.fixture
def vacation():
    """Period task spanning 2024-06-01..2024-06-10."""
    return make_task("vacation", TaskType.PERIOD, start="2024-06-01", end="2024-06-10")


@pytest.fixture
def sample_tasks(vacation):
    return [
        make_task("a", start="2024-06-01", due="2024-05-30", priority=Priority.LOW),
        make_task("b", start="2024-06-02", due="2024-06-02", priority=Priority.HIGH),
        make_task("c", start="2024-06-02", due="2024-06-05"),
        make_task("d", start="2024-06-02", due="2024-06-06"),
        make_task("e", start="2024-06-02", due="2024-05-01", completed=True),
        make_task("f", start="2024-06-03"),
        vacation,
    ]


class TestScenarios:
    def test_due_soon_before_deadline(self, report):
        assert is_due_soon(report, date(2024, 6, 2)) is True
        assert is_overdue(report, date(2024, 6, 2)) is False

    def test_overdue_after_deadline(self, report):
        assert is_overdue(report, date(2024, 6, 5)) is True
        assert is_due_soon(report, date(2024, 6, 5)) is False

    def test_active_period_boundary(self, vacation):
        assert is_active_period(vacation, date(2024, 6, 10)) is True
        assert is_active_period(vacation, date(2024, 6, 11)) is False

    def test_tasks_on_date_single_and_period(self):
        single = make_task("s", start="2024-06-01")
        period = make_task("p", TaskType.PERIOD, start="2024-05-30", end="2024-06-05")
        assert tasks_on_date([single, period], date(2024, 6, 1)) == [single, period]


class TestIsOverdue:
    def test_deadline_today_is_not_overdue(self, report):
        assert is_overdue(report, date(2024, 6, 3)) is False

    def test_no_deadline_never_overdue(self):
        assert is_overdue(make_task(), date(2030, 1, 1)) is False

    def test_period_never_overdue(self, vacation):
        assert is_overdue(vacation, date(2030, 1, 1)) is False

    def test_stored_period_with_stray_deadline(self):
        task = Task.from_record(
            {
                "id": "p",
                "title": "Trip",
                "taskType": "period",
                "startDate": "2024-06-01",
                "endDate": "2024-06-10",
                "dueDate": "2024-06-02",
            }
        )
        assert task.due_date is None
        assert is_overdue(task, "2024-06-05") is False
        assert is_due_soon(task, "2024-06-01") is False
        assert summarize([task], "2024-06-05").overdue_count == 0

    def test_period_deadline_field_is_ignored(self, vacation):
        stray = replace(vacation, due_date="2024-06-02")
        assert is_overdue(stray, "2024-06-05") is False
        assert is_due_soon(stray, "2024-06-01") is False

    def test_unparseable_due_date(self):
        assert is_overdue(make_task(due="soon"), date(2030, 1, 1)) is False

    def test_accepts_string_reference(self, report):
        assert is_overdue(report, "2024-06-04") is True


class TestIsDueSoon:
    @pytest.mark.parametrize("offset,expected", [(-1, False), (0, True), (3, True), (4, False)])
    def test_window(self, today, offset, expected):
        task = make_task(due=(today + timedelta(days=offset)).isoformat())
        assert is_due_soon(task, today) is expected

    def test_custom_window(self, today):
        task = make_task(due=(today + timedelta(days=6)).isoformat())
        assert is_due_soon(task, today, days=7) is True

    def test_time_of_day_is_ignored(self):
        task = make_task(due="2024-06-03T23:30:00Z")
        assert is_due_soon(task, "2024-06-03T01:00:00") is True
        assert days_until_due(task, date(2024, 6, 3)) == 0


class TestIsActivePeriod:
    def test_single_is_never_active(self, report):
        assert is_active_period(report, date(2024, 6, 2)) is False

    def test_before_start(self, vacation):
        assert is_active_period(vacation, date(2024, 5, 31)) is False

    def test_missing_end_date(self):
        task = make_task(task_type=TaskType.PERIOD, end=None)
        assert is_active_period(task, date(2024, 6, 1)) is False

    def test_malformed_end_date(self):
        task = make_task(task_type=TaskType.PERIOD, end="2024-06-31")
        assert is_active_period(task, date(2024, 6, 1)) is False


class TestInvariants:
    def test_overdue_and_due_soon_are_exclusive(self, sample_tasks):
        start = date(2024, 5, 25)
        for task in sample_tasks:
            for offset in range(20):
                day = start + timedelta(days=offset)
                assert not (is_overdue(task, day) and is_due_soon(task, day))

    def test_completed_never_matches(self, sample_tasks):
        for task in sample_tasks:
            done = replace(task, completed=True)
            for offset in range(-10, 10):
                day = date(2024, 6, 2) + timedelta(days=offset)
                assert not is_overdue(done, day)
                assert not is_due_soon(done, day)
                assert not is_active_period(done, day)

    def test_tasks_on_date_ignores_input_order(self, sample_tasks):
        expected = {t.id for t in tasks_on_date(sample_tasks, "2024-06-02")}
        for perm in itertools.permutations(sample_tasks):
            assert {t.id for t in tasks_on_date(list(perm), "2024-06-02")} == expected


class TestTasksOnDate:
    def test_keeps_input_order(self, sample_tasks):
        result = tasks_on_date(sample_tasks, date(2024, 6, 2))
        assert [t.id for t in result] == ["b", "c", "d", "e", "vacation"]

    def test_excludes_unparseable(self):
        bad = make_task("bad", start="June 1st")
        good = make_task("good")
        assert tasks_on_date([bad, good], "2024-06-01") == [good]

    def test_period_without_end_matches_start_day(self):
        task = make_task(task_type=TaskType.PERIOD, start="2024-06-01", end=None)
        assert tasks_on_date([task], "2024-06-01") == [task]
        assert tasks_on_date([task], "2024-06-02") == []

    def test_invalid_query_date(self, sample_tasks):
        assert tasks_on_date(sample_tasks, "nope") == []


class TestTasksInRange:
    @pytest.fixture
    def periods(self):
        return [
            make_task("may", TaskType.PERIOD, start="2024-05-01", end="2024-05-31"),
            make_task("june", TaskType.PERIOD, start="2024-06-01", end="2024-06-30"),
            make_task("summer", TaskType.PERIOD, start="2024-06-15", end="2024-08-31"),
            make_task("single", start="2024-06-10", due="2024-06-12"),
        ]

    def test_closed_interval_overlap(self, periods):
        result = tasks_in_range(periods, "2024-05-31", "2024-06-01")
        assert [t.id for t in result] == ["may", "june"]

    def test_only_period_tasks(self, periods):
        result = tasks_in_range(periods, "2024-06-10", "2024-06-12")
        assert [t.id for t in result] == ["june"]

    def test_reversed_bounds_are_swapped(self, periods):
        assert tasks_in_range(periods, "2024-07-01", "2024-06-20") == tasks_in_range(
            periods, "2024-06-20", "2024-07-01"
        )

    def test_no_overlap(self, periods):
        assert tasks_in_range(periods, "2025-01-01", "2025-01-31") == []


class TestFilters:
    def test_filter_overdue(self, sample_tasks, today):
        assert [t.id for t in filter_overdue(sample_tasks, today)] == ["a"]

    def test_filter_due_soon(self, sample_tasks, today):
        assert [t.id for t in filter_due_soon(sample_tasks, today)] == ["b", "c"]

    def test_filter_active_periods(self, sample_tasks, today):
        assert [t.id for t in filter_active_periods(sample_tasks, today)] == ["vacation"]


class TestSortByDue:
    def test_deadline_then_priority(self):
        tasks = [
            make_task("none"),
            make_task("later", due="2024-06-09"),
            make_task("low", due="2024-06-03", priority=Priority.LOW),
            make_task("high", due="2024-06-03", priority=Priority.HIGH),
            make_task("period", TaskType.PERIOD, end="2024-06-05"),
        ]
        assert [t.id for t in sort_by_due(tasks)] == ["high", "low", "period", "later", "none"]


class TestSummarize:
    def test_counts(self, sample_tasks, today):
        assert summarize(sample_tasks, today) == TaskSummary(
            overdue_count=1,
            due_soon_count=2,
            active_period_count=1,
            completed_count=1,
        )

    def test_recomputes_each_call(self, sample_tasks, today):
        first = summarize(sample_tasks, today)
        sample_tasks.append(make_task("g", due="2024-06-01"))
        assert summarize(sample_tasks, today).overdue_count == first.overdue_count + 1

    def test_to_dict(self):
        summary = TaskSummary(1, 2, 3, 4)
        assert summary.to_dict() == {
            "overdueCount": 1,
            "dueSoonCount": 2,
            "activePeriodCount": 3,
            "completedCount": 4,
        }

    def test_empty(self, today):
        assert summarize([], today) == TaskSummary(0, 0, 0, 0)
