"""Tests for occurrence projection and lifecycle."""

import logging
from datetime import date, datetime, timedelta

import pytest

from harmony.core.chores import RecurringTask
from harmony.core.occurrences import (
    InvalidTransitionError,
    Occurrence,
    OccurrenceStatus,
    assign,
    complete,
    filter_by_date,
    group_by_date,
    project,
    toggle_assignment,
    unassign,
)


# Fixtures
@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def make_task(now):
    """Factory for tasks completed N days before `now`."""
    def _make(task_id: str, frequency: int, days_ago: float, name: str | None = None) -> RecurringTask:
        return RecurringTask(
            id=task_id,
            name=name or f"Task {task_id}",
            frequency_days=frequency,
            last_completed=now - timedelta(days=days_ago),
        )
    return _make


@pytest.fixture
def pending(today):
    return Occurrence(
        id=f"t1-{(today + timedelta(days=1)).isoformat()}",
        task_id="t1",
        task_name="Clean toilets",
        date=today + timedelta(days=1),
    )


class TestProject:
    def test_daily_task_first_date(self, make_task, today, now):
        task = make_task("t1", 1, 2)
        occurrences = project([task], now, 60)
        # lastCompleted + 1 = yesterday, + 2 = today: neither is in the future
        assert occurrences[0].date == today + timedelta(days=1)
        assert occurrences[-1].date == today + timedelta(days=60)
        assert len(occurrences) == 60

    def test_weekly_task(self, make_task, today, now):
        occurrences = project([make_task("t2", 7, 5)], now, 60)
        dates = [o.date for o in occurrences]
        assert dates[0] == today + timedelta(days=2)
        assert dates[-1] == today + timedelta(days=58)
        assert len(dates) == 9

    def test_emitted_dates_satisfy_window_and_cadence(self, make_task, today, now):
        tasks = [
            make_task("a", 1, 2),
            make_task("b", 3, 2),
            make_task("c", 7, 5),
            make_task("d", 5, 40),
            make_task("e", 11, 0),
        ]
        horizon = 45
        occurrences = project(tasks, now, horizon)
        by_task = {t.id: t for t in tasks}

        assert occurrences
        for occ in occurrences:
            start = by_task[occ.task_id].completed_at().date()
            frequency = by_task[occ.task_id].frequency_days
            assert occ.date > today
            assert occ.date <= today + timedelta(days=horizon)
            assert (occ.date - start).days % frequency == 0

    def test_horizon_end_is_inclusive_and_never_exceeded(self, make_task, today, now):
        occurrences = project([make_task("t1", 10, 0)], now, 20)
        assert [o.date for o in occurrences] == [
            today + timedelta(days=10),
            today + timedelta(days=20),
        ]

    def test_long_neglected_task_starts_after_today(self, now, today):
        task = RecurringTask(id="old", name="Old", frequency_days=3, last_completed=datetime(2020, 1, 1))
        occurrences = project([task], now, 30)

        # Smallest start + k*3 strictly after today
        expected = date(2020, 1, 1)
        while expected <= today:
            expected += timedelta(days=3)
        assert occurrences[0].date == expected
        assert all(b.date - a.date == timedelta(days=3) for a, b in zip(occurrences, occurrences[1:]))

    def test_future_last_completed(self, now, today):
        task = RecurringTask(
            id="t1", name="Planned", frequency_days=3, last_completed=now + timedelta(days=5)
        )
        occurrences = project([task], now, 60)
        assert occurrences[0].date == today + timedelta(days=8)

    def test_time_of_day_ignored(self):
        now = datetime(2025, 1, 15, 0, 1)
        task = RecurringTask(
            id="t1", name="Late", frequency_days=1, last_completed=datetime(2025, 1, 14, 23, 59)
        )
        occurrences = project([task], now, 5)
        assert occurrences[0].date == date(2025, 1, 16)

    def test_idempotent(self, make_task, now):
        tasks = [make_task("a", 3, 2), make_task("b", 7, 5)]
        first = project(tasks, now, 60)
        second = project(tasks, now, 60)
        assert first == second
        assert [o.id for o in first] == [o.id for o in second]

    def test_deterministic_ids(self, make_task, now, today):
        occurrences = project([make_task("t1", 1, 0)], now, 3)
        assert occurrences[0].id == f"t1-{(today + timedelta(days=1)).isoformat()}"

    def test_duplicate_task_entries_collapse(self, make_task, now):
        task = make_task("t1", 2, 0)
        assert project([task, task], now, 10) == project([task], now, 10)

    def test_pending_and_unassigned(self, make_task, now):
        for occ in project([make_task("t1", 2, 0)], now, 10):
            assert occ.status is OccurrenceStatus.PENDING
            assert occ.assigned_to is None

    def test_sorted_by_date(self, make_task, now):
        occurrences = project([make_task("a", 5, 0), make_task("b", 2, 0)], now, 20)
        dates = [o.date for o in occurrences]
        assert dates == sorted(dates)

    def test_unparseable_date_skipped(self, make_task, now, caplog):
        broken = RecurringTask(id="bad", name="Broken", frequency_days=3, last_completed="not a date")
        with caplog.at_level(logging.WARNING):
            occurrences = project([broken, make_task("ok", 3, 0)], now, 30)

        assert occurrences
        assert all(o.task_id == "ok" for o in occurrences)
        assert "Broken" in caplog.text

    def test_only_unparseable_gives_nothing(self, now):
        broken = RecurringTask(id="bad", name="Broken", frequency_days=3, last_completed=None)
        assert project([broken], now, 60) == []

    @pytest.mark.parametrize("frequency", [0, -3])
    def test_non_positive_frequency_clamped(self, now, frequency):
        task = RecurringTask(id="t1", name="Loop", frequency_days=frequency, last_completed=now)
        occurrences = project([task], now, 10)
        assert len(occurrences) == 10

    def test_empty(self, now):
        assert project([], now) == []


class TestFiltering:
    def test_filter_by_date_range(self, make_task, now, today):
        occurrences = project([make_task("t1", 1, 0)], now, 30)
        week = filter_by_date(occurrences, today, today + timedelta(days=6))
        assert len(week) == 6

    def test_group_by_date(self, make_task, now, today):
        occurrences = project([make_task("a", 1, 0), make_task("b", 1, 0)], now, 2)
        grouped = group_by_date(occurrences)
        assert len(grouped[today + timedelta(days=1)]) == 2


class TestOccurrence:
    def test_assigned_requires_user(self, today):
        with pytest.raises(ValueError):
            Occurrence(id="x", task_id="t1", task_name="x", date=today, status=OccurrenceStatus.ASSIGNED)

    def test_pending_rejects_user(self, today):
        with pytest.raises(ValueError):
            Occurrence(id="x", task_id="t1", task_name="x", date=today, assigned_to="user_1")

    def test_record_roundtrip(self, pending):
        assigned = assign(pending, "user_2")
        assert Occurrence.from_record(assigned.to_record()) == assigned


class TestLifecycle:
    def test_assign(self, pending):
        assigned = assign(pending, "user_1")
        assert assigned.status is OccurrenceStatus.ASSIGNED
        assert assigned.assigned_to == "user_1"
        assert pending.status is OccurrenceStatus.PENDING

    def test_reassign_last_writer_wins(self, pending):
        reassigned = assign(assign(pending, "user_1"), "user_2")
        assert reassigned.assigned_to == "user_2"

    def test_assign_then_unassign_restores(self, pending):
        assert unassign(assign(pending, "user_1")) == pending

    def test_unassign_pending_rejected(self, pending):
        with pytest.raises(InvalidTransitionError):
            unassign(pending)

    def test_assign_completed_rejected(self, today):
        done = Occurrence(
            id="x", task_id="t1", task_name="x", date=today, status=OccurrenceStatus.COMPLETED
        )
        with pytest.raises(InvalidTransitionError):
            assign(done, "user_1")

    def test_toggle_takes_then_releases(self, pending):
        taken = toggle_assignment(pending, "user_1")
        assert taken.assigned_to == "user_1"
        assert toggle_assignment(taken, "user_1") == pending

    def test_toggle_takes_over_from_other_user(self, pending):
        taken = toggle_assignment(assign(pending, "user_2"), "user_1")
        assert taken.assigned_to == "user_1"


class TestComplete:
    @pytest.fixture
    def task(self, now):
        return RecurringTask(
            id="t1", name="Clean toilets", frequency_days=3, last_completed=now - timedelta(days=2)
        )

    def test_updates_owning_task(self, task, pending, now):
        updated = complete(assign(pending, "user_1"), task, "user_1", now)
        assert updated.last_completed == now
        assert updated.completed_by == "user_1"
        assert task.completed_by is None

    def test_occurrence_left_untouched(self, task, pending, now):
        assigned = assign(pending, "user_1")
        complete(assigned, task, "user_1", now)
        assert assigned.status is OccurrenceStatus.ASSIGNED

    def test_direct_from_pending_allowed_by_default(self, task, pending, now):
        assert complete(pending, task, "user_2", now).completed_by == "user_2"

    def test_direct_from_pending_can_be_forbidden(self, task, pending, now):
        with pytest.raises(InvalidTransitionError):
            complete(pending, task, "user_2", now, allow_from_pending=False)

    def test_wrong_task_rejected(self, pending, now):
        other = RecurringTask(id="t2", name="Other", frequency_days=3, last_completed=now)
        with pytest.raises(InvalidTransitionError):
            complete(pending, other, "user_1", now)

    def test_completed_is_terminal(self, task, today, now):
        done = Occurrence(
            id="t1-x", task_id="t1", task_name="x", date=today, status=OccurrenceStatus.COMPLETED
        )
        with pytest.raises(InvalidTransitionError):
            complete(done, task, "user_1", now)

    def test_next_projection_moves_schedule(self, task, now, today):
        before = project([task], now, 60)
        first = before[0]
        assert first.date == today + timedelta(days=1)

        updated = complete(assign(first, "user_1"), task, "user_1", now)
        after = project([updated], now, 60)

        assert first.id not in {o.id for o in after}
        assert after[0].date == today + timedelta(days=3)
