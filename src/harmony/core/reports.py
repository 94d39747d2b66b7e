"""Pure activity report assembly - no I/O dependencies."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .chores import DueStatus, RecurringTask, due_status, sort_by_due
from .dates import InvalidDateError, parse_timestamp


@dataclass
class TaskReport:
    """Household chore activity at a point in time."""

    generated_at: datetime
    total: int
    overdue: list[DueStatus] = field(default_factory=list)
    due_today: list[DueStatus] = field(default_factory=list)
    completed_this_week: list[RecurringTask] = field(default_factory=list)
    completions_by_user: dict[str, int] = field(default_factory=dict)
    invalid: list[RecurringTask] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at.isoformat(),
            "total": self.total,
            "overdue": [
                {"id": s.task.id, "name": s.task.name, "days_overdue": -s.days_left}
                for s in self.overdue
            ],
            "due_today": [{"id": s.task.id, "name": s.task.name} for s in self.due_today],
            "completed_this_week": len(self.completed_this_week),
            "completions_by_user": dict(self.completions_by_user),
            "invalid": [t.id for t in self.invalid],
        }


def build_task_report(tasks: list[RecurringTask], now: datetime) -> TaskReport:
    """
    Bucket chores into overdue / due today / done this week.

    Pure function - no I/O. Chores with unreadable dates are reported as
    invalid and left out of every other bucket.
    """
    week_ago = now - timedelta(days=7)
    statuses: list[DueStatus] = []
    recent: list[RecurringTask] = []
    invalid: list[RecurringTask] = []

    for task in tasks:
        try:
            status = due_status(task, now)
        except InvalidDateError:
            invalid.append(task)
            continue
        statuses.append(status)
        if parse_timestamp(task.last_completed) >= week_ago:
            recent.append(task)

    statuses = sort_by_due(statuses)
    by_user = Counter(t.completed_by for t in tasks if t.completed_by and t not in invalid)

    return TaskReport(
        generated_at=now,
        total=len(tasks),
        overdue=[s for s in statuses if s.is_overdue],
        due_today=[s for s in statuses if s.is_due_today],
        completed_this_week=recent,
        completions_by_user=dict(sorted(by_user.items())),
        invalid=invalid,
    )


def format_report(report: TaskReport, user_names: dict[str, str] | None = None) -> str:
    """
    Render a report as plain text.

    Pure function - no I/O.
    """
    names = user_names or {}
    lines = [
        f"Total tasks: {report.total}",
        f"Overdue: {len(report.overdue)}",
        f"Due today: {len(report.due_today)}",
        f"Completed this week: {len(report.completed_this_week)}",
    ]

    if report.overdue:
        lines.append("")
        lines.append("Overdue tasks:")
        for s in report.overdue:
            days = -s.days_left
            lines.append(f"- {s.task.name} - {days} day{'' if days == 1 else 's'} overdue")

    if report.due_today:
        lines.append("")
        lines.append("Due today:")
        lines.extend(f"- {s.task.name}" for s in report.due_today)

    if report.completions_by_user:
        lines.append("")
        lines.append("Last completed by:")
        for user_id, count in report.completions_by_user.items():
            lines.append(f"- {names.get(user_id, user_id)}: {count}")

    if report.invalid:
        lines.append("")
        lines.append(f"Skipped {len(report.invalid)} task(s) with unreadable dates.")

    return "\n".join(lines)
