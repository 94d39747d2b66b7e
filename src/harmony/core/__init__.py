"""Functional core - pure business logic with no I/O."""

from .dates import (
    InvalidDateError,
    add_days,
    dates_equal,
    days_in_month,
    first_weekday_of_month,
    start_of_week,
)
from .chores import (
    DueStatus,
    InvalidFrequencyError,
    RecurringTask,
    UrgencyTier,
    days_until_due,
    due_status,
    progress_fraction,
    urgency_tier,
)
from .occurrences import (
    DEFAULT_HORIZON_DAYS,
    InvalidTransitionError,
    Occurrence,
    OccurrenceStatus,
    assign,
    complete,
    project,
    unassign,
)
from .reports import TaskReport, build_task_report

__all__ = [
    # Dates
    "InvalidDateError",
    "add_days",
    "dates_equal",
    "days_in_month",
    "first_weekday_of_month",
    "start_of_week",
    # Chores
    "DueStatus",
    "InvalidFrequencyError",
    "RecurringTask",
    "UrgencyTier",
    "days_until_due",
    "due_status",
    "progress_fraction",
    "urgency_tier",
    # Occurrences
    "DEFAULT_HORIZON_DAYS",
    "InvalidTransitionError",
    "Occurrence",
    "OccurrenceStatus",
    "assign",
    "complete",
    "project",
    "unassign",
    # Reports
    "TaskReport",
    "build_task_report",
]
