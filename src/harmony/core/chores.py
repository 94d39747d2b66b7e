"""Pure recurring-chore logic - no I/O dependencies."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from .dates import InvalidDateError, parse_timestamp


class InvalidFrequencyError(ValueError):
    """Raised when a chore cadence is not a positive whole number of days."""

    pass


class UrgencyTier(Enum):
    """Coarse due-status bucket used for styling and reports."""

    CRITICAL = "critical"  # Overdue or due today
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class RecurringTask:
    """A household chore that repeats every N days."""

    id: str
    name: str
    frequency_days: int
    last_completed: datetime | str | None
    completed_by: str | None = None

    def completed_at(self) -> datetime:
        """Last completion as a datetime. Raises InvalidDateError if unreadable."""
        return parse_timestamp(self.last_completed)

    def next_due(self) -> datetime:
        """When the chore falls due next."""
        return self.completed_at() + timedelta(days=self.frequency_days)

    @classmethod
    def from_record(cls, data: dict) -> "RecurringTask":
        """Create RecurringTask from a stored record."""
        raw = data.get("lastCompleted")
        try:
            last_completed = parse_timestamp(raw)
        except InvalidDateError:
            # Keep the raw value; projection skips it
            last_completed = raw
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            frequency_days=int(data.get("frequency", 1)),
            last_completed=last_completed,
            completed_by=data.get("completedBy"),
        )

    def to_record(self) -> dict:
        last = self.last_completed
        return {
            "id": self.id,
            "name": self.name,
            "frequency": self.frequency_days,
            "lastCompleted": last.isoformat() if isinstance(last, datetime) else last,
            "completedBy": self.completed_by,
        }


@dataclass
class DueStatus:
    """Timer state of a chore at a point in time."""

    task: RecurringTask
    days_left: int
    tier: UrgencyTier
    fraction: float
    next_due: datetime

    @property
    def is_overdue(self) -> bool:
        return self.days_left < 0

    @property
    def is_due_today(self) -> bool:
        return self.days_left == 0

    def label(self) -> str:
        return format_due_label(self.days_left)


def validate_frequency(value: object) -> int:
    """Check a cadence at the task-creation boundary."""
    if isinstance(value, bool):
        raise InvalidFrequencyError(f"Frequency must be a whole number of days, got {value!r}")
    try:
        frequency = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidFrequencyError(f"Frequency must be a whole number of days, got {value!r}") from e
    if frequency != value and not isinstance(value, str):
        raise InvalidFrequencyError(f"Frequency must be a whole number of days, got {value!r}")
    if frequency < 1:
        raise InvalidFrequencyError(f"Frequency must be at least 1 day, got {frequency}")
    return frequency


def first_due_backdate(first_due: date | datetime, frequency_days: int) -> datetime:
    """
    Backdate last completion so the first occurrence lands on `first_due`.
    """
    return parse_timestamp(first_due) - timedelta(days=frequency_days)


def days_until_due(last_completed: object, frequency_days: int, now: datetime) -> int:
    """
    Whole days until the chore is due again.

    Negative = overdue, zero = due today. Raises InvalidDateError if
    last_completed is unreadable.
    """
    next_due = parse_timestamp(last_completed) + timedelta(days=frequency_days)
    return math.ceil((next_due - now) / timedelta(days=1))


def urgency_tier(days_left: int) -> UrgencyTier:
    """Bucket days remaining into an urgency tier."""
    if days_left <= 0:
        return UrgencyTier.CRITICAL
    elif days_left <= 1:
        return UrgencyTier.HIGH
    elif days_left <= 2:
        return UrgencyTier.MEDIUM
    else:
        return UrgencyTier.LOW


def progress_fraction(days_left: int, frequency_days: int) -> float:
    """Remaining-time ratio, clamped to [0, 1]."""
    if frequency_days <= 0:
        return 0.0
    return max(0.0, min(1.0, days_left / frequency_days))


def due_status(task: RecurringTask, now: datetime) -> DueStatus:
    """
    Compute the timer state for a chore.

    Pure function - no I/O. Raises InvalidDateError for unreadable dates.
    """
    days_left = days_until_due(task.last_completed, task.frequency_days, now)
    return DueStatus(
        task=task,
        days_left=days_left,
        tier=urgency_tier(days_left),
        fraction=progress_fraction(days_left, task.frequency_days),
        next_due=task.next_due(),
    )


def format_due_label(days_left: int) -> str:
    """Human-readable countdown."""
    if days_left > 0:
        return f"{days_left} day{'' if days_left == 1 else 's'} left"
    if days_left == 0:
        return "Due today!"
    overdue = -days_left
    return f"{overdue} day{'' if overdue == 1 else 's'} overdue"


def sort_by_due(statuses: list[DueStatus]) -> list[DueStatus]:
    """Most urgent first, then by name."""
    return sorted(statuses, key=lambda s: (s.days_left, s.task.name.lower()))
