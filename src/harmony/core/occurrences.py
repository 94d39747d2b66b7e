"""Pure occurrence projection and lifecycle - no I/O dependencies."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum

from .chores import RecurringTask
from .dates import InvalidDateError, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 60


class InvalidTransitionError(Exception):
    """Raised when an occurrence cannot move to the requested state."""

    pass


class OccurrenceStatus(Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


def occurrence_id(task_id: str, on: date) -> str:
    """Deterministic id so re-projection of the same day collides."""
    return f"{task_id}-{on.isoformat()}"


@dataclass(frozen=True)
class Occurrence:
    """One dated instance of a recurring chore."""

    id: str
    task_id: str
    task_name: str
    date: date
    status: OccurrenceStatus = OccurrenceStatus.PENDING
    assigned_to: str | None = None

    def __post_init__(self):
        if (self.assigned_to is not None) != (self.status is OccurrenceStatus.ASSIGNED):
            raise ValueError(
                f"Occurrence {self.id}: assigned_to must be set iff status is assigned"
            )

    @classmethod
    def from_record(cls, data: dict) -> "Occurrence":
        """Create Occurrence from a stored record."""
        return cls(
            id=data["id"],
            task_id=str(data["taskId"]),
            task_name=data.get("taskName", ""),
            date=parse_timestamp(data["date"]).date(),
            status=OccurrenceStatus(data.get("status", "pending")),
            assigned_to=data.get("assignedTo"),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "taskName": self.task_name,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "assignedTo": self.assigned_to,
        }


# ============== Projection ==============


def project_task(task: RecurringTask, now: datetime, horizon_days: int) -> list[Occurrence]:
    """
    Future occurrences of one chore within (today, today + horizon].

    Raises InvalidDateError if the task's last completion is unreadable.
    """
    start = parse_timestamp(task.last_completed).date()
    today = now.date()
    end = today + timedelta(days=horizon_days)

    frequency = task.frequency_days
    if frequency < 1:
        logger.warning(f"Task {task.name!r} has frequency {frequency}; clamping to 1 day")
        frequency = 1

    step = timedelta(days=frequency)
    occurrences = []
    next_date = start + step
    # Skip straight past the already-elapsed run for long-neglected chores
    if next_date <= today:
        next_date = start + step * ((today - start).days // frequency + 1)

    while next_date <= end:
        occurrences.append(
            Occurrence(
                id=occurrence_id(task.id, next_date),
                task_id=task.id,
                task_name=task.name,
                date=next_date,
            )
        )
        next_date += step

    return occurrences


def project(
    tasks: list[RecurringTask],
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[Occurrence]:
    """
    Derive every future, in-horizon occurrence from the chore list.

    Pure function - no I/O. A task with an unreadable last completion is
    logged and skipped; the rest are still projected.
    """
    by_id: dict[str, Occurrence] = {}
    for task in tasks:
        try:
            task_occurrences = project_task(task, now, horizon_days)
        except InvalidDateError as e:
            logger.warning(f"Skipping task {task.name!r}: {e}")
            continue
        for occ in task_occurrences:
            by_id.setdefault(occ.id, occ)

    return sorted(by_id.values(), key=lambda o: (o.date, o.task_name, o.task_id))


def filter_by_date(
    occurrences: list[Occurrence],
    start_date: date,
    end_date: date | None = None,
) -> list[Occurrence]:
    """Occurrences falling within a date range (inclusive)."""
    end_date = end_date or start_date
    return [o for o in occurrences if start_date <= o.date <= end_date]


def group_by_date(occurrences: list[Occurrence]) -> dict[date, list[Occurrence]]:
    grouped: dict[date, list[Occurrence]] = {}
    for occ in occurrences:
        grouped.setdefault(occ.date, []).append(occ)
    return grouped


# ============== Lifecycle ==============


def assign(occurrence: Occurrence, user_id: str) -> Occurrence:
    """Assign to a user. Re-assigning overwrites the previous assignee."""
    if occurrence.status is OccurrenceStatus.COMPLETED:
        raise InvalidTransitionError(f"Occurrence {occurrence.id} is already completed")
    return replace(occurrence, status=OccurrenceStatus.ASSIGNED, assigned_to=user_id)


def unassign(occurrence: Occurrence) -> Occurrence:
    """Return an assigned occurrence to pending."""
    if occurrence.status is not OccurrenceStatus.ASSIGNED:
        raise InvalidTransitionError(
            f"Occurrence {occurrence.id} is {occurrence.status.value}, not assigned"
        )
    return replace(occurrence, status=OccurrenceStatus.PENDING, assigned_to=None)


def toggle_assignment(occurrence: Occurrence, user_id: str) -> Occurrence:
    """Unassign if held by this user, otherwise take it over."""
    if occurrence.status is OccurrenceStatus.ASSIGNED and occurrence.assigned_to == user_id:
        return unassign(occurrence)
    return assign(occurrence, user_id)


def complete(
    occurrence: Occurrence,
    task: RecurringTask,
    user_id: str,
    now: datetime,
    allow_from_pending: bool = True,
) -> RecurringTask:
    """
    Complete an occurrence by recording the completion on its chore.

    Returns the updated task. The occurrence itself is left untouched; the
    next projection drops it and schedules the following one.
    """
    if task.id != occurrence.task_id:
        raise InvalidTransitionError(
            f"Occurrence {occurrence.id} belongs to task {occurrence.task_id}, not {task.id}"
        )
    if occurrence.status is OccurrenceStatus.COMPLETED:
        raise InvalidTransitionError(f"Occurrence {occurrence.id} is already completed")
    if occurrence.status is OccurrenceStatus.PENDING and not allow_from_pending:
        raise InvalidTransitionError(
            f"Occurrence {occurrence.id} must be assigned before it can be completed"
        )
    return replace(task, last_completed=now, completed_by=user_id)
