"""Shared workflow layer between the CLI and storage.

ChoreBoard owns the rule that every change to the chore list is followed by
a full regeneration of the occurrence set.
"""

import logging
from datetime import date, datetime, timedelta

from .adapters.json_records import (
    EVENTS_KEY,
    EVENTS_META_KEY,
    TASKS_KEY,
    JsonOccurrenceStore,
    JsonTaskStore,
)
from .adapters.json_store import JsonKeyValueStore
from .adapters.system_clock import SystemClock
from .adapters.users import JsonUserDirectory, USERS_KEY
from .config import Config, resolve_data_dir
from .core.chores import (
    DueStatus,
    RecurringTask,
    due_status,
    first_due_backdate,
    sort_by_due,
    validate_frequency,
)
from .core.dates import InvalidDateError
from .core.occurrences import (
    DEFAULT_HORIZON_DAYS,
    Occurrence,
    assign,
    complete,
    filter_by_date,
    project,
    toggle_assignment,
    unassign,
)
from .core.reports import TaskReport, build_task_report
from .ports.clock import Clock
from .ports.occurrence_sink import OccurrenceSink
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)

# (name, every N days, days since last done) for a fresh household
DEMO_TASKS = [
    ("Clean toilets", 3, 2),
    ("Take out recycling", 7, 5),
    ("Clean litter box", 1, 1),
]


class TaskNotFoundError(KeyError):
    """Raised when a chore id is not in the task store."""

    pass


class OccurrenceNotFoundError(KeyError):
    """Raised when an occurrence id is not in the current projection."""

    pass


class ChoreBoard:
    """
    Chores plus their projected calendar.

    Any add/update/delete of a chore discards the occurrence set and
    re-projects it from scratch. Assignment state on an occurrence survives
    only until the next regeneration.
    """

    def __init__(
        self,
        task_store: TaskStore,
        occurrence_sink: OccurrenceSink,
        clock: Clock | None = None,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        allow_direct_complete: bool = True,
    ):
        self.task_store = task_store
        self.occurrence_sink = occurrence_sink
        self.clock = clock or SystemClock()
        self.horizon_days = horizon_days
        self.allow_direct_complete = allow_direct_complete
        self.projection_version = 0

    # ============== Chores ==============

    def tasks(self) -> list[RecurringTask]:
        return self.task_store.list()

    def get_task(self, task_id: str) -> RecurringTask:
        for task in self.task_store.list():
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def add_task(
        self,
        name: str,
        frequency_days: object,
        first_due: date | None = None,
    ) -> RecurringTask:
        """
        Create a chore and regenerate.

        With `first_due`, the chore is backdated so its first occurrence
        lands on that day; otherwise it counts as just done.
        """
        name = name.strip()
        if not name:
            raise ValueError("Task name cannot be empty")
        frequency = validate_frequency(frequency_days)
        if first_due is not None:
            last_completed = first_due_backdate(first_due, frequency)
        else:
            last_completed = self.clock.now()

        task = RecurringTask(
            id="",
            name=name,
            frequency_days=frequency,
            last_completed=last_completed,
        )
        task.id = self.task_store.add(task)
        self.regenerate()
        return task

    def update_task(self, task: RecurringTask) -> None:
        validate_frequency(task.frequency_days)
        self.get_task(task.id)
        self.task_store.update(task)
        self.regenerate()

    def delete_task(self, task_id: str) -> None:
        self.get_task(task_id)
        self.task_store.delete(task_id)
        self.regenerate()

    def seed_demo_tasks(self) -> list[RecurringTask]:
        """Add the demo chores to an empty board. Does nothing otherwise."""
        if self.task_store.list():
            return []
        now = self.clock.now()
        seeded = []
        for name, frequency, days_ago in DEMO_TASKS:
            task = RecurringTask(
                id="",
                name=name,
                frequency_days=frequency,
                last_completed=now - timedelta(days=days_ago),
            )
            task.id = self.task_store.add(task)
            seeded.append(task)
        self.regenerate()
        logger.info(f"Seeded {len(seeded)} demo chores")
        return seeded

    # ============== Occurrences ==============

    def regenerate(self) -> list[Occurrence]:
        """Re-project every occurrence and replace the stored set."""
        now = self.clock.now()
        occurrences = project(self.task_store.list(), now, self.horizon_days)
        self.occurrence_sink.replace_all(occurrences)
        self.occurrence_sink.record_projection(now.date(), self.horizon_days)
        self.projection_version += 1
        logger.debug(
            f"Regenerated {len(occurrences)} occurrences "
            f"(version {self.projection_version}, horizon {self.horizon_days}d)"
        )
        return occurrences

    def refresh_if_stale(self) -> bool:
        """
        Regenerate when the stored set no longer matches today.

        Stale means the last full projection ran on another day or with a
        different horizon, or was never recorded. Both a past occurrence and
        a day newly inside the horizon are caught this way. An empty board
        with no chores is never stale. Returns True if a regeneration ran.
        """
        today = self.clock.now().date()
        if self.occurrence_sink.last_projection() == (today, self.horizon_days):
            return False
        if not self.occurrence_sink.list() and not self.task_store.list():
            return False
        self.regenerate()
        return True

    def occurrences(self, start: date | None = None, end: date | None = None) -> list[Occurrence]:
        """Current occurrence set, optionally limited to a date range."""
        occurrences = self.occurrence_sink.list()
        if start is None:
            return occurrences
        return filter_by_date(occurrences, start, end)

    def get_occurrence(self, occurrence_id: str) -> Occurrence:
        for occ in self.occurrence_sink.list():
            if occ.id == occurrence_id:
                return occ
        raise OccurrenceNotFoundError(occurrence_id)

    def _store_occurrence(self, updated: Occurrence) -> Occurrence:
        occurrences = [updated if o.id == updated.id else o for o in self.occurrence_sink.list()]
        self.occurrence_sink.replace_all(occurrences)
        return updated

    def assign(self, occurrence_id: str, user_id: str) -> Occurrence:
        return self._store_occurrence(assign(self.get_occurrence(occurrence_id), user_id))

    def unassign(self, occurrence_id: str) -> Occurrence:
        return self._store_occurrence(unassign(self.get_occurrence(occurrence_id)))

    def toggle(self, occurrence_id: str, user_id: str) -> Occurrence:
        return self._store_occurrence(toggle_assignment(self.get_occurrence(occurrence_id), user_id))

    def complete(self, occurrence_id: str, user_id: str) -> RecurringTask:
        """
        Record completion on the owning chore and regenerate.

        The completed occurrence drops out of the new projection and the
        next one appears a full cycle later.
        """
        occ = self.get_occurrence(occurrence_id)
        task = self.get_task(occ.task_id)
        updated = complete(
            occ,
            task,
            user_id,
            now=self.clock.now(),
            allow_from_pending=self.allow_direct_complete,
        )
        self.task_store.update(updated)
        self.regenerate()
        return updated

    # ============== Reporting ==============

    def due_statuses(self, now: datetime | None = None) -> list[DueStatus]:
        """Timer state of every readable chore, most urgent first."""
        now = now or self.clock.now()
        statuses = []
        for task in self.task_store.list():
            try:
                statuses.append(due_status(task, now))
            except InvalidDateError as e:
                logger.warning(f"No due status for task {task.name!r}: {e}")
        return sort_by_due(statuses)

    def report(self, now: datetime | None = None) -> TaskReport:
        return build_task_report(self.task_store.list(), now or self.clock.now())


def get_storage(config: Config) -> JsonKeyValueStore:
    """Open storage, clearing it first if any household document is corrupt."""
    kv = JsonKeyValueStore(resolve_data_dir(config))
    kv.clear_corrupted([TASKS_KEY, EVENTS_KEY, EVENTS_META_KEY])
    return kv


def get_board(config: Config, kv: JsonKeyValueStore | None = None, clock: Clock | None = None) -> ChoreBoard:
    """Build a ChoreBoard over JSON storage from config."""
    kv = kv or get_storage(config)
    return ChoreBoard(
        task_store=JsonTaskStore(kv),
        occurrence_sink=JsonOccurrenceStore(kv),
        clock=clock or SystemClock(),
        horizon_days=config.horizon_days,
        allow_direct_complete=config.allow_direct_complete,
    )


def get_users(config: Config, kv: JsonKeyValueStore | None = None) -> JsonUserDirectory:
    return JsonUserDirectory(kv or get_storage(config), USERS_KEY)
