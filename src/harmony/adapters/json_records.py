"""Chore and occurrence stores backed by JSON key-value storage."""

import logging
import uuid
from datetime import date

from harmony.core.chores import RecurringTask
from harmony.core.occurrences import Occurrence

from .json_store import JsonKeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "household-tasks"
EVENTS_KEY = "household-events"
EVENTS_META_KEY = "household-events-meta"


def new_id() -> str:
    """Collision-resistant record id."""
    return uuid.uuid4().hex


class JsonTaskStore:
    """
    Recurring chores stored as one JSON list.

    Implements TaskStore protocol.
    """

    def __init__(self, kv: JsonKeyValueStore, key: str = TASKS_KEY):
        self.kv = kv
        self.key = key

    def _records(self) -> list[dict]:
        return self.kv.get(self.key, [])

    def get(self, task_id: str) -> RecurringTask | None:
        for task in self.list():
            if task.id == task_id:
                return task
        return None

    def add(self, task: RecurringTask) -> str:
        """Store a new chore, assigning an id if it has none."""
        if not task.id:
            task.id = new_id()
        records = self._records()
        records.append(task.to_record())
        self.kv.set(self.key, records)
        return task.id

    def update(self, task: RecurringTask) -> None:
        records = [
            task.to_record() if str(r.get("id")) == task.id else r
            for r in self._records()
        ]
        self.kv.set(self.key, records)

    def delete(self, task_id: str) -> None:
        records = [r for r in self._records() if str(r.get("id")) != task_id]
        self.kv.set(self.key, records)

    def list(self) -> list[RecurringTask]:
        """Fetch all chores. Malformed records are logged and dropped."""
        tasks = []
        for record in self._records():
            try:
                tasks.append(RecurringTask.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed task record {record!r}: {e}")
        return tasks


class JsonOccurrenceStore:
    """
    Projected occurrences stored as one JSON list.

    The day and horizon of the last full projection live under a separate
    key so a later process can tell whether the set is still current.

    Implements OccurrenceSink protocol.
    """

    def __init__(self, kv: JsonKeyValueStore, key: str = EVENTS_KEY, meta_key: str = EVENTS_META_KEY):
        self.kv = kv
        self.key = key
        self.meta_key = meta_key

    def replace_all(self, occurrences: list[Occurrence]) -> None:
        self.kv.set(self.key, [o.to_record() for o in occurrences])

    def record_projection(self, as_of: date, horizon_days: int) -> None:
        self.kv.set(self.meta_key, {"asOf": as_of.isoformat(), "horizonDays": horizon_days})

    def last_projection(self) -> tuple[date, int] | None:
        meta = self.kv.get(self.meta_key)
        if meta is None:
            return None
        try:
            return date.fromisoformat(meta["asOf"]), int(meta["horizonDays"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed projection metadata {meta!r}: {e}")
            return None

    def list(self) -> list[Occurrence]:
        occurrences = []
        for record in self.kv.get(self.key, []):
            try:
                occurrences.append(Occurrence.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed occurrence record {record!r}: {e}")
        return occurrences
