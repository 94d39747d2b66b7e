"""Task store interface."""

from typing import Protocol

from harmony.core.chores import RecurringTask


class TaskStore(Protocol):
    """Interface for persisting recurring chores in any backend."""

    def list(self) -> list[RecurringTask]:
        """Fetch all chores."""
        ...

    def add(self, task: RecurringTask) -> str:
        """Store a new chore. Returns its id."""
        ...

    def update(self, task: RecurringTask) -> None:
        """Overwrite the chore with the same id."""
        ...

    def delete(self, task_id: str) -> None:
        """Remove a chore."""
        ...
