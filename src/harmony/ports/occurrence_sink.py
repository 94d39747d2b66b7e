"""Occurrence sink interface."""

from datetime import date
from typing import Protocol

from harmony.core.occurrences import Occurrence


class OccurrenceSink(Protocol):
    """Interface for holding the current projected occurrence set."""

    def replace_all(self, occurrences: list[Occurrence]) -> None:
        """Discard the stored set and store this one."""
        ...

    def record_projection(self, as_of: date, horizon_days: int) -> None:
        """Remember which day and horizon the stored set was projected for."""
        ...

    def last_projection(self) -> tuple[date, int] | None:
        """(as_of, horizon_days) of the last full projection, if known."""
        ...

    def list(self) -> list[Occurrence]:
        """Fetch the stored set."""
        ...
