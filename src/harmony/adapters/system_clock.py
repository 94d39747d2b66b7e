"""Wall-clock adapter."""

from datetime import datetime


class SystemClock:
    """Implements Clock protocol with the local wall clock."""

    def now(self) -> datetime:
        return datetime.now()
