"""User directory interface."""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class User:
    """A household member."""

    id: str
    name: str
    color: str


class UserDirectory(Protocol):
    """Read-only view of household members."""

    def get(self, user_id: str) -> User | None:
        """Look up a member. Returns None if unknown."""
        ...

    def list(self) -> list[User]:
        """All members."""
        ...
