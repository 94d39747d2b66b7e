"""Household member directory backed by JSON key-value storage."""

from harmony.ports.user_directory import User

from .json_store import JsonKeyValueStore

USERS_KEY = "household-users"

DEFAULT_USERS = {
    "user_1": {"name": "You", "color": "teal"},
    "user_2": {"name": "Partner", "color": "purple"},
}


class JsonUserDirectory:
    """
    Household members stored as a JSON object keyed by user id.

    Implements UserDirectory protocol. Renaming goes through this adapter,
    never through chore state.
    """

    def __init__(self, kv: JsonKeyValueStore, key: str = USERS_KEY):
        self.kv = kv
        self.key = key

    def _records(self) -> dict[str, dict]:
        records = self.kv.get(self.key)
        if not isinstance(records, dict) or not records:
            return {user_id: dict(data) for user_id, data in DEFAULT_USERS.items()}
        return records

    def get(self, user_id: str) -> User | None:
        data = self._records().get(user_id)
        if data is None:
            return None
        return User(id=user_id, name=data.get("name", user_id), color=data.get("color", ""))

    def rename(self, user_id: str, name: str) -> User:
        """Change a member's display name. Raises KeyError if unknown."""
        name = name.strip()
        if not name:
            raise ValueError("Name cannot be empty")
        records = self._records()
        if user_id not in records:
            raise KeyError(user_id)
        records[user_id]["name"] = name
        self.kv.set(self.key, records)
        return User(id=user_id, name=name, color=records[user_id].get("color", ""))

    def names(self) -> dict[str, str]:
        return {u.id: u.name for u in self.list()}

    def list(self) -> list[User]:
        return [
            User(id=user_id, name=data.get("name", user_id), color=data.get("color", ""))
            for user_id, data in self._records().items()
        ]
