"""File-based JSON key-value storage adapter."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonKeyValueStore:
    """
    JSON document storage keyed by name.

    Each key gets a `<key>.json` file in the data directory. Documents that
    fail to decode are treated as corrupt: logged, removed, and read back as
    missing.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        return self.data_dir / f"{key}.json"

    def get(self, key: str, default=None):
        """Read a value, or `default` if missing or corrupt."""
        path = self._path_for_key(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupted storage for {key!r}, clearing: {e}")
            self.remove(key)
            return default

    def set(self, key: str, value) -> None:
        """Write/overwrite a value."""
        self._path_for_key(key).write_text(json.dumps(value, indent=2))

    def remove(self, key: str) -> None:
        self._path_for_key(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._path_for_key(key).exists()

    def clear_corrupted(self, keys: list[str]) -> list[str]:
        """
        Check a group of related documents; if any is corrupt, clear them all.

        Returns the keys that were removed.
        """
        for key in keys:
            path = self._path_for_key(key)
            if not path.exists():
                continue
            try:
                json.loads(path.read_text())
            except json.JSONDecodeError as e:
                logger.warning(f"Corrupted storage detected in {key!r}, clearing {keys}: {e}")
                removed = [k for k in keys if self.exists(k)]
                for k in removed:
                    self.remove(k)
                return removed
        return []
