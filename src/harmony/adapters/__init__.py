"""Adapters - I/O implementations of ports."""

from .json_store import JsonKeyValueStore
from .json_records import JsonOccurrenceStore, JsonTaskStore
from .users import JsonUserDirectory
from .system_clock import SystemClock

__all__ = [
    "JsonKeyValueStore",
    "JsonTaskStore",
    "JsonOccurrenceStore",
    "JsonUserDirectory",
    "SystemClock",
]
