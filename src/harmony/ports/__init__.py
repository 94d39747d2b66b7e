"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .occurrence_sink import OccurrenceSink
from .clock import Clock
from .user_directory import User, UserDirectory

__all__ = [
    "TaskStore",
    "OccurrenceSink",
    "Clock",
    "User",
    "UserDirectory",
]
