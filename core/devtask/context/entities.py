"""
Reference history for conversation context.

Tracks the files, directories and tasks touched during a session as three
independent recency lists. Each list is capped, unique by key and ordered
most-recent-first, so "this file" can be resolved to the last file the
conversation dealt with.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from devtask.config import MAX_REFERENCE_ENTRIES


class ReferenceKind(str, Enum):
    """Kind of tracked reference."""
    FILE = "file"
    DIRECTORY = "directory"
    TASK = "task"


@dataclass
class ReferenceEntry:
    """One entry in a recency list."""
    key: str
    last_accessed: datetime = field(default_factory=datetime.now)
    operation: Optional[str] = None  # e.g. "read", "modify", "list"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "last_accessed": self.last_accessed.isoformat(),
            "operation": self.operation,
        }


class RecencyRegistry:
    """
    Bounded most-recently-used list of keys.

    Touching a key moves it to the front (updating its timestamp and
    operation); new keys are inserted at the front and the tail is
    evicted once the list exceeds `max_entries`.
    """

    def __init__(self, max_entries: int = MAX_REFERENCE_ENTRIES):
        self.max_entries = max_entries
        self._entries: list[ReferenceEntry] = []

    def touch(self, key: str, operation: Optional[str] = None) -> ReferenceEntry:
        key = str(key)
        for index, entry in enumerate(self._entries):
            if entry.key == key:
                self._entries.pop(index)
                entry.last_accessed = datetime.now()
                if operation is not None:
                    entry.operation = operation
                self._entries.insert(0, entry)
                return entry

        entry = ReferenceEntry(key=key, operation=operation)
        self._entries.insert(0, entry)
        del self._entries[self.max_entries:]
        return entry

    def most_recent(self) -> Optional[str]:
        return self._entries[0].key if self._entries else None

    def entries(self) -> list[ReferenceEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self._entries)


class ReferenceHistory:
    """Files, directories and tasks recently touched in a session."""

    def __init__(self, max_entries: int = MAX_REFERENCE_ENTRIES):
        self.files = RecencyRegistry(max_entries)
        self.directories = RecencyRegistry(max_entries)
        self.tasks = RecencyRegistry(max_entries)

    def touch_file(self, path: str, operation: Optional[str] = None) -> ReferenceEntry:
        return self.files.touch(path, operation)

    def touch_directory(self, path: str) -> ReferenceEntry:
        return self.directories.touch(path, "list")

    def touch_task(self, task_id: str | int) -> ReferenceEntry:
        return self.tasks.touch(str(task_id), "select")

    def most_recent_file(self) -> Optional[str]:
        return self.files.most_recent()

    def most_recent_directory(self) -> str:
        return self.directories.most_recent() or "."

    def most_recent_task(self) -> Optional[str]:
        return self.tasks.most_recent()

    def history(self) -> dict[str, list[ReferenceEntry]]:
        return {
            ReferenceKind.FILE.value: self.files.entries(),
            ReferenceKind.DIRECTORY.value: self.directories.entries(),
            ReferenceKind.TASK.value: self.tasks.entries(),
        }

    def to_dict(self) -> dict:
        return {kind: [entry.to_dict() for entry in entries] for kind, entries in self.history().items()}

    def clear(self) -> None:
        self.files.clear()
        self.directories.clear()
        self.tasks.clear()
