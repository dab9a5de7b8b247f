"""
Changed-file model for the index engine.

A ChangedFile is one path with some change state: staged, unstaged, or
both. The FileList holding them is shared between the refresh scans and
the staging/commit operations, so all access goes through its lock.
"""

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Union

ZERO_SHA = "0" * 40


class FileStatus(Enum):
    """Classification of a path's change."""
    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNMERGED = "unmerged"


@dataclass
class ChangedFile:
    """A single path with staged and/or unstaged changes."""
    path: str
    status: FileStatus = FileStatus.MODIFIED
    has_staged_changes: bool = False
    has_unstaged_changes: bool = False
    # Blob recorded on the comparison side; only set by tracked scans
    commit_blob_sha: str | None = None
    commit_blob_mode: str | None = None

    @property
    def has_changes(self) -> bool:
        return self.has_staged_changes or self.has_unstaged_changes

    def index_info(self) -> str:
        """Record for `git update-index -z --index-info` restoring the committed blob.

        Files with no committed blob are removed from the index instead.
        """
        if self.commit_blob_sha is None or self.commit_blob_mode is None:
            return f"0 {ZERO_SHA}\t{self.path}\0"
        return f"{self.commit_blob_mode} {self.commit_blob_sha}\t{self.path}\0"

    def copy(self) -> "ChangedFile":
        return replace(self)


FileRef = Union[ChangedFile, str]


def path_of(item: FileRef) -> str:
    return item.path if isinstance(item, ChangedFile) else item


def unique_paths(items: Iterable[FileRef]) -> list[str]:
    """Paths of the given files or path strings, first occurrence wins."""
    seen = set()
    paths = []
    for item in items:
        path = path_of(item)
        if path not in seen:
            seen.add(path)
            paths.append(path)
    return paths


class FileList:
    """Authoritative list of changed files, guarded by one lock.

    Callers outside the engine only ever get copies of entries.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._files: list[ChangedFile] = []

    def __len__(self) -> int:
        with self.lock:
            return len(self._files)

    def entries(self) -> list[ChangedFile]:
        """Live entries. Caller must hold the lock."""
        return self._files

    def add(self, file: ChangedFile) -> None:
        with self.lock:
            self._files.append(file)

    def clear(self) -> None:
        with self.lock:
            self._files.clear()

    def remove_if(self, predicate) -> list[ChangedFile]:
        """Remove every entry matching predicate, returning the removed ones."""
        with self.lock:
            removed = [f for f in self._files if predicate(f)]
            if removed:
                self._files[:] = [f for f in self._files if not predicate(f)]
            return removed

    def snapshot(self) -> list[ChangedFile]:
        """Copies of every entry."""
        with self.lock:
            return [f.copy() for f in self._files]

    def find(self, path: str) -> ChangedFile | None:
        """Live entry for path. Caller must hold the lock to mutate it."""
        with self.lock:
            for f in self._files:
                if f.path == path:
                    return f
        return None

    def resolve(self, items: Iterable[FileRef]) -> list[ChangedFile]:
        """Map files or paths to live entries.

        A ChangedFile not present in the list is returned as given; an
        unknown path string is dropped.
        """
        resolved = []
        with self.lock:
            by_path = {f.path: f for f in self._files}
            seen = set()
            for item in items:
                path = path_of(item)
                if path in seen:
                    continue
                seen.add(path)
                if path in by_path:
                    resolved.append(by_path[path])
                elif isinstance(item, ChangedFile):
                    resolved.append(item)
        return resolved
