"""
Stage, unstage, discard and hunk operations.

Every operation is fail-closed: if git exits non-zero, the file list is
left exactly as it was and the operation returns False.
"""

import logging
from typing import Callable, Iterable

from gitindex.git.index import (
    update_index_add_remove,
    update_index_info,
    checkout_index,
    apply_patch,
)
from gitindex.git.runner import GitRunner
from gitindex.index.model import ChangedFile, FileList, FileRef, unique_paths

logger = logging.getLogger(__name__)


class StagingOps:
    """Index mutations that keep the in-memory flags in step."""

    def __init__(
        self,
        runner: GitRunner,
        files: FileList,
        post_index_change: Callable[[list[ChangedFile]], None],
        refresh: Callable[[], bool],
    ):
        self.runner = runner
        self.files = files
        self.post_index_change = post_index_change
        self.refresh = refresh

    def stage_files(self, files: Iterable[FileRef]) -> bool:
        """Stage files (or paths). On success they become staged-only."""
        files = list(files)
        paths = unique_paths(files)
        if not paths:
            return True

        result = update_index_add_remove(self.runner, paths)
        if not result.success:
            logger.warning(f"[STAGE] update-index failed (exit {result.returncode}): {result.stderr.strip()}")
            return False

        with self.files.lock:
            entries = self.files.resolve(files)
            for file in entries:
                file.has_unstaged_changes = False
                file.has_staged_changes = True
            changed = [f.copy() for f in entries]

        self.post_index_change(changed)
        return True

    def unstage_files(self, files: Iterable[FileRef]) -> bool:
        """Restore the committed blob of each file in the index in one batch."""
        with self.files.lock:
            entries = self.files.resolve(files)
            stream = "".join(f.index_info() for f in entries)
        if not entries:
            return True

        result = update_index_info(self.runner, stream)
        if not result.success:
            logger.warning(f"[STAGE] update-index --index-info failed (exit {result.returncode}): {result.stderr.strip()}")
            return False

        with self.files.lock:
            for file in entries:
                file.has_unstaged_changes = True
                file.has_staged_changes = False
            changed = [f.copy() for f in entries]

        self.post_index_change(changed)
        return True

    def discard_changes_for_files(self, files: Iterable[FileRef]) -> bool:
        """Overwrite working tree changes with the indexed content."""
        files = list(files)
        paths = unique_paths(files)
        if not paths:
            return True

        result = checkout_index(self.runner, paths)
        if not result.success:
            logger.warning(f"[STAGE] Discarding changes failed with return value {result.returncode}: {result.stderr.strip()}")
            return False

        with self.files.lock:
            entries = self.files.resolve(files)
            for file in entries:
                file.has_unstaged_changes = False
            changed = [f.copy() for f in entries]

        self.post_index_change(changed)
        return True

    def apply_patch(self, hunk: str, stage: bool = False, reverse: bool = False) -> bool:
        """Apply a hunk to the working tree (or the index when stage).

        Success triggers a full refresh rather than a targeted update.
        """
        result = apply_patch(self.runner, hunk, cached=stage, reverse=reverse)
        if not result.success:
            logger.error(
                f"[STAGE] Applying patch failed with return value {result.returncode}. "
                f"Error: {result.output.strip()}"
            )
            return False

        # TODO: refresh only the paths named in the hunk header
        self.refresh()
        return True
