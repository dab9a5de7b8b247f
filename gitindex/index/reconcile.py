"""
Reconciliation of scan results into the changed-file list.

Each scan's mapping is merged with apply(); once all three scans of a
refresh have been applied, finalize() prunes entries that no scan still
reports and returns the pre-prune snapshot for listeners.

Rules for an existing entry:
- Reported by the scan: take blob info and set the scan's flag (tracked
  scans), or force untracked-only NEW state (untracked scan).
- Not reported: clear the scan's flag, except that NEW entries belong to
  the untracked scan and only it may clear their unstaged flag.
"""

import logging

from gitindex.index.model import ChangedFile, FileList, FileStatus
from gitindex.index.scan import NEW_FILE_MODE

logger = logging.getLogger(__name__)


def _status_override(fields: list) -> FileStatus | None:
    """DELETED/UNMERGED from the change-type code, else None."""
    change_type = fields[4]
    if change_type == "D":
        return FileStatus.DELETED
    if change_type == "U":
        return FileStatus.UNMERGED
    return None


def status_for_new_entry(fields: list) -> FileStatus:
    status = _status_override(fields)
    if status is not None:
        return status
    if fields[0] == NEW_FILE_MODE:
        return FileStatus.NEW
    return FileStatus.MODIFIED


def _set_blob(file: ChangedFile, fields: list) -> None:
    file.commit_blob_mode = fields[0][1:]
    file.commit_blob_sha = fields[2]


class Reconciler:
    """Merges scan mappings into a FileList."""

    def __init__(self, files: FileList):
        self.files = files

    def apply(self, dictionary: dict[str, list], staged: bool, tracked: bool) -> None:
        """Merge one scan's mapping into the list.

        The mapping is consumed: paths matching existing entries are removed
        from it, and whatever remains is added as new entries.
        """
        with self.files.lock:
            for file in self.files.entries():
                fields = dictionary.pop(file.path, None)
                if fields is not None:
                    self._update_existing(file, fields, staged, tracked)
                else:
                    self._clear_missing(file, staged, tracked)

            for path, fields in dictionary.items():
                self.files.add(self._new_entry(path, fields, staged, tracked))

        logger.debug(
            f"[RECONCILE] applied {'staged' if staged else 'unstaged'}"
            f"{'' if tracked else ' untracked'} scan, {len(dictionary)} new"
        )
        dictionary.clear()

    def _update_existing(self, file: ChangedFile, fields: list, staged: bool, tracked: bool) -> None:
        if tracked:
            _set_blob(file, fields)
            if staged:
                file.has_staged_changes = True
            else:
                file.has_unstaged_changes = True
            status = _status_override(fields)
            if status is not None:
                file.status = status
        else:
            # Untracked file: NEW, only unstaged changes
            file.has_staged_changes = False
            file.has_unstaged_changes = True
            file.status = FileStatus.NEW

    def _clear_missing(self, file: ChangedFile, staged: bool, tracked: bool) -> None:
        if staged:
            file.has_staged_changes = False
        elif tracked and file.status != FileStatus.NEW:
            file.has_unstaged_changes = False
        elif not tracked and file.status == FileStatus.NEW:
            # No longer untracked (it has been indexed or removed)
            file.has_unstaged_changes = False

    def _new_entry(self, path: str, fields: list, staged: bool, tracked: bool) -> ChangedFile:
        file = ChangedFile(path=path, status=status_for_new_entry(fields))
        if tracked:
            _set_blob(file, fields)
        file.has_staged_changes = staged
        file.has_unstaged_changes = not staged
        return file

    def finalize(self) -> list[ChangedFile]:
        """Prune entries without changes.

        Returns:
            Copies of the list as it was before pruning, so listeners can
            see files that just became clean.
        """
        with self.files.lock:
            before = self.files.snapshot()
            removed = self.files.remove_if(lambda f: not f.has_changes)
        if removed:
            logger.debug(f"[RECONCILE] pruned {len(removed)} clean file(s)")
        return before
