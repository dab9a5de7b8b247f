"""
Index engine for one working directory.

GitIndex owns the changed-file list and wires together the refresh
coordinator, staging operations, commit pipeline and diff provider. It
also carries the amend state that several of them depend on.
"""

import logging
import re
import threading
from enum import Enum
from pathlib import Path
from typing import Iterable

from gitindex.git.refs import EMPTY_TREE_SHA, read_commit, get_log_subjects
from gitindex.git.runner import GitRunner
from gitindex.index.commit import CommitPipeline, CommitResult
from gitindex.index.diff import DiffProvider
from gitindex.index.model import ChangedFile, FileList, FileRef
from gitindex.index.reconcile import Reconciler
from gitindex.index.refresh import RefreshCoordinator
from gitindex.index.staging import StagingOps
from gitindex.lib.config import IndexConfig
from gitindex.lib.errors import GitIndexError, ReferenceResolutionFailure

logger = logging.getLogger(__name__)

AUTHOR_PATTERN = re.compile(r'\nauthor ([^\n]*) <([^\n>]*)> ([0-9]+[^\n]*)\n')

GIT_AUTHOR_NAME = "GIT_AUTHOR_NAME"
GIT_AUTHOR_EMAIL = "GIT_AUTHOR_EMAIL"
GIT_AUTHOR_DATE = "GIT_AUTHOR_DATE"


class NotifyMode(Enum):
    """Whether the next index change is announced to listeners.

    SUPPRESSED is one-shot: the next change event is swallowed and the
    mode returns to NORMAL.
    """
    NORMAL = "normal"
    SUPPRESSED = "suppressed"


def parse_author_environment(commit_text: str) -> dict[str, str] | None:
    """Extract author name/email/date from a raw commit object as git env vars."""
    m = AUTHOR_PATTERN.search(commit_text)
    if not m:
        return None
    return {
        GIT_AUTHOR_NAME: m.group(1),
        GIT_AUTHOR_EMAIL: m.group(2),
        GIT_AUTHOR_DATE: m.group(3),
    }


class GitIndex:
    """Live model of a working tree's staged, unstaged and untracked files."""

    def __init__(self, repository, working_directory: Path, runner: GitRunner, config: IndexConfig | None = None):
        self.repository = repository
        self.working_directory = Path(working_directory)
        self.runner = runner
        self.config = config or IndexConfig()

        self.amend = False
        self.amend_environment: dict[str, str] | None = None
        self.notify_mode = NotifyMode.NORMAL

        self.files = FileList()
        self._refresh_lock = threading.Lock()
        self.reconciler = Reconciler(self.files)
        self.coordinator = RefreshCoordinator(
            runner,
            self.reconciler,
            parent_tree=self.parent_tree,
            on_finalize=self._post_index_change,
            timeout=self.config.refresh_timeout,
        )
        self.staging = StagingOps(
            runner,
            self.files,
            post_index_change=self._post_index_change,
            refresh=self.refresh,
        )
        self.diffs = DiffProvider(
            runner,
            self.working_directory,
            parent_tree=self.parent_tree,
            binary_extensions=self.config.binary_extensions,
        )

    # --- refresh ---------------------------------------------------------

    def refresh(self, notify: bool = True) -> bool:
        """Resynchronize the file list with git.

        Refreshes are serialized; a second caller waits for the first.

        Returns:
            False if the index could not be normalized and nothing changed.
        """
        with self._refresh_lock:
            self.notify_mode = NotifyMode.NORMAL if notify else NotifyMode.SUPPRESSED
            refreshed = False
            try:
                refreshed = self.coordinator.refresh()
            finally:
                if not refreshed:
                    # The suppressed event never fired; do not swallow the next one
                    self.notify_mode = NotifyMode.NORMAL
            return refreshed

    def parent_tree(self) -> str:
        """Tree-ish staged changes are compared against."""
        parent = "HEAD^" if self.amend else "HEAD"
        if self.repository.parse_reference(parent) is None:
            # No head ref yet: compare against the empty tree
            return EMPTY_TREE_SHA
        return parent

    def _post_index_change(self, files: list[ChangedFile]) -> None:
        if self.notify_mode is NotifyMode.NORMAL:
            self.repository.fire_index_change_event(files)
        else:
            self.notify_mode = NotifyMode.NORMAL

    def changed_files(self) -> list[ChangedFile]:
        """Copies of all changed files."""
        return self.files.snapshot()

    # --- amend -----------------------------------------------------------

    def set_amend(self, amend: bool) -> None:
        """Switch amend mode.

        Entering amend mode captures the author of HEAD so the rewritten
        commit keeps it.

        Raises:
            ReferenceResolutionFailure: If entering amend mode with no HEAD commit
        """
        if self.amend == amend:
            return
        if amend and self.repository.parse_reference("HEAD") is None:
            raise ReferenceResolutionFailure("HEAD")

        self.amend = amend
        self.amend_environment = None
        self.refresh(notify=not amend)
        if not amend:
            return

        result = read_commit(self.runner, "HEAD")
        if result.success:
            self.amend_environment = parse_author_environment(result.stdout)
        if self.amend_environment is None:
            logger.warning("[AMEND] could not read author of HEAD, amended commit will use current author")

    # --- staging ---------------------------------------------------------

    def stage_files(self, files: Iterable[FileRef]) -> bool:
        return self.staging.stage_files(files)

    def unstage_files(self, files: Iterable[FileRef]) -> bool:
        return self.staging.unstage_files(files)

    def discard_changes_for_files(self, files: Iterable[FileRef]) -> bool:
        return self.staging.discard_changes_for_files(files)

    def apply_patch(self, hunk: str, stage: bool = False, reverse: bool = False) -> bool:
        return self.staging.apply_patch(hunk, stage=stage, reverse=reverse)

    # --- commit ----------------------------------------------------------

    def commit(self, message: str) -> CommitResult:
        """Commit the index.

        Once HEAD has moved (even if the post-commit hook failed), amend mode
        is cleared and the file list is refreshed. A failed commit leaves
        everything as it was.

        A refresh failure after HEAD moved is logged; the result still
        reports the commit.
        """
        pipeline = CommitPipeline(
            self.runner,
            self.repository,
            amend=self.amend,
            amend_environment=self.amend_environment,
        )
        result = pipeline.commit(message)
        if not result.committed:
            return result

        self.repository.has_changed()
        self.amend_environment = None
        self.amend = False
        try:
            self.refresh()
        except GitIndexError as e:
            logger.error(f"[COMMIT] created {result.sha} but refreshing the file list failed: {e}")
        return result

    # --- queries ---------------------------------------------------------

    def diff_for_file(self, file: ChangedFile, staged: bool, context_lines: int | None = None) -> str | None:
        if context_lines is None:
            context_lines = self.config.context_lines
        return self.diffs.diff_for_file(file, staged, context_lines)

    def has_binary_attributes(self, file: ChangedFile) -> bool:
        return self.diffs.has_binary_attributes(file)

    def commits_between(self, sha1: str, sha2: str) -> list[str]:
        """
        Subjects of all commits reachable from sha2 but not sha1.

        Args:
            sha1: SHA commit hash or ref name (e.g., 'refs/heads/main')
            sha2: SHA commit hash or ref name
        """
        result = get_log_subjects(self.runner, f"{sha1}..{sha2}")
        if not result.success or not result.stdout.strip():
            return []
        return [line for line in re.split(r'[\r\n]+', result.stdout) if line]
