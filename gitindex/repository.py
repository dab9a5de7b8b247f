"""
Repository wrapper around a git working directory.

Resolves refs, runs hooks, persists the commit message and fans index
and repository change events out to listeners. The index engine talks
to git's higher-level state only through this class.
"""

import logging
from pathlib import Path
from typing import Callable

from gitindex.git.hooks import run_hook
from gitindex.git.refs import resolve_ref, get_git_path
from gitindex.git.runner import GitRunner
from gitindex.index.engine import GitIndex
from gitindex.index.model import ChangedFile
from gitindex.lib.config import IndexConfig, load_index_config
from gitindex.lib.errors import GitIndexError, IOFailure, ProcessFailure

logger = logging.getLogger(__name__)

IndexListener = Callable[[list[ChangedFile]], None]
ChangeListener = Callable[[], None]


class GitRepository:
    """A git working directory and its index engine."""

    def __init__(
        self,
        working_directory: Path,
        config: IndexConfig | None = None,
        runner: GitRunner | None = None,
    ):
        self.working_directory = Path(working_directory)
        self.config = config or load_index_config(self.working_directory)
        self.runner = runner or GitRunner(
            self.working_directory,
            executable=self.config.git_executable,
            timeout=self.config.command_timeout,
        )
        self._index_listeners: list[IndexListener] = []
        self._change_listeners: list[ChangeListener] = []
        self._index: GitIndex | None = None

    @property
    def index(self) -> GitIndex:
        if self._index is None:
            self._index = GitIndex(self, self.working_directory, self.runner, self.config)
        return self._index

    # --- refs ------------------------------------------------------------

    def parse_reference(self, ref: str) -> str | None:
        """Object id a ref points to, or None if unresolved."""
        return resolve_ref(self.runner, ref)

    # --- listeners -------------------------------------------------------

    def add_index_listener(self, listener: IndexListener) -> None:
        self._index_listeners.append(listener)

    def remove_index_listener(self, listener: IndexListener) -> None:
        if listener in self._index_listeners:
            self._index_listeners.remove(listener)

    def add_change_listener(self, listener: ChangeListener) -> None:
        self._change_listeners.append(listener)

    def fire_index_change_event(self, files: list[ChangedFile]) -> None:
        """Tell index listeners which files changed."""
        for listener in list(self._index_listeners):
            listener(files)

    def has_changed(self) -> None:
        """Signal that the repository (HEAD, refs) changed."""
        for listener in list(self._change_listeners):
            listener()

    # --- hooks and commit message ---------------------------------------

    def _git_path(self, name: str) -> Path:
        value = get_git_path(self.runner, name)
        if value is None:
            raise ProcessFailure(["rev-parse", "--git-path", name], -1, "not a git repository?")
        path = Path(value)
        if not path.is_absolute():
            path = self.working_directory / path
        return path

    @property
    def hooks_dir(self) -> Path:
        if self.config.hooks_path:
            return self.working_directory / self.config.hooks_path
        return self._git_path("hooks")

    @property
    def commit_message_file(self) -> Path:
        return self._git_path("COMMIT_EDITMSG")

    def write_commit_file(self, message: str) -> None:
        """Persist the commit message where hooks expect it.

        Raises:
            IOFailure: If the file cannot be written
        """
        path = self.commit_message_file
        try:
            path.write_text(message)
        except OSError as e:
            raise IOFailure(f"Could not write commit message to {path}: {e}") from e

    def execute_hook(self, name: str, *args: str) -> bool:
        """Run a hook; True if it passed or is not installed.

        A hooks directory that cannot be located counts as a failed hook.
        """
        try:
            run_hook(self.hooks_dir, name, list(args), self.working_directory, timeout=self.config.hook_timeout)
        except GitIndexError as e:
            logger.warning(f"[HOOK] {e}")
            return False
        return True
