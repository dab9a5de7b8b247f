"""Per-file diff text for staged and unstaged changes."""

import logging
from pathlib import Path
from typing import Callable

from gitindex.git.diff import (
    check_binary_attr,
    show_indexed,
    diff_index_for_path,
    diff_files_for_path,
)
from gitindex.git.runner import GitRunner, GitResult
from gitindex.index.model import ChangedFile, FileStatus
from gitindex.lib.config import DEFAULT_BINARY_EXTENSIONS
from gitindex.lib.errors import IOFailure

logger = logging.getLogger(__name__)

BINARY_DIFF_MESSAGE = "Binary file, no diff available"


class DiffProvider:
    """Produces diff text (or raw content for new files) for one file."""

    def __init__(
        self,
        runner: GitRunner,
        working_directory: Path,
        parent_tree: Callable[[], str],
        binary_extensions: list[str] | None = None,
    ):
        self.runner = runner
        self.working_directory = Path(working_directory)
        self.parent_tree = parent_tree
        self.binary_extensions = tuple(
            DEFAULT_BINARY_EXTENSIONS if binary_extensions is None else binary_extensions
        )

    def has_binary_attributes(self, file: ChangedFile) -> bool:
        """Whether git (or, failing that, the extension) marks the file binary."""
        value = check_binary_attr(self.runner, file.path)
        if value == "set":
            return True
        if value == "unspecified":
            return file.path.endswith(self.binary_extensions)
        return False

    def diff_for_file(self, file: ChangedFile, staged: bool, context_lines: int = 3) -> str | None:
        """
        Get the diff for a changed file.

        Args:
            file: The file to diff
            staged: Diff the staged side (index vs tree-ish) instead of the
                unstaged side (working tree vs index)
            context_lines: Lines of context around each change

        Returns:
            Diff text; full content for new files; BINARY_DIFF_MESSAGE for
            binary files; None if git failed or a new file is gone.

        Raises:
            IOFailure: If a new file exists but cannot be read
        """
        if self.has_binary_attributes(file):
            return BINARY_DIFF_MESSAGE

        if staged:
            if file.status == FileStatus.NEW:
                return self._output(show_indexed(self.runner, file.path))
            return self._output(
                diff_index_for_path(self.runner, self.parent_tree(), file.path, context_lines)
            )

        if file.status == FileStatus.NEW:
            return self._read_working_file(file.path)
        return self._output(diff_files_for_path(self.runner, file.path, context_lines))

    def _read_working_file(self, path: str) -> str | None:
        try:
            return (self.working_directory / path).read_text(errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise IOFailure(f"Could not read {path}: {e}") from e

    def _output(self, result: GitResult) -> str | None:
        if not result.success:
            logger.warning(f"[DIFF] git failed (exit {result.returncode}): {result.stderr.strip()}")
            return None
        return result.stdout
