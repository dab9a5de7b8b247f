"""
Status scans for the index refresh.

Three scans feed the reconciler: untracked ("other") files, unstaged
changes (working tree vs index) and staged changes (index vs tree-ish).
Each turns raw `-z` output into a path -> status-fields mapping.

Tracked scan output alternates a status line and a path:
    :100644 100644 <old-sha> <new-sha> M\\0path/to/file\\0
Status fields are [":old-mode", "new-mode", "old-sha", "new-sha", "change-type"].
"""

from dataclasses import dataclass
from enum import Enum

from gitindex.git.runner import GitRunner, GitResult
from gitindex.git.status import list_untracked, diff_files_raw, diff_index_raw
from gitindex.index.model import ZERO_SHA
from gitindex.lib.errors import ProcessFailure, ProtocolViolation

NEW_FILE_MODE = ":000000"

# Untracked files have no index information; status is synthesized
UNTRACKED_STATUS = [NEW_FILE_MODE, "100644", ZERO_SHA, ZERO_SHA, "A", None]


class ScanKind(Enum):
    OTHERS = "other files"
    UNSTAGED = "unstaged files"
    STAGED = "staged files"

    @property
    def staged(self) -> bool:
        """Whether this scan observes the staged side."""
        return self is ScanKind.STAGED

    @property
    def tracked(self) -> bool:
        """Whether this scan reports tracked files (and so carries blob info)."""
        return self is not ScanKind.OTHERS


def lines_from_output(output: str | None) -> list[str]:
    """Split NUL-separated output, dropping one trailing NUL."""
    if output is None:
        return []
    if output.endswith("\0"):
        output = output[:-1]
    if not output:
        return []
    return output.split("\0")


def dictionary_for_lines(lines: list[str]) -> dict[str, list[str]]:
    """
    Pair status lines with the path that follows each.

    Raises:
        ProtocolViolation: If the line count is odd
    """
    if len(lines) % 2 != 0:
        raise ProtocolViolation(f"Lines must have an even number of lines: {lines}")

    dictionary = {}
    for i in range(0, len(lines), 2):
        dictionary[lines[i + 1]] = lines[i].split(" ")
    return dictionary


def dictionary_for_untracked(lines: list[str]) -> dict[str, list]:
    """Map each untracked path to the synthetic new-file status."""
    return {path: UNTRACKED_STATUS for path in lines if path}


@dataclass
class ScanTask:
    """One independently schedulable status scan."""
    kind: ScanKind
    tree_ish: str | None = None  # Only used by the staged scan

    def execute(self, runner: GitRunner) -> GitResult:
        if self.kind is ScanKind.OTHERS:
            return list_untracked(runner)
        if self.kind is ScanKind.UNSTAGED:
            return diff_files_raw(runner)
        return diff_index_raw(runner, self.tree_ish)

    def parse(self, output: str | None) -> dict[str, list]:
        lines = lines_from_output(output)
        if self.kind.tracked:
            return dictionary_for_lines(lines)
        return dictionary_for_untracked(lines)

    def run(self, runner: GitRunner) -> dict[str, list]:
        """
        Run the scan's git command and parse its output.

        Raises:
            ProcessFailure: If the git command fails
            ProtocolViolation: If the output cannot be paired up
        """
        result = self.execute(runner)
        if not result.success:
            raise ProcessFailure(f"scan ({self.kind.value})", result.returncode, result.stderr)
        return self.parse(result.stdout)
