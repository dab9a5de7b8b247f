"""Git status scans used by the index refresh."""

from gitindex.git.runner import GitRunner, GitResult


def normalize_index(runner: GitRunner) -> GitResult:
    """Refresh the stat cache, tolerating missing files and unmerged entries."""
    return runner.run(["update-index", "-q", "--unmerged", "--ignore-missing", "--refresh"])


def list_untracked(runner: GitRunner) -> GitResult:
    """List untracked, non-ignored paths, NUL separated."""
    return runner.run(["ls-files", "--others", "--exclude-standard", "-z"])


def diff_files_raw(runner: GitRunner) -> GitResult:
    """Raw working tree vs index diff, NUL separated."""
    return runner.run(["diff-files", "-z"])


def diff_index_raw(runner: GitRunner, tree_ish: str) -> GitResult:
    """Raw index vs tree-ish diff, NUL separated."""
    return runner.run(["diff-index", "--cached", "-z", tree_ish])
