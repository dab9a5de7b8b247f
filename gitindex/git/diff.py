"""Git diff and content queries for a single path."""

from gitindex.git.runner import GitRunner, GitResult


def check_binary_attr(runner: GitRunner, path: str) -> str | None:
    """
    Look up the `binary` attribute for a path.

    Returns:
        "set", "unset", "unspecified" (or a literal value), None on git failure
    """
    result = runner.run(["check-attr", "binary", "--", path])
    if not result.success:
        return None
    # Output format: "<path>: binary: <value>"
    line = result.stdout.strip()
    if not line:
        return None
    return line.rsplit(": ", 1)[-1].strip()


def show_indexed(runner: GitRunner, path: str) -> GitResult:
    """Get the stage-0 (indexed) content of a path."""
    return runner.run(["show", f":0:{path}"])


def diff_index_for_path(runner: GitRunner, tree_ish: str, path: str, context_lines: int = 3) -> GitResult:
    """Diff the index against a tree-ish for one path."""
    return runner.run(["diff-index", f"-U{context_lines}", "--cached", tree_ish, "--", path])


def diff_files_for_path(runner: GitRunner, path: str, context_lines: int = 3) -> GitResult:
    """Diff the working tree against the index for one path."""
    return runner.run(["diff-files", f"-U{context_lines}", "--", path])
