"""Git ref, tree and commit object operations."""

import re

from gitindex.git.runner import GitRunner, GitResult

OBJECT_ID_PATTERN = re.compile(r'^(?:[0-9a-f]{40}|[0-9a-f]{64})$')

# Well-known id of the empty tree, used as the comparison base before the first commit
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


def is_object_id(value: str) -> bool:
    """Check that a value is a full hex object id."""
    return bool(OBJECT_ID_PATTERN.match(value))


def resolve_ref(runner: GitRunner, ref: str) -> str | None:
    """Resolve a ref to an object id, or None if it does not exist."""
    result = runner.run(["rev-parse", "--verify", "--quiet", ref])
    if result.success:
        sha = result.stdout.strip()
        return sha or None
    return None


def read_commit(runner: GitRunner, ref: str = "HEAD") -> GitResult:
    """Get the raw commit object text for a ref."""
    return runner.run(["cat-file", "commit", ref])


def write_tree(runner: GitRunner) -> GitResult:
    """Write the current index as a tree object."""
    return runner.run(["write-tree"])


def commit_tree(
    runner: GitRunner,
    tree: str,
    message: str,
    parent: str | None = None,
    env: dict[str, str] | None = None,
) -> GitResult:
    """Create a commit object for a tree, message read from stdin."""
    args = ["commit-tree", tree]
    if parent:
        args += ["-p", parent]
    return runner.run(args, stdin=message, env=env)


def update_ref(runner: GitRunner, ref: str, sha: str, reason: str) -> GitResult:
    """Move a ref to a new object, recording reason in the reflog."""
    return runner.run(["update-ref", "-m", reason, ref, sha])


def get_log_subjects(runner: GitRunner, ref_range: str) -> GitResult:
    """Get commit subjects for a ref range, one per line."""
    return runner.run(["log", "--pretty=format:%s", ref_range])


def get_git_path(runner: GitRunner, name: str) -> str | None:
    """Resolve a path inside $GIT_DIR (honors core.hooksPath for 'hooks')."""
    result = runner.run(["rev-parse", "--git-path", name])
    if result.success:
        return result.stdout.strip() or None
    return None
