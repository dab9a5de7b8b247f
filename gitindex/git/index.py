"""Git index mutation operations."""

from gitindex.git.runner import GitRunner, GitResult


def update_index_add_remove(runner: GitRunner, paths: list[str]) -> GitResult:
    """Stage paths, adding new files and removing deleted ones."""
    return runner.run(["update-index", "--add", "--remove", "--"] + paths)


def update_index_info(runner: GitRunner, index_info: str) -> GitResult:
    """Feed raw NUL-terminated index-info records to the index."""
    return runner.run(["update-index", "-z", "--index-info"], stdin=index_info)


def checkout_index(runner: GitRunner, paths: list[str]) -> GitResult:
    """Overwrite working tree paths with their indexed content."""
    stdin = "".join(f"{path}\0" for path in paths)
    return runner.run(
        ["checkout-index", "--index", "--quiet", "--force", "-z", "--stdin"],
        stdin=stdin,
    )


def apply_patch(runner: GitRunner, patch: str, cached: bool = False, reverse: bool = False) -> GitResult:
    """Apply a patch to the working tree, or to the index when cached."""
    args = ["apply"]
    if cached:
        args.append("--cached")
    if reverse:
        args.append("--reverse")
    return runner.run(args, stdin=patch)
