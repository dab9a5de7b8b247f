"""Git plumbing operations for gitindex.

This module provides thin wrappers over the git commands the index engine
issues. Every function takes a GitRunner bound to one working directory.

Return type conventions:
- Functions returning GitResult: Caller must check .success before using output.
  Examples: write_tree(), commit_tree(), apply_patch()
- Functions returning a parsed value or None: None means git failed or the
  thing does not exist.
  Examples: resolve_ref(), check_binary_attr(), get_git_path()
- run_hook() returns nothing and raises HookFailure when a hook rejects.
"""

from gitindex.git.runner import (
    GitResult,
    GitRunner,
    run_git,
)
from gitindex.git.status import (
    normalize_index,
    list_untracked,
    diff_files_raw,
    diff_index_raw,
)
from gitindex.git.diff import (
    check_binary_attr,
    show_indexed,
    diff_index_for_path,
    diff_files_for_path,
)
from gitindex.git.index import (
    update_index_add_remove,
    update_index_info,
    checkout_index,
    apply_patch,
)
from gitindex.git.refs import (
    EMPTY_TREE_SHA,
    is_object_id,
    resolve_ref,
    read_commit,
    write_tree,
    commit_tree,
    update_ref,
    get_log_subjects,
    get_git_path,
)
from gitindex.git.hooks import (
    find_hook,
    run_hook,
)

__all__ = [
    # runner
    "GitResult",
    "GitRunner",
    "run_git",
    # status
    "normalize_index",
    "list_untracked",
    "diff_files_raw",
    "diff_index_raw",
    # diff
    "check_binary_attr",
    "show_indexed",
    "diff_index_for_path",
    "diff_files_for_path",
    # index
    "update_index_add_remove",
    "update_index_info",
    "checkout_index",
    "apply_patch",
    # refs
    "EMPTY_TREE_SHA",
    "is_object_id",
    "resolve_ref",
    "read_commit",
    "write_tree",
    "commit_tree",
    "update_ref",
    "get_log_subjects",
    "get_git_path",
    # hooks
    "find_hook",
    "run_hook",
]
