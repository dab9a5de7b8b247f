"""
Repository hook execution.

Hooks are plain executables under the hooks directory. A hook that does
not exist (or is not executable) is treated as passing, matching git's
own behavior.
"""

import logging
import os
import subprocess
from pathlib import Path

from gitindex.lib.errors import HookFailure

logger = logging.getLogger(__name__)

DEFAULT_HOOK_TIMEOUT = 120


def find_hook(hooks_dir: Path, name: str) -> Path | None:
    """Return the hook's path if it exists and is executable."""
    hook = hooks_dir / name
    if hook.is_file() and os.access(hook, os.X_OK):
        return hook
    return None


def run_hook(
    hooks_dir: Path,
    name: str,
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_HOOK_TIMEOUT,
) -> None:
    """
    Run a named hook if present.

    Args:
        hooks_dir: Directory holding hook scripts
        name: Hook name (e.g., "pre-commit")
        args: Extra arguments passed to the hook
        cwd: Working directory to run the hook in
        timeout: Seconds before the hook is considered failed

    Raises:
        HookFailure: If the hook exits non-zero, times out, or cannot start
    """
    hook = find_hook(hooks_dir, name)
    if hook is None:
        logger.debug(f"[HOOK] {name}: not installed, skipping")
        return

    try:
        result = subprocess.run(
            [str(hook)] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise HookFailure(name, f"timed out after {timeout}s") from None
    except OSError as e:
        raise HookFailure(name, str(e)) from None

    if result.returncode != 0:
        output = (result.stderr or result.stdout).strip()
        raise HookFailure(name, f"exit {result.returncode}" + (f": {output}" if output else ""))
