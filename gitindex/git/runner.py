"""Git command runner with timeout handling."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TIMEOUT = 30


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Combined output, stdout first."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


def run_git(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
    stdin: str | None = None,
    env: dict[str, str] | None = None,
    executable: str = "git",
) -> GitResult:
    """
    Run a git command with timeout handling.

    Args:
        args: Git command arguments (e.g., ["diff-files", "-z"])
        cwd: Working directory for the command
        timeout: Timeout in seconds
        stdin: Text fed to the command's standard input
        env: Environment overrides layered on top of os.environ
        executable: git binary to invoke

    Returns:
        GitResult with returncode, stdout, stderr, and timed_out flag
    """
    cmd = [executable, "-C", str(cwd)] + args
    full_env = None
    if env:
        full_env = {**os.environ, **env}
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            input=stdin,
            env=full_env,
            timeout=timeout,
        )
        return GitResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    except subprocess.TimeoutExpired:
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as e:
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Failed to run {executable}: {e}",
        )


class GitRunner:
    """Runs git against one working directory.

    Holds the configured executable and default timeout so callers never
    look them up globally.
    """

    def __init__(self, cwd: Path, executable: str = "git", timeout: int = DEFAULT_TIMEOUT):
        self.cwd = Path(cwd)
        self.executable = executable
        self.timeout = timeout

    def run(
        self,
        args: list[str],
        stdin: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> GitResult:
        return run_git(
            args,
            self.cwd,
            timeout=timeout or self.timeout,
            stdin=stdin,
            env=env,
            executable=self.executable,
        )
