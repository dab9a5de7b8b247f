"""
Exception types shared across gitindex.

Kept in one module so the git plumbing layer and the index engine can
raise the same types without importing each other.
"""

from dataclasses import dataclass


class GitIndexError(Exception):
    """Base class for all gitindex failures."""
    pass


class ProcessFailure(GitIndexError):
    """A git command exited non-zero, timed out, or could not be launched."""

    def __init__(self, command: str | list[str], returncode: int, stderr: str = ""):
        if not isinstance(command, str):
            command = " ".join(command)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"git {command} failed with exit {returncode}{detail}")


class ProtocolViolation(GitIndexError):
    """git produced output in a shape we cannot interpret."""
    pass


class HookFailure(GitIndexError):
    """A repository hook rejected the operation."""

    def __init__(self, hook: str, message: str = ""):
        self.hook = hook
        super().__init__(f"Hook '{hook}' failed" + (f": {message}" if message else ""))


class ReferenceResolutionFailure(GitIndexError):
    """A ref or tree-ish could not be resolved."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Could not resolve reference '{ref}'")


class IOFailure(GitIndexError):
    """Reading a working-tree file failed."""
    pass


class RefreshTimeout(GitIndexError):
    """Status scans did not finish within the refresh timeout."""
    pass


@dataclass
class CommitStepError(GitIndexError):
    """A commit pipeline step failed."""
    step: str
    message: str

    def __str__(self):
        return f"[{self.step}] {self.message}"
