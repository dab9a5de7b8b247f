"""Shared fixtures: a scripted stand-in for GitRunner."""

import threading
from dataclasses import dataclass
from pathlib import Path

import pytest

from gitindex.git.runner import GitResult
from gitindex.lib.config import IndexConfig
from gitindex.repository import GitRepository

HEAD_SHA = "1" * 40
PARENT_SHA = "2" * 40
TREE_SHA = "3" * 40
NEW_COMMIT_SHA = "4" * 40


@dataclass
class Call:
    args: list[str]
    stdin: str | None
    env: dict | None


class FakeGit:
    """Answers git commands by longest matching argument prefix.

    Unscripted commands succeed with empty output.
    """

    def __init__(self, cwd: Path):
        self.cwd = cwd
        self.responses: dict[tuple, object] = {}
        self.calls: list[Call] = []
        self._lock = threading.Lock()

    def set(self, *prefix, stdout="", returncode=0, stderr=""):
        self.responses[tuple(prefix)] = GitResult(returncode=returncode, stdout=stdout, stderr=stderr)

    def set_handler(self, *prefix, handler):
        self.responses[tuple(prefix)] = handler

    def run(self, args, stdin=None, env=None, timeout=None):
        with self._lock:
            self.calls.append(Call(list(args), stdin, env))
        for key in sorted(self.responses, key=len, reverse=True):
            if tuple(args[:len(key)]) == key:
                response = self.responses[key]
                if callable(response):
                    return response(args, stdin, env)
                return response
        return GitResult(returncode=0, stdout="", stderr="")

    def calls_for(self, *prefix) -> list[Call]:
        return [c for c in self.calls if tuple(c.args[:len(prefix)]) == prefix]


@pytest.fixture
def git(tmp_path):
    fake = FakeGit(tmp_path)
    (tmp_path / ".git").mkdir()
    fake.set("rev-parse", "--verify", "--quiet", "HEAD", stdout=HEAD_SHA + "\n")
    fake.set("rev-parse", "--verify", "--quiet", "HEAD^", stdout=PARENT_SHA + "\n")
    fake.set("rev-parse", "--git-path", "COMMIT_EDITMSG", stdout=".git/COMMIT_EDITMSG\n")
    fake.set("rev-parse", "--git-path", "hooks", stdout=".git/hooks\n")
    return fake


@pytest.fixture
def repo(tmp_path, git):
    return GitRepository(tmp_path, config=IndexConfig(), runner=git)


@pytest.fixture
def events(repo):
    """Index change events fired by the repository."""
    received = []
    repo.add_index_listener(lambda files: received.append(files))
    return received


def status_line(old_mode, new_mode, old_sha, new_sha, change_type):
    return f":{old_mode} {new_mode} {old_sha} {new_sha} {change_type}"


def raw_output(*pairs) -> str:
    """Build `-z` raw diff output from (status_line, path) pairs."""
    return "".join(f"{line}\0{path}\0" for line, path in pairs)
