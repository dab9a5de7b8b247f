"""Tests for gitindex.git module."""

import os
import subprocess
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest

from gitindex.git.runner import run_git, GitResult, GitRunner
from gitindex.git.status import normalize_index, diff_index_raw
from gitindex.git.diff import check_binary_attr, diff_index_for_path
from gitindex.git.index import (
    update_index_add_remove,
    update_index_info,
    checkout_index,
    apply_patch,
)
from gitindex.git.refs import is_object_id, resolve_ref, commit_tree, update_ref
from gitindex.git.hooks import run_hook
from gitindex.lib.errors import HookFailure


def make_runner(result: GitResult) -> MagicMock:
    runner = MagicMock(spec=GitRunner)
    runner.run.return_value = result
    return runner


class TestGitResult:
    """Test GitResult dataclass."""

    def test_success_when_returncode_zero(self):
        result = GitResult(returncode=0, stdout="ok", stderr="")
        assert result.success is True

    def test_failure_when_returncode_nonzero(self):
        result = GitResult(returncode=1, stdout="", stderr="error")
        assert result.success is False

    def test_failure_when_timed_out(self):
        result = GitResult(returncode=0, stdout="ok", stderr="", timed_out=True)
        assert result.success is False

    def test_output_combines_streams(self):
        result = GitResult(returncode=1, stdout="out", stderr="err")
        assert result.output == "out\nerr"

    def test_output_single_stream(self):
        assert GitResult(returncode=1, stdout="", stderr="err").output == "err"


class TestRunGit:
    """Test run_git function."""

    @patch("gitindex.git.runner.subprocess.run")
    def test_returns_result_on_success(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="output", stderr="")
        result = run_git(["status"], Path("/tmp"))
        assert result.success
        assert result.stdout == "output"
        mock_run.assert_called_once()

    @patch("gitindex.git.runner.subprocess.run")
    def test_handles_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=30)
        result = run_git(["status"], Path("/tmp"))
        assert not result.success
        assert result.timed_out
        assert "timed out" in result.stderr

    @patch("gitindex.git.runner.subprocess.run")
    def test_handles_launch_failure(self, mock_run):
        mock_run.side_effect = FileNotFoundError("no such file: git")
        result = run_git(["status"], Path("/tmp"))
        assert not result.success
        assert not result.timed_out
        assert "Failed to run git" in result.stderr

    @patch("gitindex.git.runner.subprocess.run")
    def test_passes_cwd_with_C_flag(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        run_git(["diff-files", "-z"], Path("/my/repo"))
        call_args = mock_run.call_args[0][0]
        assert call_args == ["git", "-C", "/my/repo", "diff-files", "-z"]

    @patch("gitindex.git.runner.subprocess.run")
    def test_passes_stdin_and_merged_env(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        run_git(["commit-tree", "abc"], Path("/r"), stdin="msg", env={"GIT_AUTHOR_NAME": "A U Thor"})
        kwargs = mock_run.call_args[1]
        assert kwargs["input"] == "msg"
        assert kwargs["env"]["GIT_AUTHOR_NAME"] == "A U Thor"
        for key, value in os.environ.items():
            if key != "GIT_AUTHOR_NAME":
                assert kwargs["env"][key] == value

    @patch("gitindex.git.runner.subprocess.run")
    def test_no_env_inherits_environment(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        run_git(["status"], Path("/r"))
        assert mock_run.call_args[1]["env"] is None


class TestGitRunner:
    """Test GitRunner configuration threading."""

    @patch("gitindex.git.runner.subprocess.run")
    def test_uses_configured_executable_and_timeout(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        runner = GitRunner(Path("/r"), executable="/opt/git/bin/git", timeout=7)
        runner.run(["write-tree"])
        assert mock_run.call_args[0][0][0] == "/opt/git/bin/git"
        assert mock_run.call_args[1]["timeout"] == 7

    @patch("gitindex.git.runner.subprocess.run")
    def test_per_call_timeout_overrides_default(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        GitRunner(Path("/r"), timeout=7).run(["log"], timeout=99)
        assert mock_run.call_args[1]["timeout"] == 99


class TestPlumbingCommands:
    """Each wrapper issues the expected git command line."""

    def test_normalize_index(self):
        runner = make_runner(GitResult(0, "", ""))
        normalize_index(runner)
        runner.run.assert_called_once_with(
            ["update-index", "-q", "--unmerged", "--ignore-missing", "--refresh"]
        )

    def test_diff_index_raw_uses_tree_ish(self):
        runner = make_runner(GitResult(0, "", ""))
        diff_index_raw(runner, "HEAD^")
        runner.run.assert_called_once_with(["diff-index", "--cached", "-z", "HEAD^"])

    def test_update_index_add_remove(self):
        runner = make_runner(GitResult(0, "", ""))
        update_index_add_remove(runner, ["a.txt", "b c.txt"])
        runner.run.assert_called_once_with(["update-index", "--add", "--remove", "--", "a.txt", "b c.txt"])

    def test_update_index_info_uses_stdin(self):
        runner = make_runner(GitResult(0, "", ""))
        update_index_info(runner, "100644 abc\ta.txt\0")
        runner.run.assert_called_once_with(["update-index", "-z", "--index-info"], stdin="100644 abc\ta.txt\0")

    def test_checkout_index_nul_separates_paths(self):
        runner = make_runner(GitResult(0, "", ""))
        checkout_index(runner, ["a.txt", "dir/b.txt"])
        args, kwargs = runner.run.call_args
        assert args[0] == ["checkout-index", "--index", "--quiet", "--force", "-z", "--stdin"]
        assert kwargs["stdin"] == "a.txt\0dir/b.txt\0"

    def test_apply_patch_flags(self):
        runner = make_runner(GitResult(0, "", ""))
        apply_patch(runner, "hunk", cached=True, reverse=True)
        runner.run.assert_called_once_with(["apply", "--cached", "--reverse"], stdin="hunk")

    def test_apply_patch_plain(self):
        runner = make_runner(GitResult(0, "", ""))
        apply_patch(runner, "hunk")
        runner.run.assert_called_once_with(["apply"], stdin="hunk")

    def test_diff_index_for_path(self):
        runner = make_runner(GitResult(0, "", ""))
        diff_index_for_path(runner, "HEAD", "a.txt", context_lines=5)
        runner.run.assert_called_once_with(["diff-index", "-U5", "--cached", "HEAD", "--", "a.txt"])

    def test_commit_tree_with_parent_and_env(self):
        runner = make_runner(GitResult(0, "", ""))
        commit_tree(runner, "t" * 40, "msg", parent="HEAD", env={"GIT_AUTHOR_NAME": "X"})
        runner.run.assert_called_once_with(
            ["commit-tree", "t" * 40, "-p", "HEAD"], stdin="msg", env={"GIT_AUTHOR_NAME": "X"}
        )

    def test_commit_tree_without_parent(self):
        runner = make_runner(GitResult(0, "", ""))
        commit_tree(runner, "t" * 40, "msg")
        assert runner.run.call_args[0][0] == ["commit-tree", "t" * 40]

    def test_update_ref_records_reason(self):
        runner = make_runner(GitResult(0, "", ""))
        update_ref(runner, "HEAD", "c" * 40, "commit: subject")
        runner.run.assert_called_once_with(["update-ref", "-m", "commit: subject", "HEAD", "c" * 40])


class TestCheckBinaryAttr:
    """Test check_binary_attr parsing."""

    @pytest.mark.parametrize("output,expected", [
        ("img.png: binary: set\n", "set"),
        ("a.txt: binary: unset\n", "unset"),
        ("a.txt: binary: unspecified\n", "unspecified"),
        ("dir: with colon.txt: binary: set\n", "set"),
    ])
    def test_parses_value(self, output, expected):
        assert check_binary_attr(make_runner(GitResult(0, output, "")), "x") == expected

    def test_none_on_failure(self):
        assert check_binary_attr(make_runner(GitResult(128, "", "fatal")), "x") is None


class TestResolveRef:
    """Test resolve_ref function."""

    def test_returns_sha(self):
        runner = make_runner(GitResult(0, "a" * 40 + "\n", ""))
        assert resolve_ref(runner, "HEAD") == "a" * 40

    def test_none_when_missing(self):
        runner = make_runner(GitResult(1, "", ""))
        assert resolve_ref(runner, "HEAD^") is None


class TestIsObjectId:
    def test_sha1(self):
        assert is_object_id("4b825dc642cb6eb9a060e54bf8d69288fbee4904")

    def test_sha256(self):
        assert is_object_id("a" * 64)

    def test_rejects_short_or_junk(self):
        assert not is_object_id("abc")
        assert not is_object_id("fatal: not a git repository")
        assert not is_object_id("")


class TestRunHook:
    """Test run_hook function."""

    def _write_hook(self, hooks_dir: Path, name: str, body: str) -> Path:
        hooks_dir.mkdir(parents=True, exist_ok=True)
        hook = hooks_dir / name
        hook.write_text("#!/bin/sh\n" + body)
        hook.chmod(0o755)
        return hook

    def test_missing_hook_passes(self, tmp_path):
        run_hook(tmp_path / "hooks", "pre-commit", [], tmp_path)

    def test_non_executable_hook_is_skipped(self, tmp_path):
        hook = self._write_hook(tmp_path / "hooks", "pre-commit", "exit 1\n")
        hook.chmod(0o644)
        run_hook(tmp_path / "hooks", "pre-commit", [], tmp_path)

    def test_passing_hook(self, tmp_path):
        self._write_hook(tmp_path / "hooks", "pre-commit", "exit 0\n")
        run_hook(tmp_path / "hooks", "pre-commit", [], tmp_path)

    def test_failing_hook_raises(self, tmp_path):
        self._write_hook(tmp_path / "hooks", "commit-msg", "echo bad message >&2\nexit 1\n")
        with pytest.raises(HookFailure) as exc:
            run_hook(tmp_path / "hooks", "commit-msg", ["msgfile"], tmp_path)
        assert exc.value.hook == "commit-msg"
        assert "bad message" in str(exc.value)

    def test_hook_receives_arguments(self, tmp_path):
        self._write_hook(tmp_path / "hooks", "commit-msg", 'test "$1" = "the-file"\n')
        run_hook(tmp_path / "hooks", "commit-msg", ["the-file"], tmp_path)

    @patch("gitindex.git.hooks.subprocess.run")
    def test_timeout_raises(self, mock_run, tmp_path):
        self._write_hook(tmp_path / "hooks", "pre-commit", "exit 0\n")
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="hook", timeout=1)
        with pytest.raises(HookFailure, match="timed out"):
            run_hook(tmp_path / "hooks", "pre-commit", [], tmp_path, timeout=1)
