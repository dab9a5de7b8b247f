#!/usr/bin/env python3
"""gitindex CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from gitindex.index.commit import CommitOutcome
from gitindex.lib.errors import GitIndexError
from gitindex.lib.validate import ValidationError
from gitindex.repository import GitRepository


def open_repository(args) -> GitRepository:
    """Open the repository at -C (default: current directory) and refresh it."""
    repo = GitRepository(Path(args.directory).resolve())
    if not repo.index.refresh(notify=False):
        print("WARNING: could not refresh the index; showing last known state", file=sys.stderr)
    return repo


def format_file(file) -> str:
    staged = "S" if file.has_staged_changes else " "
    unstaged = "U" if file.has_unstaged_changes else " "
    return f"{staged}{unstaged} {file.status.value:<9} {file.path}"


def cmd_status(args, repo: GitRepository) -> int:
    files = sorted(repo.index.changed_files(), key=lambda f: f.path)
    if not files:
        print("No changes")
        return 0
    for file in files:
        print(format_file(file))
    return 0


def cmd_stage(args, repo: GitRepository) -> int:
    if not repo.index.stage_files(args.paths):
        print("ERROR: staging failed")
        return 1
    return 0


def cmd_unstage(args, repo: GitRepository) -> int:
    if not repo.index.unstage_files(args.paths):
        print("ERROR: unstaging failed")
        return 1
    return 0


def cmd_discard(args, repo: GitRepository) -> int:
    if not repo.index.discard_changes_for_files(args.paths):
        print("ERROR: discarding changes failed")
        return 1
    return 0


def cmd_diff(args, repo: GitRepository) -> int:
    matches = [f for f in repo.index.changed_files() if f.path == args.path]
    if not matches:
        print(f"No changes for {args.path}")
        return 1

    diff = repo.index.diff_for_file(matches[0], staged=args.staged, context_lines=args.context)
    if diff is None:
        print(f"ERROR: could not produce diff for {args.path}")
        return 1
    if diff:
        print(diff, end="" if diff.endswith("\n") else "\n")
    else:
        print("No staged changes" if args.staged else "No unstaged changes")
    return 0


def cmd_apply(args, repo: GitRepository) -> int:
    if args.patch == "-":
        patch = sys.stdin.read()
    else:
        patch = Path(args.patch).read_text()

    if not repo.index.apply_patch(patch, stage=args.cached, reverse=args.reverse):
        print("ERROR: patch did not apply")
        return 1
    return 0


def cmd_commit(args, repo: GitRepository) -> int:
    if args.amend:
        repo.index.set_amend(True)

    result = repo.index.commit(args.message)
    if result.outcome is CommitOutcome.FAILED:
        print(f"ERROR: {result.failed_step.value}: {result.description}")
        return 1
    if result.outcome is CommitOutcome.HOOK_FAILED:
        print(f"WARNING: {result.description}")
    else:
        print(result.description)
    return 0


def cmd_log(args, repo: GitRepository) -> int:
    for subject in repo.index.commits_between(args.base, args.head):
        print(subject)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='gitindex', description='Inspect and edit a git index')
    parser.add_argument('-C', dest='directory', default='.', help='Run as if started in this directory')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log engine activity')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # gitindex status
    p_status = subparsers.add_parser('status', help='List changed files')
    p_status.set_defaults(func=cmd_status)

    # gitindex stage
    p_stage = subparsers.add_parser('stage', help='Stage files')
    p_stage.add_argument('paths', nargs='+', help='Paths to stage')
    p_stage.set_defaults(func=cmd_stage)

    # gitindex unstage
    p_unstage = subparsers.add_parser('unstage', help='Unstage files')
    p_unstage.add_argument('paths', nargs='+', help='Paths to unstage')
    p_unstage.set_defaults(func=cmd_unstage)

    # gitindex discard
    p_discard = subparsers.add_parser('discard', help='Discard unstaged changes')
    p_discard.add_argument('paths', nargs='+', help='Paths to restore from the index')
    p_discard.set_defaults(func=cmd_discard)

    # gitindex diff
    p_diff = subparsers.add_parser('diff', help='Show diff for one file')
    p_diff.add_argument('path', help='Changed file path')
    p_diff.add_argument('--staged', action='store_true', help='Show staged changes')
    p_diff.add_argument('-U', dest='context', type=int, default=None, help='Lines of context')
    p_diff.set_defaults(func=cmd_diff)

    # gitindex apply
    p_apply = subparsers.add_parser('apply', help='Apply a patch hunk')
    p_apply.add_argument('patch', help="Patch file ('-' for stdin)")
    p_apply.add_argument('--cached', action='store_true', help='Apply to the index')
    p_apply.add_argument('--reverse', action='store_true', help='Apply in reverse')
    p_apply.set_defaults(func=cmd_apply)

    # gitindex commit
    p_commit = subparsers.add_parser('commit', help='Commit the index')
    p_commit.add_argument('--message', '-m', required=True, help='Commit message')
    p_commit.add_argument('--amend', action='store_true', help='Rewrite the tip commit')
    p_commit.set_defaults(func=cmd_commit)

    # gitindex log
    p_log = subparsers.add_parser('log', help='Commit subjects between two revisions')
    p_log.add_argument('base', help='Exclusive start revision')
    p_log.add_argument('head', help='Inclusive end revision')
    p_log.set_defaults(func=cmd_log)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        repo = open_repository(args)
        return args.func(args, repo)
    except ValidationError as e:
        print(f"ERROR: invalid configuration: {e}")
        return 2
    except GitIndexError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
