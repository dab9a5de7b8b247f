"""
Index engine: the live model of a working tree's changed files.

Refresh runs three git status scans concurrently and reconciles them into
one file list; staging, discard, hunk application and commit operate on
the same list.
"""

from gitindex.index.model import ChangedFile, FileList, FileStatus
from gitindex.index.scan import ScanKind, ScanTask
from gitindex.index.reconcile import Reconciler
from gitindex.index.refresh import RefreshCoordinator
from gitindex.index.staging import StagingOps
from gitindex.index.commit import CommitPipeline, CommitResult, CommitOutcome, CommitStep
from gitindex.index.diff import DiffProvider, BINARY_DIFF_MESSAGE
from gitindex.index.engine import GitIndex, NotifyMode

__all__ = [
    "ChangedFile",
    "FileList",
    "FileStatus",
    "ScanKind",
    "ScanTask",
    "Reconciler",
    "RefreshCoordinator",
    "StagingOps",
    "CommitPipeline",
    "CommitResult",
    "CommitOutcome",
    "CommitStep",
    "DiffProvider",
    "BINARY_DIFF_MESSAGE",
    "GitIndex",
    "NotifyMode",
]
