"""
Refresh coordination for the index engine.

Runs the three status scans concurrently, reconciles each as it lands,
and finalizes exactly once after the last one completes.

Flow:
1. Normalize the index stat cache (failure aborts, list untouched)
2. Pick the comparison tree-ish
3. Clear the list
4. Scan others / unstaged / staged in parallel
5. Wait for all three; the last to finish runs finalize
6. On timeout the refresh is abandoned: its late scans neither apply
   nor finalize, so a following refresh owns the list alone
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable

from gitindex.git.runner import GitRunner
from gitindex.git.status import normalize_index
from gitindex.index.model import ChangedFile
from gitindex.index.reconcile import Reconciler
from gitindex.index.scan import ScanKind, ScanTask
from gitindex.lib.errors import GitIndexError, RefreshTimeout

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TIMEOUT = 120


@dataclass
class _RefreshState:
    """Countdown shared by the scans of one refresh.

    An abandoned refresh (timed out) must not touch the list again: a later
    refresh may already own it.
    """
    pending: int
    failed: bool = False
    abandoned: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock)


class RefreshCoordinator:
    """Schedules the status scans and triggers finalize once."""

    def __init__(
        self,
        runner: GitRunner,
        reconciler: Reconciler,
        parent_tree: Callable[[], str],
        on_finalize: Callable[[list[ChangedFile]], None],
        timeout: float = DEFAULT_REFRESH_TIMEOUT,
    ):
        """
        Args:
            runner: git runner for the working directory
            reconciler: merges scan results into the file list
            parent_tree: returns the tree-ish staged changes are compared to
            on_finalize: receives the pre-prune snapshot after a clean refresh
            timeout: seconds to wait for all scans
        """
        self.runner = runner
        self.reconciler = reconciler
        self.parent_tree = parent_tree
        self.on_finalize = on_finalize
        self.timeout = timeout

    def refresh(self) -> bool:
        """
        Resynchronize the file list with git.

        Returns:
            False if the index could not be normalized (nothing changed),
            True once all scans have been reconciled.

        Raises:
            ProcessFailure: If a scan's git command failed
            ProtocolViolation: If a scan's output was malformed
            RefreshTimeout: If the scans did not finish in time
        """
        result = normalize_index(self.runner)
        if not result.success:
            logger.warning(
                f"[REFRESH] update-index failed (exit {result.returncode}), "
                f"keeping current file list: {result.stderr.strip()}"
            )
            return False

        tree_ish = self.parent_tree()
        tasks = [
            ScanTask(ScanKind.OTHERS),
            ScanTask(ScanKind.UNSTAGED),
            ScanTask(ScanKind.STAGED, tree_ish=tree_ish),
        ]

        self.reconciler.files.clear()

        state = _RefreshState(pending=len(tasks))
        executor = ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="gitindex-scan")
        try:
            futures = [executor.submit(self._run_scan, task, state) for task in tasks]
            wait(futures, timeout=self.timeout)
        finally:
            executor.shutdown(wait=False)

        # Judge by the countdown: a scan landing after wait() returns counts as late
        with state.lock:
            pending = state.pending
            timed_out = pending > 0
            if timed_out:
                state.failed = True
                state.abandoned = True
        if timed_out:
            raise RefreshTimeout(f"{pending} status scan(s) still running after {self.timeout}s")

        for future in futures:
            # Re-raise the first scan failure in the caller's thread
            future.result()
        return True

    def _run_scan(self, task: ScanTask, state: _RefreshState) -> None:
        try:
            dictionary = task.run(self.runner)
            with self.reconciler.files.lock:
                if self._abandoned(state):
                    logger.debug(f"[REFRESH] {task.kind.value} scan landed after timeout, discarding")
                    return
                self.reconciler.apply(dictionary, staged=task.kind.staged, tracked=task.kind.tracked)
        except GitIndexError as e:
            logger.error(f"[REFRESH] {task.kind.value} scan failed: {e}")
            with state.lock:
                state.failed = True
            raise
        finally:
            self._scan_complete(state)

    def _abandoned(self, state: _RefreshState) -> bool:
        with state.lock:
            return state.abandoned

    def _scan_complete(self, state: _RefreshState) -> None:
        with state.lock:
            state.pending -= 1
            if state.pending > 0:
                return
            failed = state.failed

        # All scans have been applied; prune and notify
        with self.reconciler.files.lock:
            if self._abandoned(state):
                return
            changed = self.reconciler.finalize()
        if failed:
            logger.warning("[REFRESH] a scan failed, skipping change notification")
            return
        self.on_finalize(changed)
