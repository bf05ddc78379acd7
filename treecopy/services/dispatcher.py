"""Tree enumeration and bounded dispatch of copy workers."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ..core.config import CopyConfig
from ..core.models import CopyOutcome
from ..core.protocols import CancellationSignal, FilesystemGateway, ProgressReporter
from .audit import AuditLog
from .rollback import RollbackManager
from .validation import CopyPlan, is_descendant
from .worker import CopyWorker


logger = logging.getLogger(__name__)


class Dispatcher:
    """Runs the copy phase of a validated plan.

    Directory plans are enumerated lazily. Before each file the dispatcher
    takes a slot from a bounded semaphore (blocking while ``concurrency``
    workers are busy) and then checks the cancellation token, so at most
    ``concurrency`` workers are ever in flight and no new file starts
    after a cancellation request. A directory that cannot be listed ends
    the enumeration with an IO_ERROR record and fails the run.
    """

    def __init__(
        self,
        fs: FilesystemGateway,
        config: CopyConfig,
        audit: AuditLog,
        token: CancellationSignal,
        progress: Optional[ProgressReporter] = None,
    ):
        self._fs = fs
        self._config = config
        self._audit = audit
        self._token = token
        self._progress = progress
        self._worker = CopyWorker(fs, config, audit, token)
        self._failed = threading.Event()

    @property
    def failed(self) -> bool:
        """Whether any file of the run ended in something other than success."""
        return self._failed.is_set()

    def run(self, plan: CopyPlan) -> CopyOutcome:
        if not plan.is_directory:
            return self._run_single(plan)

        if self._progress:
            self._progress.start_phase("Copying", None)
        try:
            return self._run_tree(plan)
        finally:
            if self._progress:
                self._progress.end_phase()

    def _run_single(self, plan: CopyPlan) -> CopyOutcome:
        try:
            return self._worker.run(plan.source, plan.destination)
        except Exception:
            logger.exception("Unexpected error copying %s", plan.source)
            self._failed.set()
            return CopyOutcome.NO_RESULT

    def _run_tree(self, plan: CopyPlan) -> CopyOutcome:
        slots = threading.BoundedSemaphore(self._config.concurrency)
        cancelled_early = False

        def on_done(future: Future) -> None:
            slots.release()
            self._collect(future)

        with ThreadPoolExecutor(
            max_workers=self._config.concurrency,
            thread_name_prefix="treecopy",
        ) as executor:
            try:
                for entry in self._fs.recursive_enumerate(plan.source):
                    if self._fs.is_directory(entry):
                        continue

                    slots.acquire()
                    if self._token.is_cancelled():
                        slots.release()
                        cancelled_early = True
                        break

                    target = plan.destination / self._fs.relative_path(entry, plan.source)
                    future = executor.submit(self._worker.run, entry, target)
                    future.add_done_callback(on_done)
            except OSError as e:
                self._enumeration_failed(plan, e)

        # leaving the executor joins every worker and its done-callback
        if cancelled_early or self._token.is_cancelled():
            logger.info("Copy of %s cancelled, rolling back", plan.source)
            RollbackManager(self._fs, self._audit, self._progress).rollback()
            return CopyOutcome.CANCELLED

        return CopyOutcome.ERROR_WHEN_COPYING if self.failed else CopyOutcome.SUCCESS

    def _enumeration_failed(self, plan: CopyPlan, error: OSError) -> None:
        """Record a directory that could not be listed; files below it are lost to the run."""
        directory = Path(error.filename) if error.filename else plan.source
        if is_descendant(directory, plan.source):
            target = plan.destination / self._fs.relative_path(directory, plan.source)
        else:
            target = plan.destination

        logger.error("Cannot enumerate %s: %s", directory, error)
        if self._progress:
            self._progress.error(f"Cannot list {directory}: {error}")
        self._audit.log(directory, target, CopyOutcome.IO_ERROR)
        self._failed.set()

    def _collect(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Unexpected error in copy worker: %r", error)
            if self._progress:
                self._progress.error(f"Copy worker failed: {error}")
            self._failed.set()
        elif future.result() != CopyOutcome.SUCCESS:
            self._failed.set()

        if self._progress:
            self._progress.advance_phase(1)
