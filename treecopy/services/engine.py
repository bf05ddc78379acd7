"""Public copy engine - orchestrates validation, dispatch and rollback."""
from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Optional, Union

from ..core.config import ConflictMode, CopyConfig
from ..core.models import CopyOutcome, CopyRecord, CopyStats
from ..core.protocols import FilesystemGateway, ProgressReporter
from .audit import AuditLog
from .cancellation import RunController
from .dispatcher import Dispatcher
from .filesystem import LocalFilesystem
from .validation import RequestValidator


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class FileCopyEngine:
    """Copies a file or directory tree into a destination directory.

    One run at a time per engine. ``copy`` blocks until the run is over;
    call it from a background thread to be able to ``cancel`` it. The audit
    log and stats of the last run stay readable until the next run starts.

    Usage:
        engine = FileCopyEngine(CopyConfig(concurrency=4))
        outcome = engine.copy("photos", "/backup")
        for record in engine.audit_log():
            ...
    """

    def __init__(
        self,
        config: Optional[CopyConfig] = None,
        filesystem: Optional[FilesystemGateway] = None,
        progress: Optional[ProgressReporter] = None,
    ):
        """Initialize the engine.

        Args:
            config: Initial configuration (defaults apply when omitted).
            filesystem: Gateway to the filesystem; the local disk by default.
            progress: Optional progress reporter.
        """
        self._config = config or CopyConfig()
        self._fs = filesystem or LocalFilesystem()
        self._progress = progress
        self._controller = RunController()
        self._audit = AuditLog(enabled=self._config.audit_logging)
        self._elapsed = 0.0

    # --- Configuration ---

    @property
    def config(self) -> CopyConfig:
        return self._config

    @config.setter
    def config(self, value: CopyConfig) -> None:
        with self._controller.idle("change the configuration"):
            self._config = value

    def _update(self, **kwargs) -> None:
        with self._controller.idle("change the configuration"):
            self._config = self._config.with_overrides(**kwargs)

    @property
    def concurrency(self) -> int:
        return self._config.concurrency

    @concurrency.setter
    def concurrency(self, value: int) -> None:
        self._update(concurrency=value)

    @property
    def buffer_size(self) -> int:
        return self._config.buffer_size

    @buffer_size.setter
    def buffer_size(self, value: int) -> None:
        self._update(buffer_size=value)

    @property
    def conflict_mode(self) -> ConflictMode:
        return self._config.conflict_mode

    @conflict_mode.setter
    def conflict_mode(self, value: ConflictMode) -> None:
        self._update(conflict_mode=value)

    @property
    def include_non_regular(self) -> bool:
        return self._config.include_non_regular

    @include_non_regular.setter
    def include_non_regular(self, value: bool) -> None:
        self._update(include_non_regular=value)

    @property
    def audit_logging(self) -> bool:
        return self._config.audit_logging

    @audit_logging.setter
    def audit_logging(self, value: bool) -> None:
        self._update(audit_logging=value)

    # --- Run state ---

    def is_in_progress(self) -> bool:
        return self._controller.is_in_progress()

    def cancel(self) -> None:
        """Ask the active run to stop. Does nothing when no run is active."""
        if self._controller.cancel():
            logger.info("Cancellation requested")

    def audit_log(self) -> tuple[CopyRecord, ...]:
        return self._audit.records()

    def clear_audit_log(self) -> None:
        with self._controller.idle("clear the audit log"):
            self._audit.clear()

    def stats(self) -> CopyStats:
        """Statistics of the last run, computed from its audit log."""
        return CopyStats.from_records(self._audit.records(), elapsed_seconds=self._elapsed)

    # --- Copy ---

    def copy(self, source: PathLike, destination: PathLike) -> CopyOutcome:
        """Copy source into the destination directory.

        The source lands at ``destination / basename(source)``.

        Args:
            source: File or directory to copy.
            destination: Directory to copy into; created if missing.

        Returns:
            The run-level outcome. Per-file details are in ``audit_log()``.
        """
        token = self._controller.begin()
        if token is None:
            return CopyOutcome.IN_PROGRESS

        started = time.monotonic()
        try:
            # begin() moved us out of idle, so the config cannot change now
            config = self._config
            self._audit.clear()
            self._audit.enabled = config.audit_logging

            src, dest = Path(source), Path(destination)
            logger.debug("Copy %s -> %s with %s", src, dest, config)

            validation = RequestValidator(self._fs, config, self._audit).validate(src, dest)
            if not validation.ok:
                logger.info("Copy of %s rejected: %s", src, validation.rejection.value)
                return validation.rejection

            self._controller.start_copying()
            dispatcher = Dispatcher(self._fs, config, self._audit, token, self._progress)
            outcome = dispatcher.run(validation.plan)
            logger.info("Copy of %s finished: %s", src, outcome.value)
            return outcome
        finally:
            self._elapsed = time.monotonic() - started
            self._controller.finish()
