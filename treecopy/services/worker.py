"""Per-file copy worker."""
from __future__ import annotations

import logging
from pathlib import Path

from ..core.config import CopyConfig
from ..core.models import CopyOutcome
from ..core.protocols import CancellationSignal, FilesystemGateway
from .audit import AuditLog
from .conflict import ConflictAction, resolve_conflict


logger = logging.getLogger(__name__)


class CopyWorker:
    """Copies one file from source to destination.

    Flow: validate source, resolve a conflict or create the parent
    directory, then stream in ``config.buffer_size`` chunks while polling
    the run's cancellation token. Every way out of ``run`` logs exactly one
    audit record and returns the same outcome.

    A worker is stateless between calls, so one instance can serve every
    file of a run from any number of threads.
    """

    def __init__(
        self,
        fs: FilesystemGateway,
        config: CopyConfig,
        audit: AuditLog,
        token: CancellationSignal,
    ):
        """Initialize the worker.

        Args:
            fs: Filesystem gateway.
            config: Configuration snapshot of the run.
            audit: Audit log of the run.
            token: Cancellation token of the run.
        """
        self._fs = fs
        self._config = config
        self._audit = audit
        self._token = token

    def run(self, source: Path, destination: Path) -> CopyOutcome:
        outcome = self._copy(source, destination)
        self._audit.log(source, destination, outcome)
        logger.debug("%s -> %s: %s", source, destination, outcome.value)
        return outcome

    def _copy(self, source: Path, destination: Path) -> CopyOutcome:
        fs = self._fs

        # Source vanished, or a directory slipped through enumeration
        if not fs.exists(source) or fs.is_directory(source):
            return CopyOutcome.SOURCE_NOT_FOUND

        if not fs.is_regular_file(source):
            if not (self._config.include_non_regular and fs.is_other_file_type(source)):
                return CopyOutcome.COPY_SYSTEM_FILES_ERROR

        if fs.exists(destination):
            if fs.is_directory(destination):
                return CopyOutcome.FILE_IS_SAME_NAME_AS_DIRECTORY

            action = resolve_conflict(True, self._config.conflict_mode)
            if action == ConflictAction.SKIP:
                return CopyOutcome.SKIPPED
            if action == ConflictAction.CANCEL_RUN:
                self._token.cancel()
                return CopyOutcome.FILE_EXISTS_ERROR
        else:
            try:
                fs.create_directories(destination.parent)
            except OSError as e:
                logger.debug("Cannot create %s: %s", destination.parent, e)
                return CopyOutcome.IO_ERROR

        try:
            completed = self._stream(source, destination)
        except OSError as e:
            logger.debug("I/O error copying %s: %s", source, e)
            return CopyOutcome.IO_ERROR

        return CopyOutcome.SUCCESS if completed else CopyOutcome.CANCELLED

    def _stream(self, source: Path, destination: Path) -> bool:
        """Copy bytes chunk by chunk.

        Returns:
            False if cancellation stopped the copy early. The partially
            written destination is left behind.
        """
        buffer_size = self._config.buffer_size
        with self._fs.open_read(source) as src, self._fs.open_write(destination) as dst:
            while True:
                if self._token.is_cancelled():
                    return False
                chunk = src.read(buffer_size)
                if not chunk:
                    return True
                dst.write(chunk)
