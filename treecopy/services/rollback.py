"""Removal of files copied by a cancelled run."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..core.models import CopyOutcome, CopyRecord
from ..core.protocols import FilesystemGateway, ProgressReporter
from .audit import AuditLog


logger = logging.getLogger(__name__)


@dataclass
class RollbackResult:
    """What a rollback pass managed to undo."""
    removed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.failed


class RollbackManager:
    """Deletes destinations recorded as successfully copied.

    Best effort: a failed deletion is logged and the scan carries on.
    Files whose stream was interrupted were never recorded as copied and
    are left in place.
    """

    def __init__(
        self,
        fs: FilesystemGateway,
        audit: AuditLog,
        progress: Optional[ProgressReporter] = None,
    ):
        self._fs = fs
        self._audit = audit
        self._progress = progress

    def rollback(self) -> RollbackResult:
        result = RollbackResult()

        for record in self._audit.copied():
            if not self._fs.exists(record.destination):
                continue
            self._remove(record, result)

        if result.removed or result.failed:
            logger.info(
                "Rollback removed %d file(s), %d failure(s)",
                len(result.removed), len(result.failed),
            )
        return result

    def _remove(self, record: CopyRecord, result: RollbackResult) -> None:
        try:
            self._fs.delete_path(record.destination)
        except OSError as e:
            logger.warning("Could not remove %s during rollback: %s", record.destination, e)
            if self._progress:
                self._progress.warning(f"Rollback failed for {record.destination}: {e}")
            self._audit.log(record.source, record.destination, CopyOutcome.ROLLBACK_ERROR)
            result.failed.append(record.destination)
            return

        self._audit.log(record.source, record.destination, CopyOutcome.ROLLBACK_SUCCESS)
        result.removed.append(record.destination)
