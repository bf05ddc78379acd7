"""Thread-safe audit trail of per-file outcomes."""
from __future__ import annotations

import threading
from pathlib import Path

from ..core.models import CopyOutcome, CopyRecord


class AuditLog:
    """Append-only record list shared by the dispatcher and its workers.

    Entries appear in completion order. Successful copies are also kept in
    a private ledger even when logging is disabled, since rollback needs
    them regardless of what the caller chose to see.
    """

    def __init__(self, enabled: bool = True):
        self._lock = threading.Lock()
        self._records: list[CopyRecord] = []
        self._copied: list[CopyRecord] = []
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        with self._lock:
            self._enabled = value

    def log(self, source: Path, destination: Path, outcome: CopyOutcome) -> CopyRecord:
        """Append one entry and return it."""
        record = CopyRecord(source=source, destination=destination, outcome=outcome)
        with self._lock:
            if outcome == CopyOutcome.SUCCESS:
                self._copied.append(record)
            if self._enabled:
                self._records.append(record)
        return record

    def records(self) -> tuple[CopyRecord, ...]:
        """Snapshot of all entries."""
        with self._lock:
            return tuple(self._records)

    def copied(self) -> tuple[CopyRecord, ...]:
        """Snapshot of the successful copies of the current run."""
        with self._lock:
            return tuple(self._copied)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._copied.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
