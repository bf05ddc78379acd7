"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable


class CopyOutcome(Enum):
    """Terminal state of a whole run or of a single file."""
    SUCCESS = "success"
    NO_RESULT = "no_result"
    IN_PROGRESS = "in_progress"
    SOURCE_NOT_FOUND = "source_not_found"
    DESTINATION_IS_FILE = "destination_is_file"
    SOURCE_EQUALS_DESTINATION = "source_equals_destination"
    SOURCE_IS_SUBDIRECTORY_OF_DESTINATION = "source_is_subdirectory_of_destination"
    COPY_SYSTEM_FILES_ERROR = "copy_system_files_error"
    FILE_EXISTS_ERROR = "file_exists_error"
    IO_ERROR = "io_error"
    FILE_IS_SAME_NAME_AS_DIRECTORY = "file_is_same_name_as_directory"
    ERROR_WHEN_COPYING = "error_when_copying"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    ROLLBACK_SUCCESS = "rollback_success"
    ROLLBACK_ERROR = "rollback_error"

    @property
    def is_precondition_error(self) -> bool:
        """Run-level rejection raised before anything was copied.

        FILE_EXISTS_ERROR is left out: workers also log it per file in
        CANCEL mode, so only the record's context tells whether it came
        from the pre-scan.
        """
        return self in _PRECONDITION_ERRORS

    @property
    def is_rollback(self) -> bool:
        return self in (CopyOutcome.ROLLBACK_SUCCESS, CopyOutcome.ROLLBACK_ERROR)

    @property
    def is_success(self) -> bool:
        return self == CopyOutcome.SUCCESS


_PRECONDITION_ERRORS = frozenset({
    CopyOutcome.IN_PROGRESS,
    CopyOutcome.SOURCE_NOT_FOUND,
    CopyOutcome.DESTINATION_IS_FILE,
    CopyOutcome.SOURCE_EQUALS_DESTINATION,
    CopyOutcome.SOURCE_IS_SUBDIRECTORY_OF_DESTINATION,
})


class RunPhase(Enum):
    """Lifecycle of one engine run."""
    IDLE = "idle"
    VALIDATING = "validating"
    COPYING = "copying"
    TERMINAL = "terminal"

    @property
    def is_active(self) -> bool:
        return self in (RunPhase.VALIDATING, RunPhase.COPYING)


@dataclass(frozen=True, slots=True)
class CopyRecord:
    """One audit entry: what happened to a source/destination pair."""
    source: Path
    destination: Path
    outcome: CopyOutcome

    def to_dict(self) -> dict[str, str]:
        return {
            "source": str(self.source),
            "destination": str(self.destination),
            "outcome": self.outcome.value,
        }


@dataclass(slots=True)
class CopyStats:
    """Mutable statistics for a copy run."""
    copied: int = 0
    skipped: int = 0
    errors: int = 0
    cancelled: int = 0
    rolled_back: int = 0
    rollback_errors: int = 0
    elapsed_seconds: float = 0.0
    by_outcome: dict[CopyOutcome, int] = field(default_factory=dict)

    @property
    def total_files(self) -> int:
        return self.copied + self.skipped + self.errors + self.cancelled

    def record(self, record: CopyRecord) -> None:
        """Record one audit entry."""
        outcome = record.outcome
        self.by_outcome[outcome] = self.by_outcome.get(outcome, 0) + 1
        match outcome:
            case CopyOutcome.SUCCESS:
                self.copied += 1
            case CopyOutcome.SKIPPED:
                self.skipped += 1
            case CopyOutcome.CANCELLED:
                self.cancelled += 1
            case CopyOutcome.ROLLBACK_SUCCESS:
                self.rolled_back += 1
            case CopyOutcome.ROLLBACK_ERROR:
                self.rollback_errors += 1
            case _:
                self.errors += 1

    @classmethod
    def from_records(cls, records: Iterable[CopyRecord], elapsed_seconds: float = 0.0) -> "CopyStats":
        stats = cls(elapsed_seconds=elapsed_seconds)
        for record in records:
            stats.record(record)
        return stats

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total_files,
            "copied": self.copied,
            "skipped": self.skipped,
            "errors": self.errors,
            "cancelled": self.cancelled,
            "rolled_back": self.rolled_back,
            "rollback_errors": self.rollback_errors,
        }
