"""Concurrent, cancellable file and directory copying.

A copy engine with bounded parallelism, conflict handling, cooperative
cancellation with rollback, and a per-file audit log.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import CopyConfig, ConflictMode
from .core.models import CopyOutcome, CopyRecord, CopyStats, RunPhase
from .core.protocols import FilesystemGateway, CancellationSignal, ProgressReporter
from .core.exceptions import CopyInProgressError

# Service exports
from .services.engine import FileCopyEngine
from .services.filesystem import LocalFilesystem
from .services.cancellation import CancellationToken

# Logging exports
from .logging.rich_logger import RichProgressReporter, QuietProgressReporter

__all__ = [
    # Core
    "CopyConfig",
    "ConflictMode",
    "CopyOutcome",
    "CopyRecord",
    "CopyStats",
    "RunPhase",
    "FilesystemGateway",
    "CancellationSignal",
    "ProgressReporter",
    "CopyInProgressError",
    # Services
    "FileCopyEngine",
    "LocalFilesystem",
    "CancellationToken",
    # Logging
    "RichProgressReporter",
    "QuietProgressReporter",
]
