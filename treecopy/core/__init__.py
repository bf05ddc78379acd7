"""Core domain models and protocols."""
from .protocols import (
    FilesystemGateway,
    CancellationSignal,
    ProgressReporter,
)
from .models import (
    CopyOutcome,
    CopyRecord,
    CopyStats,
    RunPhase,
)
from .config import CopyConfig, ConflictMode
from .exceptions import CopyInProgressError

__all__ = [
    # Protocols
    "FilesystemGateway",
    "CancellationSignal",
    "ProgressReporter",
    # Models
    "CopyOutcome",
    "CopyRecord",
    "CopyStats",
    "RunPhase",
    # Config
    "CopyConfig",
    "ConflictMode",
    # Errors
    "CopyInProgressError",
]
