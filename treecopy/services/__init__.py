"""Service layer - the copy engine and its collaborators."""
from .filesystem import LocalFilesystem
from .conflict import ConflictAction, resolve_conflict, find_top_level_collision
from .cancellation import CancellationToken, RunController
from .audit import AuditLog
from .rollback import RollbackManager, RollbackResult
from .validation import RequestValidator, ValidationResult, CopyPlan
from .worker import CopyWorker
from .dispatcher import Dispatcher
from .engine import FileCopyEngine

__all__ = [
    # Filesystem
    "LocalFilesystem",
    # Conflict policy
    "ConflictAction",
    "resolve_conflict",
    "find_top_level_collision",
    # Run lifecycle
    "CancellationToken",
    "RunController",
    # Audit and rollback
    "AuditLog",
    "RollbackManager",
    "RollbackResult",
    # Copy pipeline
    "RequestValidator",
    "ValidationResult",
    "CopyPlan",
    "CopyWorker",
    "Dispatcher",
    "FileCopyEngine",
]
