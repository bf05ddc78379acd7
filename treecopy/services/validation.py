"""Pre-flight checks run once per copy request."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.config import ConflictMode, CopyConfig
from ..core.models import CopyOutcome
from ..core.protocols import FilesystemGateway
from .audit import AuditLog
from .conflict import find_top_level_collision


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CopyPlan:
    """A validated request: where the source will land."""
    source: Path
    destination: Path
    is_directory: bool


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Either a plan or the run-level outcome that rejected the request."""
    plan: Optional[CopyPlan] = None
    rejection: Optional[CopyOutcome] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


def is_descendant(path: Path, ancestor: Path) -> bool:
    """Whether path equals ancestor or lies below it, lexically."""
    try:
        path.relative_to(ancestor)
    except ValueError:
        return False
    return True


class RequestValidator:
    """Ordered pre-flight checks; the first failure wins.

    Each rejection is logged once to the audit log against the paths it
    concerns. Nothing on disk is touched except creating the resolved
    destination directory.
    """

    def __init__(self, fs: FilesystemGateway, config: CopyConfig, audit: AuditLog):
        self._fs = fs
        self._config = config
        self._audit = audit

    def validate(self, source: Path, destination: Path) -> ValidationResult:
        fs = self._fs

        if not fs.exists(source):
            return self._reject(source, destination, CopyOutcome.SOURCE_NOT_FOUND)

        if fs.exists(destination) and not fs.is_directory(destination):
            return self._reject(source, destination, CopyOutcome.DESTINATION_IS_FILE)

        resolved = destination / source.name

        if fs.exists(resolved) and fs.are_paths_equivalent(source, resolved):
            return self._reject(source, resolved, CopyOutcome.SOURCE_EQUALS_DESTINATION)

        if not fs.is_directory(source):
            return ValidationResult(plan=CopyPlan(source, resolved, is_directory=False))

        if is_descendant(_absolute(resolved), _absolute(source)):
            return self._reject(source, resolved, CopyOutcome.SOURCE_IS_SUBDIRECTORY_OF_DESTINATION)

        if not fs.exists(resolved):
            try:
                fs.create_directories(resolved)
            except OSError as e:
                logger.debug("Cannot create destination %s: %s", resolved, e)
                return self._reject(source, resolved, CopyOutcome.IO_ERROR)

        if self._config.conflict_mode == ConflictMode.CANCEL:
            try:
                collision = find_top_level_collision(fs, source, resolved)
            except OSError as e:
                logger.debug("Cannot scan destination %s: %s", resolved, e)
                return self._reject(source, resolved, CopyOutcome.IO_ERROR)
            if collision is not None:
                logger.debug("Destination already holds %s", collision)
                return self._reject(source, resolved, CopyOutcome.FILE_EXISTS_ERROR)

        return ValidationResult(plan=CopyPlan(source, resolved, is_directory=True))

    def _reject(self, source: Path, destination: Path, outcome: CopyOutcome) -> ValidationResult:
        self._audit.log(source, destination, outcome)
        return ValidationResult(rejection=outcome)


def _absolute(path: Path) -> Path:
    # resolve() without strict: the destination may not exist yet
    return path.resolve()
