"""Conflict resolution for destination files that already exist."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from ..core.config import ConflictMode
from ..core.protocols import FilesystemGateway


class ConflictAction(Enum):
    """What a worker does about its destination."""
    PROCEED = "proceed"
    SKIP = "skip"
    CANCEL_RUN = "cancel_run"


def resolve_conflict(destination_exists: bool, mode: ConflictMode) -> ConflictAction:
    """Decide how to treat a destination file.

    Args:
        destination_exists: Whether a file already sits at the destination.
        mode: Configured conflict mode.

    Returns:
        PROCEED when there is nothing to collide with or the mode is
        OVERWRITE, SKIP or CANCEL_RUN otherwise.
    """
    if not destination_exists:
        return ConflictAction.PROCEED

    if mode == ConflictMode.OVERWRITE:
        return ConflictAction.PROCEED
    if mode == ConflictMode.SKIP:
        return ConflictAction.SKIP
    return ConflictAction.CANCEL_RUN


def find_top_level_collision(
    fs: FilesystemGateway,
    source: Path,
    destination: Path,
) -> Optional[Path]:
    """Pre-scan used by CANCEL mode before any file is copied.

    Each immediate child of ``destination`` is matched against the source
    entry with the same name. Two directories merge and are left for the
    workers; any other pairing is a collision.

    Returns:
        The first colliding destination path, or None.
    """
    for existing in fs.list_directory(destination):
        counterpart = source / existing.name
        if not fs.exists(counterpart):
            continue
        if fs.is_directory(existing) and fs.is_directory(counterpart):
            continue
        return existing
    return None
