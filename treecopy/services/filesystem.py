"""Local filesystem gateway."""
from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import BinaryIO, Iterator


class LocalFilesystem:
    """FilesystemGateway backed by the local disk.

    Type probes follow symbolic links, so a link to a regular file counts
    as a regular file and a dangling link does not exist.
    """

    def __init__(self, follow_symlinks: bool = False):
        """Initialize the gateway.

        Args:
            follow_symlinks: Whether enumeration descends into linked directories.
        """
        self._follow_symlinks = follow_symlinks

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_directory(self, path: Path) -> bool:
        return path.is_dir()

    def is_regular_file(self, path: Path) -> bool:
        return path.is_file()

    def is_other_file_type(self, path: Path) -> bool:
        """Check for FIFOs, sockets and device nodes."""
        try:
            mode = path.stat().st_mode
        except OSError:
            return False
        return not (stat.S_ISREG(mode) or stat.S_ISDIR(mode))

    def are_paths_equivalent(self, first: Path, second: Path) -> bool:
        try:
            return os.path.samefile(first, second)
        except OSError:
            return False

    def relative_path(self, path: Path, start: Path) -> Path:
        return Path(os.path.relpath(path, start))

    def create_directories(self, path: Path) -> None:
        """Ensure directory exists.

        Raises:
            OSError: If a component cannot be created, including when a
                file already occupies one of the names.
        """
        path.mkdir(parents=True, exist_ok=True)

    def recursive_enumerate(self, root: Path) -> Iterator[Path]:
        """Walk root lazily, yielding directories before their contents.

        Raises:
            OSError: A directory under root could not be listed. Entries
                already yielded stay valid; the walk stops there.
        """
        walk = os.walk(root, onerror=_raise_walk_error, followlinks=self._follow_symlinks)
        for dirpath, dirnames, filenames in walk:
            base = Path(dirpath)
            # symlinked directories show up here but are only descended
            # when follow_symlinks is set
            for name in sorted(dirnames):
                yield base / name
            for name in sorted(filenames):
                yield base / name
            dirnames.sort()

    def list_directory(self, path: Path) -> list[Path]:
        return sorted(path.iterdir())

    def delete_path(self, path: Path) -> None:
        path.unlink()

    def open_read(self, path: Path) -> BinaryIO:
        return open(path, "rb")

    def open_write(self, path: Path) -> BinaryIO:
        return open(path, "wb")


def _raise_walk_error(error: OSError) -> None:
    # os.walk skips unreadable directories unless onerror raises
    raise error
