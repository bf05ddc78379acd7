"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol


class FilesystemGateway(Protocol):
    """Interface for the filesystem primitives the engine consumes.

    Implementations:
    - LocalFilesystem: the local disk via pathlib/os

    Failures are signalled by raising ``OSError``; probes such as
    ``exists`` never raise.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Whether anything exists at path."""
        ...

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        ...

    @abstractmethod
    def is_regular_file(self, path: Path) -> bool:
        ...

    @abstractmethod
    def is_other_file_type(self, path: Path) -> bool:
        """Exists but is neither a regular file nor a directory (FIFO, socket, device)."""
        ...

    @abstractmethod
    def are_paths_equivalent(self, first: Path, second: Path) -> bool:
        """Whether both paths resolve to the same filesystem object."""
        ...

    @abstractmethod
    def relative_path(self, path: Path, start: Path) -> Path:
        ...

    @abstractmethod
    def create_directories(self, path: Path) -> None:
        """Create path and any missing ancestors."""
        ...

    @abstractmethod
    def recursive_enumerate(self, root: Path) -> Iterator[Path]:
        """Yield every entry below root, directories included.

        Raises OSError when a directory below root cannot be listed.
        """
        ...

    @abstractmethod
    def list_directory(self, path: Path) -> list[Path]:
        """Immediate children of a directory."""
        ...

    @abstractmethod
    def delete_path(self, path: Path) -> None:
        ...

    @abstractmethod
    def open_read(self, path: Path) -> BinaryIO:
        ...

    @abstractmethod
    def open_write(self, path: Path) -> BinaryIO:
        """Open path for writing, truncating an existing file."""
        ...


class CancellationSignal(Protocol):
    """Cooperative cancellation flag shared by one run."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @abstractmethod
    def is_cancelled(self) -> bool:
        ...


class ProgressReporter(Protocol):
    """Interface for progress reporting."""

    @abstractmethod
    def start_phase(self, name: str, total: Optional[int]) -> None:
        """Start a new processing phase. ``total`` is None when unknown."""
        ...

    @abstractmethod
    def advance_phase(self, amount: int = 1) -> None:
        """Advance the current phase by an amount."""
        ...

    @abstractmethod
    def end_phase(self) -> None:
        """Complete current phase."""
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        """Log an info message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Log an error message."""
        ...
