"""Shared fixtures and filesystem fakes."""
from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import pytest

from treecopy.services.filesystem import LocalFilesystem


class FlakyFilesystem(LocalFilesystem):
    """Local filesystem that raises OSError for selected paths and operations."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_read: set[Path] = set()
        self.fail_write: set[Path] = set()
        self.fail_mkdir: set[Path] = set()
        self.fail_delete: set[Path] = set()

    def open_read(self, path: Path):
        if path in self.fail_read:
            raise OSError(f"simulated read failure: {path}")
        return super().open_read(path)

    def open_write(self, path: Path):
        if path in self.fail_write:
            raise OSError(f"simulated write failure: {path}")
        return super().open_write(path)

    def create_directories(self, path: Path) -> None:
        if path in self.fail_mkdir:
            raise OSError(f"simulated mkdir failure: {path}")
        super().create_directories(path)

    def delete_path(self, path: Path) -> None:
        if path in self.fail_delete:
            raise OSError(f"simulated delete failure: {path}")
        super().delete_path(path)


class _TrackedReader:
    """File wrapper that counts how many readers are open at once."""

    def __init__(self, fs: "TrackingFilesystem", handle, delay: float):
        self._fs = fs
        self._handle = handle
        self._delay = delay

    def read(self, size: int = -1) -> bytes:
        time.sleep(self._delay)
        return self._handle.read(size)

    def __enter__(self):
        self._fs._enter()
        return self

    def __exit__(self, *args) -> None:
        self._handle.close()
        self._fs._exit()


class TrackingFilesystem(LocalFilesystem):
    """Records the peak number of files being read concurrently."""

    def __init__(self, delay: float = 0.01):
        super().__init__()
        self._lock = threading.Lock()
        self._delay = delay
        self.active = 0
        self.peak = 0
        self.opened: list[Path] = []

    def _enter(self) -> None:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)

    def _exit(self) -> None:
        with self._lock:
            self.active -= 1

    def open_read(self, path: Path):
        with self._lock:
            self.opened.append(path)
        return _TrackedReader(self, super().open_read(path), self._delay)


class HookedFilesystem(LocalFilesystem):
    """Calls a hook whenever a source file is opened for reading."""

    def __init__(self, hook: Optional[Callable[[Path], None]] = None):
        super().__init__()
        self.hook = hook

    def open_read(self, path: Path):
        if self.hook is not None:
            self.hook(path)
        return super().open_read(path)


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A small tree: a.txt, b.txt, sub/c.txt."""
    root = tmp_path / "src"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"alpha")
    (root / "b.txt").write_bytes(b"bravo" * 100)
    (root / "sub" / "c.txt").write_bytes(b"charlie")
    return root


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """An empty destination directory."""
    dest = tmp_path / "dest"
    dest.mkdir()
    return dest


def relative_files(root: Path) -> dict[str, bytes]:
    """Map of relative path -> content for every file below root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in root.rglob("*")
        if p.is_file()
    }


class BrokenWalkFilesystem(LocalFilesystem):
    """Local filesystem whose tree walk fails after yielding every entry."""

    def recursive_enumerate(self, root: Path):
        yield from super().recursive_enumerate(root)
        raise OSError("simulated walk failure")


@pytest.fixture
def unlistable(monkeypatch) -> set[Path]:
    """Directories added to the returned set make os.scandir raise PermissionError."""
    blocked: set[Path] = set()
    real_scandir = os.scandir

    def scandir(path="."):
        if not isinstance(path, int) and Path(os.fsdecode(path)) in blocked:
            raise PermissionError(13, "Permission denied", os.fsdecode(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    return blocked
