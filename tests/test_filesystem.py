"""Tests for the local filesystem gateway."""
import os
from pathlib import Path

import pytest

from treecopy.services.filesystem import LocalFilesystem


@pytest.fixture
def fs():
    return LocalFilesystem()


class TestProbes:
    """Tests for existence and type checks."""

    def test_regular_file(self, fs, tmp_path: Path):
        f = tmp_path / "file.txt"
        f.write_text("x")

        assert fs.exists(f)
        assert fs.is_regular_file(f)
        assert not fs.is_directory(f)
        assert not fs.is_other_file_type(f)

    def test_directory(self, fs, tmp_path: Path):
        assert fs.is_directory(tmp_path)
        assert not fs.is_regular_file(tmp_path)
        assert not fs.is_other_file_type(tmp_path)

    def test_missing(self, fs, tmp_path: Path):
        missing = tmp_path / "nope"

        assert not fs.exists(missing)
        assert not fs.is_other_file_type(missing)

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs not supported")
    def test_fifo_is_other(self, fs, tmp_path: Path):
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)

        assert fs.exists(fifo)
        assert not fs.is_regular_file(fifo)
        assert fs.is_other_file_type(fifo)

    def test_equivalent_paths(self, fs, tmp_path: Path):
        sub = tmp_path / "sub"
        sub.mkdir()

        assert fs.are_paths_equivalent(sub, tmp_path / "sub" / ".." / "sub")
        assert not fs.are_paths_equivalent(sub, tmp_path)
        assert not fs.are_paths_equivalent(sub, tmp_path / "missing")


class TestPaths:
    """Tests for path helpers and directory operations."""

    def test_relative_path(self, fs, tmp_path: Path):
        assert fs.relative_path(tmp_path / "a" / "b.txt", tmp_path) == Path("a") / "b.txt"

    def test_create_directories(self, fs, tmp_path: Path):
        target = tmp_path / "x" / "y" / "z"

        fs.create_directories(target)
        fs.create_directories(target)  # idempotent

        assert target.is_dir()

    def test_create_directories_over_file_raises(self, fs, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(OSError):
            fs.create_directories(blocker / "child")

    def test_recursive_enumerate(self, fs, source_tree: Path):
        entries = list(fs.recursive_enumerate(source_tree))
        names = {p.relative_to(source_tree).as_posix() for p in entries}

        assert names == {"a.txt", "b.txt", "sub", "sub/c.txt"}

    def test_recursive_enumerate_is_lazy(self, fs, source_tree: Path):
        iterator = fs.recursive_enumerate(source_tree)

        assert next(iterator).parent == source_tree

    def test_recursive_enumerate_raises_on_unlistable(self, fs, source_tree: Path, unlistable):
        unlistable.add(source_tree / "sub")

        with pytest.raises(PermissionError):
            list(fs.recursive_enumerate(source_tree))

    def test_list_directory(self, fs, source_tree: Path):
        names = [p.name for p in fs.list_directory(source_tree)]
        assert names == ["a.txt", "b.txt", "sub"]

    def test_delete_path(self, fs, tmp_path: Path):
        f = tmp_path / "gone.txt"
        f.write_text("x")

        fs.delete_path(f)

        assert not f.exists()

    def test_delete_missing_raises(self, fs, tmp_path: Path):
        with pytest.raises(OSError):
            fs.delete_path(tmp_path / "missing")

    def test_read_write(self, fs, tmp_path: Path):
        src = tmp_path / "in.bin"
        src.write_bytes(b"\x00\x01\x02")
        dst = tmp_path / "out.bin"
        dst.write_bytes(b"old content that is longer")

        with fs.open_read(src) as r, fs.open_write(dst) as w:
            w.write(r.read())

        assert dst.read_bytes() == b"\x00\x01\x02"
