"""Tests for the per-file copy worker."""
import os
from pathlib import Path

import pytest

from treecopy.core.config import ConflictMode, CopyConfig
from treecopy.core.models import CopyOutcome
from treecopy.services.audit import AuditLog
from treecopy.services.cancellation import CancellationToken
from treecopy.services.filesystem import LocalFilesystem
from treecopy.services.worker import CopyWorker

from conftest import FlakyFilesystem


class WorkerHarness:
    """Builds a worker and keeps hold of its collaborators."""

    def __init__(self, fs=None, **config):
        self.fs = fs or LocalFilesystem()
        self.config = CopyConfig(**config)
        self.audit = AuditLog(enabled=self.config.audit_logging)
        self.token = CancellationToken()
        self.worker = CopyWorker(self.fs, self.config, self.audit, self.token)

    def run(self, source: Path, destination: Path) -> CopyOutcome:
        return self.worker.run(source, destination)

    @property
    def outcomes(self) -> list[CopyOutcome]:
        return [r.outcome for r in self.audit.records()]


@pytest.fixture
def src_file(tmp_path: Path) -> Path:
    f = tmp_path / "in" / "data.bin"
    f.parent.mkdir()
    f.write_bytes(os.urandom(10_000))
    return f


class TestStreamCopy:
    """Tests for the happy path."""

    def test_copies_bytes_exactly(self, src_file, tmp_path):
        harness = WorkerHarness(buffer_size=1024)
        dest = tmp_path / "out" / "nested" / "data.bin"

        outcome = harness.run(src_file, dest)

        assert outcome == CopyOutcome.SUCCESS
        assert dest.read_bytes() == src_file.read_bytes()
        assert harness.outcomes == [CopyOutcome.SUCCESS]

    def test_empty_file(self, tmp_path):
        src = tmp_path / "empty"
        src.write_bytes(b"")
        dest = tmp_path / "copy"

        assert WorkerHarness().run(src, dest) == CopyOutcome.SUCCESS
        assert dest.read_bytes() == b""

    def test_no_record_when_logging_disabled(self, src_file, tmp_path):
        harness = WorkerHarness(audit_logging=False)

        outcome = harness.run(src_file, tmp_path / "copy")

        assert outcome == CopyOutcome.SUCCESS
        assert harness.audit.records() == ()
        assert len(harness.audit.copied()) == 1


class TestSourceValidation:
    """Tests for source checks."""

    def test_missing_source(self, tmp_path):
        harness = WorkerHarness()

        outcome = harness.run(tmp_path / "missing", tmp_path / "copy")

        assert outcome == CopyOutcome.SOURCE_NOT_FOUND
        assert not (tmp_path / "copy").exists()

    def test_directory_source(self, tmp_path):
        assert WorkerHarness().run(tmp_path, tmp_path / "copy") == CopyOutcome.SOURCE_NOT_FOUND

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs not supported")
    def test_special_file_rejected_by_default(self, tmp_path):
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)
        harness = WorkerHarness()

        outcome = harness.run(fifo, tmp_path / "copy")

        assert outcome == CopyOutcome.COPY_SYSTEM_FILES_ERROR
        assert harness.outcomes == [CopyOutcome.COPY_SYSTEM_FILES_ERROR]


class TestConflicts:
    """Tests for existing destinations."""

    def test_destination_is_directory(self, src_file, tmp_path):
        dest = tmp_path / "taken"
        dest.mkdir()

        outcome = WorkerHarness(conflict_mode=ConflictMode.OVERWRITE).run(src_file, dest)

        assert outcome == CopyOutcome.FILE_IS_SAME_NAME_AS_DIRECTORY

    def test_overwrite(self, src_file, tmp_path):
        dest = tmp_path / "copy"
        dest.write_bytes(b"old content")

        outcome = WorkerHarness(conflict_mode=ConflictMode.OVERWRITE).run(src_file, dest)

        assert outcome == CopyOutcome.SUCCESS
        assert dest.read_bytes() == src_file.read_bytes()

    def test_skip_leaves_destination(self, src_file, tmp_path):
        dest = tmp_path / "copy"
        dest.write_bytes(b"old content")
        harness = WorkerHarness(conflict_mode=ConflictMode.SKIP)

        outcome = harness.run(src_file, dest)

        assert outcome == CopyOutcome.SKIPPED
        assert dest.read_bytes() == b"old content"
        assert not harness.token.is_cancelled()

    def test_cancel_signals_run(self, src_file, tmp_path):
        dest = tmp_path / "copy"
        dest.write_bytes(b"old content")
        harness = WorkerHarness(conflict_mode=ConflictMode.CANCEL)

        outcome = harness.run(src_file, dest)

        assert outcome == CopyOutcome.FILE_EXISTS_ERROR
        assert harness.token.is_cancelled()
        assert dest.read_bytes() == b"old content"


class TestFailures:
    """Tests for I/O failures and cancellation."""

    def test_parent_blocked_by_file(self, src_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        outcome = WorkerHarness().run(src_file, blocker / "copy")

        assert outcome == CopyOutcome.IO_ERROR

    def test_parent_creation_failure(self, src_file, tmp_path):
        fs = FlakyFilesystem()
        dest = tmp_path / "out" / "copy"
        fs.fail_mkdir.add(dest.parent)

        outcome = WorkerHarness(fs=fs).run(src_file, dest)

        assert outcome == CopyOutcome.IO_ERROR
        assert not dest.exists()

    def test_read_failure(self, src_file, tmp_path):
        fs = FlakyFilesystem()
        fs.fail_read.add(src_file)
        harness = WorkerHarness(fs=fs)

        outcome = harness.run(src_file, tmp_path / "copy")

        assert outcome == CopyOutcome.IO_ERROR
        assert harness.outcomes == [CopyOutcome.IO_ERROR]

    def test_write_failure(self, src_file, tmp_path):
        fs = FlakyFilesystem()
        dest = tmp_path / "copy"
        fs.fail_write.add(dest)

        assert WorkerHarness(fs=fs).run(src_file, dest) == CopyOutcome.IO_ERROR

    def test_cancelled_before_first_chunk(self, src_file, tmp_path):
        harness = WorkerHarness()
        harness.token.cancel()
        dest = tmp_path / "copy"

        outcome = harness.run(src_file, dest)

        assert outcome == CopyOutcome.CANCELLED
        assert harness.outcomes == [CopyOutcome.CANCELLED]
        # partial artifact stays, and is not tracked for rollback
        assert dest.exists()
        assert dest.stat().st_size == 0
        assert harness.audit.copied() == ()
