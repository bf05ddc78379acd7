"""CLI with subcommands: copy."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from pathlib import Path
from typing import Optional

from .core.config import (
    ConflictMode,
    CopyConfig,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_CONCURRENCY,
)
from .core.models import CopyOutcome, CopyRecord
from .logging.rich_logger import RichProgressReporter, QuietProgressReporter
from .services.engine import FileCopyEngine


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="treecopy",
        description="Concurrent, cancellable file and directory copying.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ COPY command ============
    copy_parser = subparsers.add_parser(
        "copy",
        help="Copy a file or directory into a destination directory",
    )
    copy_parser.add_argument(
        "source",
        type=Path,
        help="File or directory to copy",
    )
    copy_parser.add_argument(
        "destination",
        type=Path,
        help="Directory to copy into (created if missing)",
    )
    copy_parser.add_argument(
        "-j", "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Number of files copied in parallel (default: {DEFAULT_CONCURRENCY})",
    )
    copy_parser.add_argument(
        "--buffer-size",
        type=int,
        default=DEFAULT_BUFFER_SIZE,
        help=f"Chunk size in bytes (default: {DEFAULT_BUFFER_SIZE})",
    )
    copy_parser.add_argument(
        "--on-conflict",
        type=str,
        choices=[mode.value for mode in ConflictMode],
        default=ConflictMode.SKIP.value,
        help="What to do with files that already exist (default: skip)",
    )
    copy_parser.add_argument(
        "--include-special",
        action="store_true",
        help="Also copy FIFOs, sockets and device files",
    )
    copy_parser.add_argument(
        "--no-audit",
        action="store_true",
        help="Do not keep a per-file audit log",
    )
    copy_parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write the audit log to this JSON file",
    )

    return parser


# ============ Command Handlers ============

def write_report(records: tuple[CopyRecord, ...], outcome: CopyOutcome, path: Path) -> None:
    """Persist an audit log as JSON."""
    payload = {
        "outcome": outcome.value,
        "records": [record.to_dict() for record in records],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def run_until_done(engine: FileCopyEngine, source: Path, destination: Path, reporter) -> CopyOutcome:
    """Run the copy on a background thread so Ctrl+C can cancel it."""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="treecopy-run")
    try:
        future = executor.submit(engine.copy, source, destination)
        while True:
            try:
                # Short timeout keeps the main thread responsive to SIGINT
                return future.result(timeout=0.5)
            except FutureTimeout:
                continue
            except KeyboardInterrupt:
                reporter.warning("Interrupted, cancelling and rolling back...")
                engine.cancel()
    finally:
        executor.shutdown(wait=True)


def cmd_copy(args: argparse.Namespace, reporter) -> int:
    """Handle the copy command."""
    config = CopyConfig(
        concurrency=args.concurrency,
        buffer_size=args.buffer_size,
        conflict_mode=ConflictMode(args.on_conflict),
        include_non_regular=args.include_special,
        audit_logging=not args.no_audit,
    )

    reporter.print_header("treecopy copy")
    reporter.print_config({
        "Source": str(args.source),
        "Destination": str(args.destination),
        "Concurrency": config.concurrency,
        "Buffer Size": f"{config.buffer_size} bytes",
        "On Conflict": config.conflict_mode.value,
        "Special Files": config.include_non_regular,
        "Audit Log": config.audit_logging,
    })

    engine = FileCopyEngine(config=config, progress=reporter)
    outcome = run_until_done(engine, args.source, args.destination, reporter)

    records = engine.audit_log()
    reporter.print_stats(engine.stats())
    reporter.print_records(records)

    if args.report:
        write_report(records, outcome, args.report)
        reporter.info(f"Audit log written to {args.report}")

    if outcome == CopyOutcome.SUCCESS:
        reporter.success("Copy finished")
        return EXIT_OK
    if outcome == CopyOutcome.CANCELLED:
        reporter.warning("Copy cancelled; copied files were rolled back")
        return EXIT_CANCELLED

    reporter.error(f"Copy failed: {outcome.value}")
    return EXIT_FAILED


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Create reporter
    if getattr(args, "quiet", False):
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=getattr(args, "verbose", False))

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return EXIT_OK

    try:
        if args.command == "copy":
            return cmd_copy(args, reporter)
        reporter.error(f"Unknown command: {args.command}")
        return EXIT_FAILED

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return EXIT_CANCELLED
    except ValueError as e:
        reporter.error(f"Invalid option: {e}")
        return EXIT_FAILED
    except Exception as e:
        reporter.error(f"Error: {e}")
        if getattr(args, "verbose", False):
            import traceback
            traceback.print_exc()
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
