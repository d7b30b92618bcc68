"""CLI entrypoint for repeatedly etching a segment file onto a device."""

from __future__ import annotations

import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path

import structlog

from perfect_segment.shared import RunContext, configure_logging, write_error_report

from .base import WriterError
from .writer import DEFAULT_BLOCK_SIZE, DeviceWriter, EtchReport, etch


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="perfect-segment-etch",
        description="Stream a segment file onto a block device over and over until a write fails.",
    )
    parser.add_argument("source", type=Path, help="Segment file to write (e.g. perfect_segment.bin)")
    parser.add_argument("target", type=Path, help="Block device or file to write to (e.g. /dev/sdb)")
    parser.add_argument(
        "--block-size",
        type=int,
        default=DEFAULT_BLOCK_SIZE,
        help="Write size in bytes (default: 1048576)",
    )
    parser.add_argument(
        "--count",
        type=int,
        help="Blocks written per cycle; defaults to the whole target (device length)",
    )
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Bypass the page cache (O_DIRECT); writes must be block aligned",
    )
    parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Skip fdatasync at the end of each cycle",
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        help="Stop after this many successful cycles (default: run until failure or Ctrl+C)",
    )
    parser.add_argument("--verbose", action="store_true", help="Show debug logs")
    return parser


def _run_etch(args: Namespace) -> int:
    logger = structlog.get_logger(__name__)
    writer: DeviceWriter | None = None
    report = EtchReport()
    run = RunContext(command="etch", source=args.source, target=args.target)

    try:
        writer = DeviceWriter(
            args.source,
            args.target,
            block_size=args.block_size,
            count=args.count,
            direct=args.direct,
            sync=not args.no_sync,
        )
        run.cycle_length = writer.cycle_length
        logger.info(
            "etch-starting",
            source=str(args.source),
            target=str(args.target),
            cycle_bytes=writer.cycle_length,
            hint="Press Ctrl+C to stop",
        )
        report = etch(writer, max_cycles=args.max_cycles, report=report)
        return 1 if report.halted else 0

    except (WriterError, OSError) as exc:
        logger.error("etch-failed", error=str(exc))
        return 1
    except Exception as exc:
        run.cycles_completed = report.cycles_completed
        report_file = write_error_report(exc, run)
        logger.exception("etch-crashed", error=str(exc), report=str(report_file.path))
        return 1
    finally:
        if writer is not None:
            writer.close()


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    configure_logging(level=10 if args.verbose else 20)
    return _run_etch(args)


if __name__ == "__main__":
    sys.exit(main())
