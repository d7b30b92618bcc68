"""Command-line interface: pick a segment size and generate the segment file."""

from __future__ import annotations

import os
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Callable, Sequence

import structlog

from perfect_segment.core import SegmentError, compute_unit, require_candidates, write_segment_file
from perfect_segment.core.errors import InvalidInputError
from perfect_segment.core.menu import format_size, parse_choice, prompt_choice, render_menu
from perfect_segment.core.models import FillSpec, LengthSpace, SegmentPlan, validate_literal_length
from perfect_segment.reporting import DefaultPlanExporter, ExportFormat
from perfect_segment.shared import AppConfig, RunContext, configure_logging, write_error_report


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="perfect-segment",
        description=(
            "Generate a segment file whose size is a block multiple that divides the disk "
            "length exactly, filled with a repeating string + zero padding pattern."
        ),
    )
    parser.add_argument(
        "literal",
        nargs="?",
        help="String to repeat in the segment (1 to block size - 1 bytes, taken as raw argument bytes)",
    )
    parser.add_argument(
        "--block-size",
        type=int,
        help="Physical block size in bytes (default: 4096 or PERFECTSEGMENT_BLOCK_SIZE)",
    )
    parser.add_argument(
        "--total-length",
        type=int,
        help="Disk length in bytes (default: 250059350016 or PERFECTSEGMENT_TOTAL_LENGTH)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Segment file path (default: perfect_segment.bin or PERFECTSEGMENT_OUTPUT)",
    )
    parser.add_argument("--min-size", type=int, help="Smallest segment size to offer")
    parser.add_argument("--max-size", type=int, help="Largest segment size to offer")
    parser.add_argument(
        "--choice",
        type=int,
        help="Menu number to use instead of prompting",
    )
    parser.add_argument(
        "--list-only",
        action="store_true",
        help="Print the segment sizes and exit without writing a file",
    )
    parser.add_argument(
        "--export",
        type=Path,
        help="Also write the list of segment sizes to this file",
    )
    parser.add_argument(
        "--format",
        choices=["json", "csv"],
        default="json",
        help="Format for --export (default: json)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logs",
    )
    return parser


def _run_grow(
    args: Namespace,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], object] = print,
) -> int:
    logger = structlog.get_logger(__name__)
    run = RunContext(command="grow")

    try:
        config = AppConfig.from_env().override(
            physical_block_size=args.block_size,
            total_length=args.total_length,
            output_file=args.output,
        )
        run.output = config.output_file
        space = LengthSpace(total_length=config.total_length, block_size=config.physical_block_size)
        space.validate()
        run.space = space

        literal = b""
        if not args.list_only:
            if args.literal is None:
                raise InvalidInputError("You must provide a text string as an argument")
            # Raw argv bytes, including ones that are not valid UTF-8.
            literal = os.fsencode(args.literal)
            run.literal_length = len(literal)
            validate_literal_length(len(literal), space.block_size)

        candidates = require_candidates(space.total_length, space.block_size, args.min_size, args.max_size)

        if args.export is not None:
            plan = SegmentPlan(space=space, candidates=tuple(candidates))
            path = DefaultPlanExporter().export(plan, args.export, ExportFormat(args.format))
            logger.info("plan-exported", path=str(path), format=args.format)

        write(f"Found {len(candidates)} valid segment lengths for a {space.total_length} byte disk.")
        if args.list_only:
            for line in render_menu(candidates):
                write(line)
            return 0

        write("Please choose a segment length for the output file:")
        for line in render_menu(candidates):
            write(line)

        if args.choice is not None:
            candidate = candidates[parse_choice(str(args.choice), len(candidates))]
        else:
            candidate = prompt_choice(candidates, read_line, write)
        run.segment = candidate

        write("")
        write(f"Selected segment length: {candidate.size} bytes ({format_size(candidate.size)}).")
        write(f"This segment will fit perfectly into the disk {candidate.repetitions} times.")

        FillSpec(segment_length=candidate.size, literal=literal).validate()
        unit = compute_unit(candidate.size, len(literal))
        logger.info(
            "pattern-computed",
            unit_length=unit.unit_length,
            literal_length=unit.literal_length,
            padding=unit.padding_length,
            repetitions=unit.repetitions_in(candidate.size),
        )

        result = write_segment_file(config.output_file, candidate.size, literal)
        write(f"Success! File '{result.path}' created with the correct size: {result.bytes_written} bytes.")
        return 0

    except SegmentError as exc:
        logger.error("segment-failed", kind=type(exc).__name__, error=str(exc))
        return 1
    except OSError as exc:
        logger.error("io-failed", error=str(exc), filename=getattr(exc, "filename", None))
        return 1
    except Exception as exc:
        report = write_error_report(exc, run)
        logger.exception("grow-crashed", error=str(exc), report=str(report.path))
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args, extra = parser.parse_known_args(argv)
    configure_logging(level=10 if args.verbose else 20)
    if extra:
        structlog.get_logger(__name__).error(
            "unexpected-arguments",
            arguments=extra,
            usage='perfect-segment "<your_string>"',
        )
        return 1
    return _run_grow(args)


if __name__ == "__main__":
    sys.exit(main())
