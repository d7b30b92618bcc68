"""Numbered segment-size menu and the re-prompt loop around it."""

from __future__ import annotations

from typing import Callable, Sequence

import structlog

from .errors import SelectionError
from .models import SegmentCandidate

logger = structlog.get_logger(__name__)

_UNITS = ("B", "K", "M", "G", "T", "P")


def format_size(size: int) -> str:
    """Formats a byte count with binary prefixes, e.g. ``4096 -> "4.00 KB"``."""

    value = float(size)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1
    if index == 0:
        return f"{value:.2f} B"
    return f"{value:.2f} {_UNITS[index]}B"


def render_menu(candidates: Sequence[SegmentCandidate]) -> list[str]:
    return [
        f"  {index}) {candidate.size:12d} bytes ({format_size(candidate.size)}) x{candidate.repetitions}"
        for index, candidate in enumerate(candidates, start=1)
    ]


def parse_choice(raw: str, count: int) -> int:
    """Parses a 1-based menu choice and returns the 0-based index."""

    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise SelectionError(f"Invalid input. Please enter a number between 1 and {count}.")
    choice = int(text)
    if not 1 <= choice <= count:
        raise SelectionError(f"Invalid input. Please enter a number between 1 and {count}.")
    return choice - 1


def prompt_choice(
    candidates: Sequence[SegmentCandidate],
    read_line: Callable[[str], str] = input,
    write: Callable[[str], object] = print,
) -> SegmentCandidate:
    """Asks for a menu number until a valid one is entered.

    Invalid input is reported and re-prompted without limit. End of input
    cannot be recovered from and is raised as SelectionError.
    """

    count = len(candidates)
    if count == 0:
        raise SelectionError("No segment sizes to choose from")

    while True:
        try:
            raw = read_line(f"Enter your choice (1-{count}): ")
        except EOFError as exc:
            raise SelectionError("Input closed before a segment size was chosen") from exc
        try:
            index = parse_choice(raw, count)
        except SelectionError as exc:
            logger.debug("invalid-choice", raw=raw)
            write(str(exc))
            continue
        return candidates[index]
