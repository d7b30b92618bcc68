"""Builds the repeating pattern unit and writes segment files made of it."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator

import structlog

from .errors import InvalidInputError, VerificationError
from .models import FillSpec, PatternUnit, SegmentFile, validate_literal_length
from .tiler import divisors

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


def compute_unit(segment_length: int, literal_length: int) -> PatternUnit:
    """Returns the smallest unit (literal + zero padding) whose length divides the segment.

    The unit length is the smallest divisor of ``segment_length`` that is at
    least ``literal_length``; when nothing smaller fits this is the segment
    itself and the literal occurs exactly once.
    """

    if segment_length <= 0:
        raise InvalidInputError(f"Segment length must be positive, got {segment_length}")
    validate_literal_length(literal_length, segment_length)

    unit_length = next(d for d in divisors(segment_length) if d >= literal_length)
    return PatternUnit(unit_length=unit_length, padding_length=unit_length - literal_length)


def build_unit(literal: bytes, unit: PatternUnit) -> bytes:
    if len(literal) != unit.literal_length:
        raise InvalidInputError(
            f"Literal is {len(literal)} bytes but the unit expects {unit.literal_length}"
        )
    return bytes(literal) + b"\x00" * unit.padding_length


def iter_segment_chunks(
    literal: bytes,
    unit: PatternUnit,
    segment_length: int,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yields the segment content in order, totalling ``segment_length`` bytes.

    Units that fit in ``chunk_size`` are batched so every chunk holds whole
    units; a larger unit is emitted as the literal followed by its padding in
    zero-filled pieces of at most ``chunk_size`` bytes.
    """

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    repetitions = unit.repetitions_in(segment_length)
    if unit.unit_length <= chunk_size:
        per_chunk = chunk_size // unit.unit_length
        block = build_unit(literal, unit) * min(per_chunk, repetitions)
        remaining = repetitions
        while remaining >= per_chunk:
            yield block
            remaining -= per_chunk
        if remaining:
            yield block[: remaining * unit.unit_length]
        return

    zero_block = bytes(chunk_size)
    for _ in range(repetitions):
        yield bytes(literal)
        padding = unit.padding_length
        while padding > 0:
            size = min(padding, chunk_size)
            yield zero_block if size == chunk_size else bytes(size)
            padding -= size


def materialize(
    segment_length: int,
    literal: bytes,
    destination: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Writes ``segment_length / unit_length`` copies of the unit to ``destination``.

    Returns the number of bytes the sink accepted, which equals
    ``segment_length`` for any well-behaved sink. Write failures propagate as
    OSError.
    """

    spec = FillSpec(segment_length=segment_length, literal=bytes(literal))
    spec.validate()
    unit = compute_unit(segment_length, spec.literal_length)

    written = 0
    for chunk in iter_segment_chunks(spec.literal, unit, segment_length, chunk_size=chunk_size):
        count = destination.write(chunk)
        written += len(chunk) if count is None else count
    return written


def verify_segment_file(
    path: Path,
    segment_length: int,
    *,
    literal: bytes | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> None:
    """Checks the file size and, when ``literal`` is given, the full content."""

    path = Path(path)
    actual = path.stat().st_size
    if actual != segment_length:
        raise VerificationError(
            f"File creation failed. Expected {segment_length}, but got {actual} bytes"
        )
    if literal is None:
        return

    unit = compute_unit(segment_length, len(literal))
    offset = 0
    with path.open("rb") as handle:
        for expected in iter_segment_chunks(literal, unit, segment_length, chunk_size=chunk_size):
            data = handle.read(len(expected))
            if data != expected:
                raise VerificationError(f"Content mismatch in {path} near offset {offset}")
            offset += len(expected)


def write_segment_file(
    path: Path,
    segment_length: int,
    literal: bytes,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> SegmentFile:
    """Writes and verifies a segment file, replacing ``path`` only on success.

    Data goes to a temporary file in the destination directory which is
    fsynced, size-checked and then renamed over ``path``. On failure the
    temporary file is removed and the error propagates.
    """

    path = Path(path)
    spec = FillSpec(segment_length=segment_length, literal=bytes(literal))
    spec.validate()
    unit = compute_unit(segment_length, spec.literal_length)

    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    tmp_path = Path(tmp_name)

    logger.info("segment-write-started", path=str(path), segment_length=segment_length)
    try:
        with os.fdopen(fd, "wb") as handle:
            written = materialize(segment_length, spec.literal, handle, chunk_size=chunk_size)
            handle.flush()
            os.fsync(handle.fileno())
        if written != segment_length:
            raise VerificationError(
                f"File creation failed. Expected {segment_length}, but wrote {written} bytes"
            )
        verify_segment_file(tmp_path, segment_length)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("segment-write-verified", path=str(path), size=written)
    return SegmentFile(path=path, segment_length=segment_length, unit=unit, bytes_written=written)
