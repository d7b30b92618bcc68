"""Tiles a fixed-length source file across a device, restarting at offset 0 every cycle."""

from __future__ import annotations

import mmap
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from structlog import get_logger

from .base import BlockWriter, WriterError

logger = get_logger(__name__)

DEFAULT_BLOCK_SIZE = 1024 * 1024

_datasync = getattr(os, "fdatasync", os.fsync)


def check_source(source: Path, block_size: int, *, direct: bool = False) -> int:
    """Validates the source file and returns its length in bytes."""

    source = Path(source)
    if block_size <= 0:
        raise WriterError(f"Block size must be positive, got {block_size}")
    if not source.is_file():
        raise WriterError(f"Source file not found: {source}")
    size = source.stat().st_size
    if size == 0:
        raise WriterError(f"Source file is empty: {source}")
    if direct and size % block_size:
        raise WriterError(
            f"Source length {size} is not a multiple of the {block_size}-byte block size required for direct I/O"
        )
    return size


def target_length(target: Path) -> int:
    """Returns the byte length of the target; 0 when it does not exist yet.

    Block devices report their size through lseek, regular files through stat.
    """

    target = Path(target)
    if target.is_block_device():
        fd = os.open(target, os.O_RDONLY)
        try:
            return os.lseek(fd, 0, os.SEEK_END)
        finally:
            os.close(fd)
    if target.is_file():
        return target.stat().st_size
    return 0


def cyclic_blocks(source: Path, block_size: int, total: int) -> Iterator[bytes]:
    """Yields exactly ``total`` bytes of ``source`` repeated end to end.

    Every block but the last is exactly ``block_size`` bytes; reads wrap to
    the start of the source at end-of-file.
    """

    if block_size <= 0:
        raise WriterError(f"Block size must be positive, got {block_size}")

    remaining = total
    with Path(source).open("rb") as handle:
        while remaining > 0:
            want = min(block_size, remaining)
            parts: list[bytes] = []
            filled = 0
            while filled < want:
                data = handle.read(want - filled)
                if not data:
                    if handle.tell() == 0:
                        raise WriterError(f"Source file is empty: {source}")
                    handle.seek(0)
                    continue
                parts.append(data)
                filled += len(data)
            remaining -= want
            yield b"".join(parts)


@dataclass(slots=True)
class EtchReport:
    """Summary of an etch loop."""

    cycles_completed: int = 0
    bytes_written: int = 0
    error: str | None = None
    interrupted: bool = False

    @property
    def halted(self) -> bool:
        """True when the loop stopped because a cycle failed."""

        return self.error is not None


class DeviceWriter:
    """Writes the source onto the target from offset 0 on every cycle.

    A cycle is the source repeated end to end over ``block_size * count``
    bytes, or without ``count`` over the whole target: the device length for
    block devices, and for regular files the current size but never less than
    one pass of the source.
    ``direct`` opens the target with O_DIRECT (where the platform has it) and
    writes from a page-aligned buffer.
    """

    name = "device-writer"

    def __init__(
        self,
        source: Path,
        target: Path,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        count: int | None = None,
        direct: bool = False,
        sync: bool = True,
    ) -> None:
        self._source = Path(source)
        self._target = Path(target)
        self._block_size = block_size
        self._direct = direct
        self._sync = sync
        self._buffer: mmap.mmap | None = None

        if count is not None and count <= 0:
            raise WriterError(f"Block count must be positive, got {count}")
        source_size = check_source(self._source, block_size)
        if count is not None:
            self.cycle_length = block_size * count
        elif self._target.is_block_device():
            self.cycle_length = target_length(self._target)
        else:
            self.cycle_length = max(target_length(self._target), source_size)
        if self.cycle_length <= 0:
            raise WriterError(f"Target has no room to write: {self._target}")
        if direct and self.cycle_length % block_size:
            raise WriterError(
                f"Cycle length {self.cycle_length} is not a multiple of the {block_size}-byte block size required for direct I/O"
            )

    def write_cycle(self) -> int:
        fd = os.open(self._target, self._open_flags(), 0o644)
        written = 0
        try:
            for block in cyclic_blocks(self._source, self._block_size, self.cycle_length):
                written += self._write_block(fd, block)
            if self._sync:
                _datasync(fd)
        finally:
            os.close(fd)
        return written

    def close(self) -> None:
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _open_flags(self) -> int:
        flags = os.O_WRONLY | os.O_CREAT
        if not self._target.is_block_device():
            flags |= os.O_TRUNC
        if self._direct:
            flags |= getattr(os, "O_DIRECT", 0)
        return flags

    def _write_block(self, fd: int, block: bytes) -> int:
        if self._direct:
            if self._buffer is None:
                self._buffer = mmap.mmap(-1, self._block_size)
            self._buffer[: len(block)] = block
            view = memoryview(self._buffer)[: len(block)]
        else:
            view = memoryview(block)

        total = 0
        try:
            while total < len(view):
                count = os.write(fd, view[total:])
                if count == 0:
                    raise WriterError(f"Short write to {self._target} after {total} bytes")
                total += count
        finally:
            view.release()
        return total


def etch(
    writer: BlockWriter,
    *,
    max_cycles: int | None = None,
    report: EtchReport | None = None,
) -> EtchReport:
    """Runs write cycles until one fails, ``max_cycles`` is reached or the user interrupts.

    A failed cycle stops the loop; nothing is retried or resumed. Pass
    ``report`` to keep progress visible if the loop dies with an unexpected
    exception.
    """

    report = report if report is not None else EtchReport()
    try:
        while max_cycles is None or report.cycles_completed < max_cycles:
            cycle = report.cycles_completed + 1
            logger.info("cycle-started", writer=writer.name, cycle=cycle)
            try:
                written = writer.write_cycle()
            except (OSError, WriterError) as exc:
                report.error = str(exc)
                logger.error("cycle-failed", cycle=cycle, error=str(exc))
                break
            report.cycles_completed = cycle
            report.bytes_written += written
            logger.info("cycle-completed", cycle=cycle, bytes=written)
    except KeyboardInterrupt:
        report.interrupted = True
        logger.warning("etch-interrupted", cycles=report.cycles_completed)

    logger.info(
        "etch-finished",
        cycles=report.cycles_completed,
        bytes=report.bytes_written,
        halted=report.halted,
    )
    return report
