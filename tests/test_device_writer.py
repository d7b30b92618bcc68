"""Tests for the device writer and the etch loop."""

from __future__ import annotations

import mmap
import os
from pathlib import Path

import pytest

from perfect_segment.devices import (
    DeviceWriter,
    EtchReport,
    WriterError,
    check_source,
    cyclic_blocks,
    etch,
    target_length,
)
from perfect_segment.devices import writer as writer_module


def test_cyclic_blocks_wrap_around_the_source(tmp_path) -> None:
    source = tmp_path / "src.bin"
    source.write_bytes(b"abc")

    blocks = list(cyclic_blocks(source, 2, 7))

    assert blocks == [b"ab", b"ca", b"bc", b"a"]


def test_cyclic_blocks_empty_source(tmp_path) -> None:
    source = tmp_path / "empty.bin"
    source.write_bytes(b"")

    with pytest.raises(WriterError):
        list(cyclic_blocks(source, 4, 8))


def test_check_source(tmp_path) -> None:
    source = tmp_path / "src.bin"
    source.write_bytes(b"x" * 12)

    assert check_source(source, 4) == 12
    assert check_source(source, 8) == 12
    with pytest.raises(WriterError):
        check_source(source, 8, direct=True)
    with pytest.raises(WriterError):
        check_source(tmp_path / "missing.bin", 4)


def test_one_cycle_writes_one_pass(tmp_path) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "target.img"
    source.write_bytes(b"abc\x00\x00abc\x00\x00")

    writer = DeviceWriter(source, target, block_size=4)
    try:
        assert writer.cycle_length == 10
        assert writer.write_cycle() == 10
    finally:
        writer.close()

    assert target.read_bytes() == source.read_bytes()


def test_count_repeats_the_source_within_a_cycle(tmp_path) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "target.img"
    source.write_bytes(b"abcdef")

    writer = DeviceWriter(source, target, block_size=4, count=3, sync=False)
    assert writer.write_cycle() == 12

    assert target.read_bytes() == b"abcdefabcdef"


def test_invalid_count(tmp_path) -> None:
    source = tmp_path / "src.bin"
    source.write_bytes(b"abcd")
    with pytest.raises(WriterError):
        DeviceWriter(source, tmp_path / "t.img", block_size=4, count=0)


def test_etch_restarts_each_cycle_from_the_start(tmp_path) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "target.img"
    source.write_bytes(b"0123456789")

    writer = DeviceWriter(source, target, block_size=3)
    report = etch(writer, max_cycles=3)
    writer.close()

    assert report == EtchReport(cycles_completed=3, bytes_written=30)
    assert not report.halted
    assert target.read_bytes() == b"0123456789"


class _ScriptedWriter:
    name = "scripted"

    def __init__(self, outcomes) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    def write_cycle(self) -> int:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


def test_etch_stops_on_first_failed_cycle() -> None:
    writer = _ScriptedWriter([100, OSError(28, "No space left on device"), 100])

    report = etch(writer)

    assert writer.calls == 2
    assert report.cycles_completed == 1
    assert report.bytes_written == 100
    assert report.halted
    assert "No space left on device" in report.error


def test_etch_stops_on_writer_error() -> None:
    report = etch(_ScriptedWriter([WriterError("short write")]))
    assert report.cycles_completed == 0
    assert report.error == "short write"


def test_etch_interrupt_is_not_a_failure() -> None:
    report = etch(_ScriptedWriter([50, KeyboardInterrupt()]))

    assert report.interrupted
    assert not report.halted
    assert report.cycles_completed == 1


def test_target_length(tmp_path) -> None:
    target = tmp_path / "disk.img"
    assert target_length(target) == 0

    target.write_bytes(b"\x00" * 24)
    assert target_length(target) == 24


def test_cycle_tiles_the_whole_existing_target(tmp_path) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "disk.img"
    source.write_bytes(b"abab")
    target.write_bytes(b"\x00" * 16)

    writer = DeviceWriter(source, target, block_size=4, sync=False)
    assert writer.cycle_length == 16
    assert writer.write_cycle() == 16

    assert target.read_bytes() == b"abab" * 4


def test_block_device_cycle_uses_the_device_length(tmp_path, monkeypatch) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "disk.img"
    source.write_bytes(b"ab")
    target.write_bytes(b"\x00" * 12)
    monkeypatch.setattr(Path, "is_block_device", lambda self: self == target)

    writer = DeviceWriter(source, target, block_size=4, sync=False)
    assert writer.cycle_length == 12
    writer.write_cycle()

    assert target.read_bytes() == b"ab" * 6


def test_direct_mode_reuses_one_aligned_buffer(tmp_path, monkeypatch) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "disk.img"
    source.write_bytes(b"abcdefgh")
    # tmpfs rejects O_DIRECT; the buffer handling is what is under test
    monkeypatch.setattr(os, "O_DIRECT", 0, raising=False)
    created: list[mmap.mmap] = []
    real_mmap = mmap.mmap

    def tracking_mmap(*args, **kwargs):
        buffer = real_mmap(*args, **kwargs)
        created.append(buffer)
        return buffer

    monkeypatch.setattr(writer_module.mmap, "mmap", tracking_mmap)

    writer = DeviceWriter(source, target, block_size=4, direct=True)
    report = etch(writer, max_cycles=2)
    writer.close()

    assert report == EtchReport(cycles_completed=2, bytes_written=16)
    assert target.read_bytes() == b"abcdefgh"
    assert len(created) == 1
    assert len(created[0]) == 4
    assert created[0].closed


def test_direct_mode_rejects_a_misaligned_cycle(tmp_path) -> None:
    source = tmp_path / "src.bin"
    target = tmp_path / "disk.img"
    source.write_bytes(b"abcdefgh")
    target.write_bytes(b"\x00" * 10)

    with pytest.raises(WriterError, match="direct I/O"):
        DeviceWriter(source, target, block_size=4, direct=True)
    with pytest.raises(WriterError, match="direct I/O"):
        DeviceWriter(source, tmp_path / "other.img", block_size=3, direct=True)
