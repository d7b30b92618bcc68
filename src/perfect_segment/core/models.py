"""Data models shared by the tiler, the pattern filler and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError, InvalidInputError


@dataclass(frozen=True, slots=True)
class LengthSpace:
    """Target length and the block size every segment must be aligned to."""

    total_length: int
    block_size: int

    @property
    def total_blocks(self) -> int:
        return self.total_length // self.block_size

    def validate(self) -> None:
        """Raises ConfigurationError unless block_size evenly divides total_length."""

        if self.total_length <= 0:
            raise ConfigurationError(f"Total length must be positive, got {self.total_length}")
        if self.block_size <= 0:
            raise ConfigurationError(f"Block size must be positive, got {self.block_size}")
        if self.total_length % self.block_size:
            raise ConfigurationError(
                f"Block size {self.block_size} does not evenly divide total length {self.total_length}"
            )


@dataclass(frozen=True, slots=True)
class SegmentCandidate:
    """A segment size together with how many times it tiles the total length."""

    size: int
    repetitions: int


@dataclass(frozen=True, slots=True)
class FillSpec:
    """Literal bytes to tile into a segment of the given length."""

    segment_length: int
    literal: bytes

    @property
    def literal_length(self) -> int:
        return len(self.literal)

    def validate(self) -> None:
        """Raises InvalidInputError unless 1 <= len(literal) < segment_length."""

        if self.segment_length <= 0:
            raise InvalidInputError(f"Segment length must be positive, got {self.segment_length}")
        validate_literal_length(self.literal_length, self.segment_length)


@dataclass(frozen=True, slots=True)
class PatternUnit:
    """Repeating unit: the literal followed by padding_length zero bytes."""

    unit_length: int
    padding_length: int

    @property
    def literal_length(self) -> int:
        return self.unit_length - self.padding_length

    def repetitions_in(self, segment_length: int) -> int:
        return segment_length // self.unit_length


@dataclass(frozen=True, slots=True)
class SegmentFile:
    """Outcome of a verified segment write."""

    path: Path
    segment_length: int
    unit: PatternUnit
    bytes_written: int


def validate_literal_length(literal_length: int, bound: int) -> None:
    """Raises InvalidInputError unless 1 <= literal_length < bound."""

    if literal_length < 1:
        raise InvalidInputError("Literal must be at least 1 byte long")
    if literal_length >= bound:
        raise InvalidInputError(
            f"Literal length must be between 1 and {bound - 1} bytes, got {literal_length}"
        )


@dataclass(frozen=True, slots=True)
class SegmentPlan:
    """Candidate listing for one length space, as exported by the reporting layer."""

    space: LengthSpace
    candidates: tuple[SegmentCandidate, ...]
