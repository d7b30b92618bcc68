"""Tests for segment enumeration."""

from __future__ import annotations

import pytest

from perfect_segment.core.errors import ConfigurationError, NoCandidatesError
from perfect_segment.core.models import SegmentCandidate
from perfect_segment.core.tiler import divisors, enumerate_segments, require_candidates


def _brute_divisors(n: int) -> list[int]:
    return [i for i in range(1, n + 1) if n % i == 0]


@pytest.mark.parametrize("n", [1, 2, 7, 12, 36, 97, 360, 1024, 9973 * 2])
def test_divisors_matches_trial_division(n: int) -> None:
    assert divisors(n) == _brute_divisors(n)


@pytest.mark.parametrize("n", [0, -4])
def test_divisors_rejects_non_positive(n: int) -> None:
    with pytest.raises(ValueError):
        divisors(n)


def test_small_disk_candidates() -> None:
    assert enumerate_segments(16, 4) == [
        SegmentCandidate(size=4, repetitions=4),
        SegmentCandidate(size=8, repetitions=2),
        SegmentCandidate(size=16, repetitions=1),
    ]


def test_block_size_must_divide_total_length() -> None:
    with pytest.raises(ConfigurationError):
        enumerate_segments(100, 30)


@pytest.mark.parametrize("total_length, block_size", [(0, 4), (16, 0), (-16, 4)])
def test_non_positive_lengths_are_configuration_errors(total_length: int, block_size: int) -> None:
    with pytest.raises(ConfigurationError):
        enumerate_segments(total_length, block_size)


@pytest.mark.parametrize(
    "total_length, block_size",
    [(16, 4), (4096, 512), (360 * 8, 8), (7 * 512, 512), (512, 512), (2**10 * 3**2 * 5, 2**4)],
)
def test_candidates_are_exactly_the_block_aligned_divisors(total_length: int, block_size: int) -> None:
    candidates = enumerate_segments(total_length, block_size)
    sizes = [c.size for c in candidates]

    total_blocks = total_length // block_size
    expected = sorted(block_size * i for i in range(1, total_blocks + 1) if total_blocks % i == 0)

    assert sizes == expected
    assert len(set(sizes)) == len(sizes)
    for candidate in candidates:
        assert candidate.size % block_size == 0
        assert total_length % candidate.size == 0
        assert candidate.repetitions == total_length // candidate.size
    assert candidates[-1] == SegmentCandidate(size=total_length, repetitions=1)


def test_repetitions_descend_as_sizes_ascend() -> None:
    candidates = enumerate_segments(2**10 * 3**2 * 5, 2**4)
    repetitions = [c.repetitions for c in candidates]
    assert repetitions == sorted(repetitions, reverse=True)


def test_range_filter_is_inclusive() -> None:
    assert [c.size for c in enumerate_segments(16, 4, range_min=8)] == [8, 16]
    assert [c.size for c in enumerate_segments(16, 4, range_max=8)] == [4, 8]
    assert [c.size for c in enumerate_segments(16, 4, range_min=8, range_max=8)] == [8]


def test_empty_filter_returns_empty_list_but_require_raises() -> None:
    assert enumerate_segments(16, 4, range_min=5, range_max=7) == []
    with pytest.raises(NoCandidatesError):
        require_candidates(16, 4, range_min=5, range_max=7)


def test_full_size_disk_enumeration() -> None:
    # 250059350016 = 2**13 * 3**3 * 7 * 161507 -> 61049646 blocks of 4 KiB
    candidates = enumerate_segments(250059350016, 4096)

    assert len(candidates) == 32
    assert candidates[0] == SegmentCandidate(size=4096, repetitions=61049646)
    assert candidates[-1] == SegmentCandidate(size=250059350016, repetitions=1)
    sizes = {c.size for c in candidates}
    assert 4096 * 27 in sizes
    assert 4096 * 13 not in sizes
