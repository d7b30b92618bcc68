"""Exception hierarchy for segment planning and generation."""

from __future__ import annotations


class SegmentError(RuntimeError):
    """Base class for all domain errors raised by perfect-segment."""


class ConfigurationError(SegmentError):
    """The length space is unusable (e.g. block size does not divide the total length)."""


class InvalidInputError(SegmentError):
    """A caller-supplied value is out of bounds (literal length, argument count)."""


class NoCandidatesError(SegmentError):
    """The divisor search produced no segment sizes under the active filter."""


class SelectionError(SegmentError):
    """Menu input is not a valid choice. Recoverable: the caller re-prompts."""


class VerificationError(SegmentError):
    """A written segment does not match its expected length or content."""
