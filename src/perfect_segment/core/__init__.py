"""Domain logic: divisor tiling, pattern construction, segment selection."""

from . import menu, models, pattern, tiler
from .errors import (
    ConfigurationError,
    InvalidInputError,
    NoCandidatesError,
    SegmentError,
    SelectionError,
    VerificationError,
)
from .pattern import compute_unit, materialize, write_segment_file
from .tiler import divisors, enumerate_segments, require_candidates

__all__ = [
	"menu",
	"models",
	"pattern",
	"tiler",
	"SegmentError",
	"ConfigurationError",
	"InvalidInputError",
	"NoCandidatesError",
	"SelectionError",
	"VerificationError",
	"compute_unit",
	"materialize",
	"write_segment_file",
	"divisors",
	"enumerate_segments",
	"require_candidates",
]
