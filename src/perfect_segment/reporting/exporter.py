"""Export interfaces for segment plans."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol

from perfect_segment.core.models import SegmentPlan


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"


class PlanExporter(Protocol):
    """Interface for plan export backends."""

    def export(self, plan: SegmentPlan, destination: Path, fmt: ExportFormat) -> Path:
        """Exports the plan in the chosen format and returns the destination path."""
