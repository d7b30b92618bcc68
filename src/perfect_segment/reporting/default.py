"""Default plan exporter (CSV/JSON)."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List

from perfect_segment.core.menu import format_size
from perfect_segment.core.models import SegmentCandidate, SegmentPlan
from .exporter import ExportFormat, PlanExporter

CSV_FIELDS = ("index", "size", "human_size", "repetitions")


class DefaultPlanExporter(PlanExporter):
    """Writes the candidate segment sizes of a plan to CSV or JSON."""

    def export(self, plan: SegmentPlan, destination: Path, fmt: ExportFormat) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        if fmt is ExportFormat.JSON:
            payload = self._build_json_payload(plan)
            destination.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        elif fmt is ExportFormat.CSV:
            self._write_csv(plan, destination)
        else:  # pragma: no cover - future formats
            raise ValueError(f"Unsupported export format: {fmt}")

        return destination

    def _build_json_payload(self, plan: SegmentPlan) -> Dict[str, object]:
        return {
            "total_length": plan.space.total_length,
            "block_size": plan.space.block_size,
            "total_blocks": plan.space.total_blocks,
            "candidates": self._rows(plan.candidates),
        }

    def _write_csv(self, plan: SegmentPlan, destination: Path) -> None:
        with destination.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS)
            writer.writeheader()
            writer.writerows(self._rows(plan.candidates))

    @staticmethod
    def _rows(candidates: tuple[SegmentCandidate, ...]) -> List[Dict[str, object]]:
        return [
            {
                "index": index,
                "size": candidate.size,
                "human_size": format_size(candidate.size),
                "repetitions": candidate.repetitions,
            }
            for index, candidate in enumerate(candidates, start=1)
        ]
