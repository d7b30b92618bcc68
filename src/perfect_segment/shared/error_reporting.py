"""Crash reports for failures the CLIs do not expect.

A report captures what the run was doing when it failed (length space,
chosen segment, literal length, etch progress) so it can be reproduced
without the terminal session.
"""

from __future__ import annotations

import json
import os
import platform
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any
from uuid import uuid4

from perfect_segment.core.models import LengthSpace, SegmentCandidate


@dataclass(frozen=True, slots=True)
class ErrorReport:
    path: Path
    created_at: datetime


@dataclass(slots=True)
class RunContext:
    """What a CLI run knew at the moment it failed; filled in as the run progresses."""

    command: str
    space: LengthSpace | None = None
    segment: SegmentCandidate | None = None
    literal_length: int | None = None
    output: Path | None = None
    source: Path | None = None
    target: Path | None = None
    cycle_length: int | None = None
    cycles_completed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"command": self.command}
        if self.space is not None:
            payload["total_length"] = self.space.total_length
            payload["block_size"] = self.space.block_size
        if self.segment is not None:
            payload["segment_size"] = self.segment.size
            payload["segment_repetitions"] = self.segment.repetitions
        for key in ("literal_length", "cycle_length", "cycles_completed"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        for key in ("output", "source", "target"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = str(value)
        return payload


def get_error_reports_dir() -> Path:
    """Returns the report directory, creating it if needed.

    `PERFECTSEGMENT_ERROR_DIR` wins; otherwise `~/.perfect_segment/error_reports`.
    """

    override = (os.getenv("PERFECTSEGMENT_ERROR_DIR") or "").strip()
    base = Path(override) if override else Path.home() / ".perfect_segment" / "error_reports"
    base.mkdir(parents=True, exist_ok=True)
    return base


def write_error_report(error: BaseException, run: RunContext) -> ErrorReport:
    """Writes a timestamped report for ``error`` and returns its location."""

    created_at = datetime.now(timezone.utc)
    path = get_error_reports_dir() / (
        f"{run.command}_{created_at.strftime('%Y%m%d_%H%M%S')}_{uuid4().hex[:8]}.txt"
    )

    try:
        version = metadata.version("perfect-segment")
    except metadata.PackageNotFoundError:
        version = "unknown"

    header = {
        "created_at": created_at.isoformat(),
        "version": version,
        "python": sys.version.replace("\n", " "),
        "platform": platform.platform(),
        "argv": list(sys.argv),
        "run": run.to_dict(),
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))

    path.write_text(
        f"perfect-segment {run.command} failure\n\n"
        + json.dumps(header, ensure_ascii=False, indent=2)
        + "\n\n"
        + trace,
        encoding="utf-8",
        errors="replace",
    )
    return ErrorReport(path=path, created_at=created_at)
