"""Export of segment plans."""

from .default import DefaultPlanExporter
from .exporter import ExportFormat, PlanExporter

__all__ = ["PlanExporter", "ExportFormat", "DefaultPlanExporter"]
