"""Shared modules: configuration, logging, error reports."""

from .config import AppConfig
from .error_reporting import ErrorReport, RunContext, get_error_reports_dir, write_error_report
from .logging import configure_logging

__all__ = [
	"AppConfig",
	"configure_logging",
	"ErrorReport",
	"get_error_reports_dir",
	"RunContext",
	"write_error_report",
]
