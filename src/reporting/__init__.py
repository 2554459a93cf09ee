"""
Reporting module for maintenance reports.
"""

from src.reporting.composer import (
    build_blocks,
    compose,
    format_detection_line,
    format_reading,
    generate_report,
)
from src.reporting.submission import MaintenanceDraftSession, submit_maintenance_report

__all__ = [
    "build_blocks",
    "compose",
    "format_detection_line",
    "format_reading",
    "generate_report",
    "MaintenanceDraftSession",
    "submit_maintenance_report",
]
