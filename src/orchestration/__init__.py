"""
Orchestration module for maintenance report generation.
"""

from src.orchestration.state import ReportState, validate_state
from src.orchestration.graph import (
    create_report_workflow,
    run_report_generation,
)

__all__ = [
    "ReportState",
    "validate_state",
    "create_report_workflow",
    "run_report_generation",
]
