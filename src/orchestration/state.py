"""
State definition for the report generation workflow.
"""

from __future__ import annotations

from typing import TypedDict, Optional, List, Tuple

from src.schemas.models import MaintenanceRecord, ReportData, Signatures


def validate_state(state: ReportState, required_fields: Optional[List[str]] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate report state before running the workflow.

    Args:
        state: Report state to validate
        required_fields: Optional list of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(state, dict):
        return False, "State must be a dictionary"

    if required_fields is None:
        required_fields = ["transformer_number", "current_step"]

    missing_fields = [field for field in required_fields if field not in state or state[field] is None]
    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    transformer_number = state.get("transformer_number")
    if not isinstance(transformer_number, str) or not transformer_number.strip():
        return False, "transformer_number must be a non-empty string"

    record_id = state.get("record_id")
    if record_id is not None and not isinstance(record_id, int):
        return False, f"record_id must be an integer, got {type(record_id).__name__}"

    signatures = state.get("signatures")
    if signatures is not None and not isinstance(signatures, Signatures):
        return False, "signatures must be a Signatures instance"

    return True, None


class ReportState(TypedDict):
    """State for report generation workflow."""

    # Input
    transformer_number: str
    record_id: Optional[int]  # Existing record to print
    draft: Optional[MaintenanceRecord]  # Unsaved record to print instead
    signatures: Optional[Signatures]
    output_path: Optional[str]

    # Request tracking
    request_id: str
    start_time: float

    # Results
    report_data: Optional[ReportData]
    report_path: Optional[str]

    # Metadata
    processing_time: Optional[float]
    error: Optional[str]
    error_type: Optional[str]  # Exception class name of a fatal error
    current_step: str
