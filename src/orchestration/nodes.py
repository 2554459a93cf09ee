"""
Workflow node functions for the report pipeline.
"""

import time
import uuid
from pathlib import Path

from src.aggregation import ReportDataAggregator
from src.errors import NotFound
from src.orchestration.state import ReportState, validate_state
from src.reporting.composer import generate_report
from utils.logger import setup_logger, set_request_id
from utils.config import config

logger = setup_logger(__name__, level=config.log_level, component="WORKFLOW")


def _fail(state: ReportState, error: Exception) -> ReportState:
    state["error"] = str(error)
    state["error_type"] = type(error).__name__
    state["current_step"] = "failed"
    return state


def initialize_report(state: ReportState) -> ReportState:
    """Initialize report state."""
    logger.info("=" * 80)
    logger.info("STARTING NEW MAINTENANCE REPORT")
    logger.info("=" * 80)

    # Set request ID for logging correlation
    request_id = state.get("request_id") or str(uuid.uuid4())[:8]
    set_request_id(request_id)

    state["request_id"] = request_id
    state["start_time"] = time.time()
    state["current_step"] = "initialized"

    is_valid, error = validate_state(state)
    if not is_valid:
        logger.error(f"Invalid report request: {error}")
        return _fail(state, ValueError(error))

    logger.info(f"Transformer: {state['transformer_number']}")
    if state.get("record_id") is not None:
        logger.info(f"Maintenance record: {state['record_id']}")
    elif state.get("draft") is not None:
        logger.info("Maintenance record: unsaved draft")
    else:
        logger.info("Maintenance record: new draft")

    return state


def aggregate_data(state: ReportState, client) -> ReportState:
    """Fetch and annotate everything the report needs."""
    state["current_step"] = "aggregating"

    try:
        aggregator = ReportDataAggregator(client)
        state["report_data"] = aggregator.aggregate(
            state["transformer_number"],
            record_id=state.get("record_id")
        )
    except NotFound as e:
        logger.error(str(e))
        return _fail(state, e)

    draft = state.get("draft")
    if draft is not None:
        data = state["report_data"]
        if not draft.inspection_numbers:
            draft = draft.model_copy(update={
                "inspection_numbers": [i.inspection_number for i in data.inspections]
            })
        state["report_data"] = data.with_record(draft)

    state["current_step"] = "aggregated"
    return state


def compose_report(state: ReportState) -> ReportState:
    """Lay out the report and write the PDF."""
    state["current_step"] = "composing"

    output_path = state.get("output_path")
    try:
        report_path = generate_report(
            state["report_data"],
            signatures=state.get("signatures"),
            output_path=Path(output_path) if output_path else None
        )
    except OSError as e:
        logger.error(f"Could not write report: {e}", exc_info=True)
        return _fail(state, e)

    state["report_path"] = str(report_path)
    state["current_step"] = "composed"
    return state


def finalize_report(state: ReportState) -> ReportState:
    """Finalize the run and log results."""
    state["current_step"] = "completed"
    state["processing_time"] = time.time() - state["start_time"]

    data = state.get("report_data")

    logger.info("=" * 80)
    logger.info("MAINTENANCE REPORT COMPLETE")
    logger.info(f"Request ID: {state['request_id']}")
    if data is not None:
        logger.info(f"Inspections: {len(data.inspections)}")
        logger.info(f"Images: {len(data.images)}")
    logger.info(f"Processing time: {state['processing_time']:.2f}s")
    if state.get("report_path"):
        logger.info(f"PDF Report: {state['report_path']}")
    logger.info("=" * 80)

    return state
