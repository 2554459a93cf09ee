"""
LangGraph workflow for maintenance report generation.
"""

import time
import uuid
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from langgraph.graph import StateGraph, END

from src.client import DataServiceClient
from src.orchestration.state import ReportState
from src.orchestration.nodes import (
    initialize_report,
    aggregate_data,
    compose_report,
    finalize_report,
)
from src.schemas.models import MaintenanceRecord, Signatures
from utils.config import config
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="WORKFLOW")


def has_error(state: ReportState) -> Literal["error", "continue"]:
    """Route to END once a node recorded a fatal error."""
    return "error" if state.get("error") else "continue"


def create_report_workflow(client) -> StateGraph:
    """
    Create the report generation workflow.

    Args:
        client: Data service client used by the aggregation node

    Returns:
        Configured StateGraph
    """
    workflow = StateGraph(ReportState)

    workflow.add_node("initialize", initialize_report)
    workflow.add_node("aggregate", lambda state: aggregate_data(state, client))
    workflow.add_node("compose", compose_report)
    workflow.add_node("finalize", finalize_report)

    workflow.set_entry_point("initialize")

    for source, target in (("initialize", "aggregate"), ("aggregate", "compose"), ("compose", "finalize")):
        workflow.add_conditional_edges(
            source,
            has_error,
            {"error": END, "continue": target}
        )

    workflow.add_edge("finalize", END)

    return workflow


def run_report_generation(
    transformer_number: str,
    record_id: Optional[int] = None,
    draft: Optional[MaintenanceRecord] = None,
    signatures: Optional[Signatures] = None,
    output_path: Optional[Union[str, Path]] = None,
    client: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Run the complete report workflow for one transformer.

    Args:
        transformer_number: Transformer to report on
        record_id: Existing maintenance record to print
        draft: Unsaved record to print; takes precedence over record_id
        signatures: Optional signature captures
        output_path: Optional PDF path, defaults to REPORT_DIR
        client: Data service client, a default client otherwise

    Returns:
        Final report state; "error" is set if the report could not be produced
    """
    owns_client = client is None
    client = client or DataServiceClient()

    initial_state: ReportState = {
        "transformer_number": transformer_number,
        "record_id": record_id,
        "draft": draft,
        "signatures": signatures,
        "output_path": str(output_path) if output_path else None,
        "request_id": str(uuid.uuid4())[:8],
        "start_time": time.time(),
        "report_data": None,
        "report_path": None,
        "processing_time": None,
        "error": None,
        "error_type": None,
        "current_step": "pending"
    }

    try:
        app = create_report_workflow(client).compile()
        final_state = app.invoke(initial_state)
        if final_state.get("error"):
            logger.warning(f"Report generation stopped at {final_state['current_step']}: {final_state['error']}")
        return final_state
    finally:
        if owns_client:
            client.close()
