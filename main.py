"""
Command line entry point for transformer maintenance reports.

Generates the annotated PDF report for a transformer and, optionally,
stores a new maintenance record with the data service.
"""

import argparse
import sys
from typing import List, Optional

from src.client import DataServiceClient
from src.errors import SubmissionFailed
from src.orchestration import run_report_generation
from src.reporting import MaintenanceDraftSession
from src.schemas.models import MaintenanceRecord, Signatures, TRANSFORMER_STATUSES
from utils.config import config
from utils.image_utils import load_optional_image
from utils.logger import setup_logger, print_banner, print_summary_panel, print_error
from utils.validators import (
    validate_reading,
    validate_record_id,
    validate_signature_path,
    validate_transformer_number,
    validate_transformer_status,
)

logger = setup_logger(__name__, level=config.log_level, component="MAIN")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maintenance-report",
        description="Generate a maintenance report PDF for a transformer."
    )
    parser.add_argument("transformer_number", help="Transformer to report on")
    parser.add_argument("--record", dest="record_id", help="Print an existing maintenance record by id")
    parser.add_argument("--output", help="Output PDF path (default: REPORT_DIR)")
    parser.add_argument("--technician-signature", help="PNG/JPEG of the technician signature")
    parser.add_argument("--supervisor-signature", help="PNG/JPEG of the supervisor signature")

    draft = parser.add_argument_group("new maintenance record")
    draft.add_argument("--inspector", help="Inspector name")
    draft.add_argument("--status", help=f"Transformer status, one of: {', '.join(TRANSFORMER_STATUSES)}")
    draft.add_argument("--voltage", help="Measured voltage (V)")
    draft.add_argument("--current", help="Measured current (A)")
    draft.add_argument("--action", help="Recommended action")
    draft.add_argument("--remarks", help="Additional remarks")
    draft.add_argument("--notes", help="Other notes")
    draft.add_argument(
        "--submit",
        action="store_true",
        help="Store the new maintenance record after generating the report"
    )
    return parser


def _draft_from_args(args: argparse.Namespace) -> Optional[MaintenanceRecord]:
    """Build a draft when any record field was given on the command line."""
    fields = (args.inspector, args.status, args.voltage, args.current, args.action, args.remarks, args.notes)
    if all(value is None for value in fields) and not args.submit:
        return None

    status = "Operational"
    if args.status is not None:
        is_valid, error, status = validate_transformer_status(args.status)
        if not is_valid:
            raise ValueError(error)

    readings = {}
    for name in ("voltage", "current"):
        is_valid, error, value = validate_reading(getattr(args, name), name)
        if not is_valid:
            raise ValueError(error)
        readings[name] = value

    return MaintenanceRecord(
        inspector_name=args.inspector or "",
        transformer_status=status,
        recommended_action=args.action or "",
        additional_remarks=args.remarks or "",
        other_notes=args.notes or "",
        **readings
    )


def _load_signatures(args: argparse.Namespace) -> Signatures:
    images = {}
    for role, path in (("technician", args.technician_signature), ("supervisor", args.supervisor_signature)):
        is_valid, error, signature_path = validate_signature_path(path)
        if not is_valid:
            raise ValueError(f"{role.capitalize()} signature: {error}")
        images[role] = load_optional_image(signature_path)
    return Signatures(**images)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the report command.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    print_banner()
    logger.info(f"Maintenance report CLI starting in {config.environment} environment")

    try:
        is_valid, error, transformer_number = validate_transformer_number(args.transformer_number)
        if not is_valid:
            raise ValueError(error)

        is_valid, error, record_id = validate_record_id(args.record_id)
        if not is_valid:
            raise ValueError(error)

        draft = _draft_from_args(args)
        if draft is not None and record_id is not None:
            raise ValueError("--record cannot be combined with new record fields")

        signatures = _load_signatures(args)
    except ValueError as e:
        print_error("Invalid Input", str(e))
        return 2

    with DataServiceClient() as client:
        state = run_report_generation(
            transformer_number,
            record_id=record_id,
            draft=draft,
            signatures=signatures,
            output_path=args.output,
            client=client
        )

        if state.get("error"):
            print_error(state.get("error_type") or "Report Failed", state["error"])
            return 1

        data = state["report_data"]
        print_summary_panel("Maintenance Report", {
            "Transformer": transformer_number,
            "Record": data.record.id if data.record.id is not None else "draft",
            "Inspections": len(data.inspections),
            "Annotated images": len(data.images),
            "Report": state["report_path"],
            "Time": f"{state['processing_time']:.2f}s",
        })

        if args.submit:
            session = MaintenanceDraftSession(client, transformer_number, data.record)
            try:
                ack = session.submit()
            except SubmissionFailed as e:
                print_error("Submission Failed", e.user_message, "The draft was kept; run again to retry.")
                return 1
            print_summary_panel("Maintenance Record Stored", {
                "Transformer": ack.transformer_number,
                "Record id": ack.record_id if ack.record_id is not None else "n/a",
                "Submitted": ack.submitted_at.strftime("%Y-%m-%d %H:%M:%S"),
            })

    return 0


if __name__ == "__main__":
    sys.exit(main())
