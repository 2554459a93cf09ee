"""
Maintenance report composition.

Turns aggregated ReportData into the ordered block stream and hands it to
the LayoutEngine. Composition is a pure function of its inputs: printing an
existing record and generating a fresh draft go through the same path.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from src.layout import (
    BorderedEntry,
    CommentEntry,
    ImageBlock,
    KeyValueRow,
    LayoutEngine,
    Paragraph,
    ReportBlock,
    SectionHeader,
    SignaturePair,
)
from src.schemas.models import Comment, Detection, Inspection, ReportData, Signatures
from utils.config import config, REPORT_DIR
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="REPORTS")

FOOTER_TEXT = "This is a computer-generated maintenance report"
NOT_AVAILABLE = "N/A"


# ============================================================================
# FORMATTING
# ============================================================================

def format_reading(value: Optional[float], unit: str) -> str:
    """
    Format an electrical reading with its unit, keeping the given precision.

    Examples:
        230.5 -> "230.5 V", 230.0 -> "230 V", None -> "N/A"
    """
    if value is None:
        return NOT_AVAILABLE
    if float(value).is_integer():
        return f"{int(value)} {unit}"
    return f"{value!r} {unit}"


def format_detection_line(detection: Detection) -> str:
    return f"- {detection.label} ({detection.confidence * 100:.1f}% confidence)"


def _or_na(value: Optional[str]) -> str:
    return value if value else NOT_AVAILABLE


def _comment_entry(comment: Comment) -> CommentEntry:
    return CommentEntry(
        topic=comment.topic or NOT_AVAILABLE,
        body=comment.comment or "",
        author=comment.author or "Unknown",
        timestamp=comment.timestamp_text,
    )


def _inspection_entry(data: ReportData, inspection: Inspection) -> BorderedEntry:
    number = inspection.inspection_number

    maintenance_line = None
    if inspection.maintenance_date:
        maintenance_line = f"Maintenance: {inspection.maintenance_date} at {_or_na(inspection.maintenance_time)}"

    return BorderedEntry(
        inspection_number=number,
        status=inspection.status,
        date_line=f"Date: {_or_na(inspection.inspection_date)} at {_or_na(inspection.inspection_time)}",
        branch_line=f"Branch: {_or_na(inspection.branch)}",
        maintenance_line=maintenance_line,
        issues=tuple(format_detection_line(d) for d in data.detections_for(number)),
        comments=tuple(_comment_entry(c) for c in data.comments_for(number)),
        image=ImageBlock(image=data.image_for(number)),
    )


# ============================================================================
# BLOCK STREAM
# ============================================================================

def build_blocks(data: ReportData, signatures: Optional[Signatures] = None) -> List[ReportBlock]:
    """
    Build the ordered block stream for a report.

    Sections: transformer information, electrical readings, recommended
    action, additional remarks and other notes when present, related
    inspections when there are any, signatures.

    Args:
        data: Aggregated report data bound to a record or draft
        signatures: Optional signature captures

    Returns:
        Blocks in placement order
    """
    signatures = signatures or Signatures()
    transformer = data.transformer
    record = data.record

    blocks: List[ReportBlock] = [
        SectionHeader("TRANSFORMER INFORMATION"),
        KeyValueRow(
            "Transformer Number:", transformer.transformer_number,
            "Pole Number:", _or_na(transformer.pole_number),
        ),
        KeyValueRow(
            "Type:", _or_na(transformer.type),
            "Region:", _or_na(transformer.region),
        ),
        KeyValueRow(
            "Status:", record.transformer_status,
            "Inspector:", _or_na(record.inspector_name),
            spacing_after=5,
        ),
        SectionHeader("ELECTRICAL READINGS"),
        KeyValueRow(
            "Voltage:", format_reading(record.voltage, "V"),
            "Current:", format_reading(record.current, "A"),
            spacing_after=5,
        ),
        SectionHeader("RECOMMENDED ACTION"),
        Paragraph(_or_na(record.recommended_action)),
    ]

    if record.additional_remarks:
        blocks.append(SectionHeader("ADDITIONAL REMARKS"))
        blocks.append(Paragraph(record.additional_remarks))

    if record.other_notes:
        blocks.append(SectionHeader("OTHER NOTES"))
        blocks.append(Paragraph(record.other_notes))

    if data.inspections:
        blocks.append(SectionHeader(f"RELATED INSPECTIONS ({len(data.inspections)})"))
        blocks.extend(_inspection_entry(data, inspection) for inspection in data.inspections)

    blocks.append(SignaturePair(technician=signatures.technician, supervisor=signatures.supervisor))
    return blocks


def compose(
    data: ReportData,
    signatures: Optional[Signatures] = None,
    engine: Optional[LayoutEngine] = None,
    generated_at: Optional[datetime] = None
) -> bytes:
    """
    Lay out a maintenance report.

    Args:
        data: Aggregated report data
        signatures: Optional signature captures
        engine: Layout engine to draw on; a default engine otherwise
        generated_at: Timestamp shown under the banner

    Returns:
        PDF document bytes
    """
    engine = engine or LayoutEngine()
    blocks = build_blocks(data, signatures)

    logger.debug(f"Composing {len(blocks)} blocks for {data.transformer_number}")

    engine.draw_banner(generated_at)
    engine.render(blocks)
    return engine.finish(FOOTER_TEXT)


def report_filename(transformer_number: str, epoch_millis: Optional[int] = None) -> str:
    epoch_millis = epoch_millis if epoch_millis is not None else int(time.time() * 1000)
    return f"maintenance-report-{transformer_number}-{epoch_millis}.pdf"


def generate_report(
    data: ReportData,
    signatures: Optional[Signatures] = None,
    output_path: Optional[Path] = None
) -> Path:
    """
    Compose a report and write it to disk.

    Args:
        data: Aggregated report data
        signatures: Optional signature captures
        output_path: Optional output path, defaults to REPORT_DIR

    Returns:
        Path to generated PDF
    """
    logger.info(f"Generating maintenance report for {data.transformer_number}...")

    if output_path is None:
        output_path = REPORT_DIR / report_filename(data.transformer_number)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    pdf_bytes = compose(data, signatures)
    output_path.write_bytes(pdf_bytes)

    logger.info(f"PDF report generated: {output_path} ({len(pdf_bytes)} bytes)")
    return output_path
