"""
Pydantic schemas for the maintenance report pipeline.
"""

from src.schemas.models import (
    TRANSFORMER_STATUSES,
    INSPECTION_PENDING,
    INSPECTION_IN_PROGRESS,
    INSPECTION_COMPLETED,
    INSPECTION_UNKNOWN,
    TransformerMetadata,
    Inspection,
    Detection,
    Comment,
    MaintenanceRecord,
    Signatures,
    ReportData,
    Ack,
)

__all__ = [
    "TRANSFORMER_STATUSES",
    "INSPECTION_PENDING",
    "INSPECTION_IN_PROGRESS",
    "INSPECTION_COMPLETED",
    "INSPECTION_UNKNOWN",
    "TransformerMetadata",
    "Inspection",
    "Detection",
    "Comment",
    "MaintenanceRecord",
    "Signatures",
    "ReportData",
    "Ack",
]
