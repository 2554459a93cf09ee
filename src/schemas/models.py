"""
Pydantic schemas for data validation.

Wire models accept the data service's camelCase JSON names through aliases
and Python field names through populate_by_name.
"""

import math
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from utils.image_utils import RasterImage
from utils.config import config
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="SCHEMAS")


TRANSFORMER_STATUSES = ("Operational", "Under Maintenance", "Out of Service", "Faulty")

INSPECTION_PENDING = "Pending"
INSPECTION_IN_PROGRESS = "In Progress"
INSPECTION_COMPLETED = "Completed"
INSPECTION_UNKNOWN = "N/A"


class ServiceModel(BaseModel):
    """Base for models exchanged with the data service."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TransformerMetadata(ServiceModel):
    """Immutable transformer reference data."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    transformer_number: str = Field(..., alias="transformerNumber")
    pole_number: Optional[str] = Field(None, alias="poleNumber")
    region: Optional[str] = None
    type: Optional[str] = None
    location_details: Optional[str] = Field(None, alias="locationDetails")


class Inspection(ServiceModel):
    """A scheduled or completed site visit to a transformer."""
    inspection_number: str = Field(..., alias="inspectionNumber")
    transformer_number: Optional[str] = Field(None, alias="transformerNumber")
    inspection_date: Optional[str] = Field(None, alias="inspectionDate")
    inspection_time: Optional[str] = Field(None, alias="inspectionTime")
    maintenance_date: Optional[str] = Field(None, alias="maintenanceDate")
    maintenance_time: Optional[str] = Field(None, alias="maintenanceTime")
    branch: Optional[str] = None
    status: str = INSPECTION_PENDING

    @field_validator("status", mode="before")
    @classmethod
    def missing_status_is_unknown(cls, v: Any) -> Any:
        """The service sends null for inspections without a status."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return INSPECTION_UNKNOWN
        return v

    @property
    def is_completed(self) -> bool:
        return self.status == INSPECTION_COMPLETED


class Detection(ServiceModel):
    """A defect found on an inspection image, box given by its center in pixels."""
    detect_id: Optional[int] = Field(None, alias="detectId")
    inspection_number: Optional[str] = Field(None, alias="inspectionNumber")
    class_name: Optional[str] = Field(None, alias="className")
    detect_name: Optional[str] = Field(None, alias="detectName")
    confidence: float = 0.0
    x: float = Field(..., description="Box center x in image pixels")
    y: float = Field(..., description="Box center y in image pixels")
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        """Clamp confidence into [0, 1]; non-finite values become 0."""
        if not math.isfinite(v):
            logger.warning(f"Detection confidence {v} is not finite, using 0")
            return 0.0
        if v < 0.0 or v > 1.0:
            logger.warning(f"Detection confidence {v} out of range, clamping to [0, 1]")
            return min(max(v, 0.0), 1.0)
        return v

    @property
    def label(self) -> str:
        """Human-readable name, else raw class code, else 'Unknown'."""
        return self.detect_name or self.class_name or "Unknown"


class Comment(ServiceModel):
    """An append-only note attached to an inspection."""
    id: Optional[int] = None
    inspection_number: Optional[str] = Field(None, alias="inspectionNumber")
    topic: Optional[str] = None
    comment: Optional[str] = ""
    author: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @property
    def timestamp_text(self) -> str:
        if self.created_at is None:
            return ""
        return self.created_at.strftime("%Y-%m-%d %H:%M")


class MaintenanceRecord(ServiceModel):
    """A maintenance record, either persisted or an in-memory draft."""
    id: Optional[int] = None
    inspector_name: str = Field("", alias="inspectorName")
    transformer_status: str = Field("Operational", alias="transformerStatus")
    voltage: Optional[float] = None
    current: Optional[float] = None
    recommended_action: str = Field("", alias="recommendedAction")
    additional_remarks: str = Field("", alias="additionalRemarks")
    other_notes: str = Field("", alias="otherNotes")
    inspection_numbers: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("inspectionsNumbers", "inspectionNumbers", "inspection_numbers"),
    )

    @model_validator(mode="before")
    @classmethod
    def unwrap_service_shape(cls, data: Any) -> Any:
        """Accept the service's report envelope and nested inspection lists."""
        if not isinstance(data, dict):
            return data
        if isinstance(data.get("maintenanceRecord"), dict):
            inspections = data.get("inspections")
            data = dict(data["maintenanceRecord"])
            if inspections is not None and "inspections" not in data:
                data["inspections"] = inspections
        inspections = data.get("inspections")
        if inspections and not any(
            k in data for k in ("inspectionsNumbers", "inspectionNumbers", "inspection_numbers")
        ):
            data = dict(data)
            data["inspectionsNumbers"] = [
                i.get("inspectionNumber") for i in inspections
                if isinstance(i, dict) and i.get("inspectionNumber")
            ]
        return data

    @field_validator("transformer_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """
        Match transformer status case-insensitively.

        Stored records may carry free text outside the known statuses; it is
        kept as-is for display.
        """
        if v is None or v == "":
            return "Operational"
        if isinstance(v, str):
            for status in TRANSFORMER_STATUSES:
                if v.strip().lower() == status.lower():
                    return status
            logger.warning(f"Unknown transformer status '{v}', keeping raw value")
            return v.strip()
        return v

    @field_validator("voltage", "current", mode="before")
    @classmethod
    def blank_reading_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("inspector_name", "recommended_action", "additional_remarks", "other_notes", mode="before")
    @classmethod
    def none_text_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("inspection_numbers")
    @classmethod
    def dedupe_inspections(cls, v: List[str]) -> List[str]:
        """Keep first occurrence order, drop duplicates."""
        return list(dict.fromkeys(v))

    @classmethod
    def blank(cls) -> "MaintenanceRecord":
        """An empty draft for a new report."""
        return cls()

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def to_request(self, transformer_number: str, inspection_numbers: Optional[List[str]] = None) -> Dict[str, Any]:
        """Build the submission body expected by the data service."""
        return {
            "transformerNumber": transformer_number,
            "inspectorName": self.inspector_name,
            "transformerStatus": self.transformer_status,
            "voltage": self.voltage,
            "current": self.current,
            "recommendedAction": self.recommended_action,
            "additionalRemarks": self.additional_remarks,
            "otherNotes": self.other_notes,
            "inspectionsNumbers": list(inspection_numbers if inspection_numbers is not None else self.inspection_numbers),
        }


class Signatures(BaseModel):
    """Hand-drawn signature captures owned by the report being composed."""
    model_config = ConfigDict(frozen=True)

    technician: Optional[RasterImage] = None
    supervisor: Optional[RasterImage] = None


class ReportData(BaseModel):
    """Consistent snapshot of everything one report needs."""
    transformer: TransformerMetadata
    record: MaintenanceRecord = Field(default_factory=MaintenanceRecord.blank)
    existing_records: List[MaintenanceRecord] = Field(default_factory=list)
    inspections: List[Inspection] = Field(default_factory=list)
    detections: Dict[str, List[Detection]] = Field(default_factory=dict)
    comments: Dict[str, List[Comment]] = Field(default_factory=dict)
    images: Dict[str, RasterImage] = Field(default_factory=dict)

    @property
    def transformer_number(self) -> str:
        return self.transformer.transformer_number

    def detections_for(self, inspection_number: str) -> List[Detection]:
        return self.detections.get(inspection_number, [])

    def comments_for(self, inspection_number: str) -> List[Comment]:
        return self.comments.get(inspection_number, [])

    def image_for(self, inspection_number: str) -> Optional[RasterImage]:
        return self.images.get(inspection_number)

    def with_record(self, record: MaintenanceRecord) -> "ReportData":
        """Return a copy bound to another record or draft."""
        return self.model_copy(update={"record": record})


class Ack(BaseModel):
    """Acknowledgement of a stored maintenance report."""
    transformer_number: str
    record_id: Optional[int] = None
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


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
