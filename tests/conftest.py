"""
Shared fixtures: an in-memory data service and synthetic images.
"""

import threading
import time
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np
import pytest

from src.errors import NotFound
from src.schemas.models import (
    Ack,
    Comment,
    Detection,
    Inspection,
    MaintenanceRecord,
    TransformerMetadata,
)
from utils.image_utils import RasterImage


def make_image(width: int = 200, height: int = 120) -> RasterImage:
    """Gray JPEG with a darker square so it is never single-colored."""
    img = np.full((height, width, 3), 90, dtype=np.uint8)
    cv2.rectangle(img, (10, 10), (30, 30), (40, 40, 40), -1)
    return RasterImage.from_array(img, ".jpg")


def make_signature(blank: bool = False) -> RasterImage:
    """Transparent PNG, with a stroke unless blank."""
    img = np.zeros((80, 240, 4), dtype=np.uint8)
    if not blank:
        cv2.line(img, (20, 60), (220, 20), (0, 0, 0, 255), 3)
    return RasterImage.from_array(img, ".png")


class FakeDataService:
    """
    In-memory stand-in for DataServiceClient.

    failures maps (kind, inspection_number) to the exception that fetch
    raises; delays maps (kind, inspection_number) to seconds slept first.
    """

    def __init__(
        self,
        transformers: Optional[Dict[str, TransformerMetadata]] = None,
        records: Optional[Dict[str, List[MaintenanceRecord]]] = None,
        inspections: Optional[Dict[str, List[Inspection]]] = None,
        detections: Optional[Dict[str, List[Detection]]] = None,
        comments: Optional[Dict[str, List[Comment]]] = None,
        images: Optional[Dict[str, RasterImage]] = None,
        failures: Optional[Dict[Tuple[str, str], Exception]] = None,
        delays: Optional[Dict[Tuple[str, str], float]] = None
    ):
        self.transformers = transformers or {}
        self.records = records or {}
        self.inspections = inspections or {}
        self.detections = detections or {}
        self.comments = comments or {}
        self.images = images or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.submit_error: Optional[Exception] = None
        self.submitted: List[Tuple[str, MaintenanceRecord]] = []
        self.calls: List[Tuple[str, str]] = []
        self.closed = False
        self._lock = threading.Lock()

    def _enter(self, kind: str, key: str):
        with self._lock:
            self.calls.append((kind, key))
        delay = self.delays.get((kind, key))
        if delay:
            time.sleep(delay)
        error = self.failures.get((kind, key))
        if error is not None:
            raise error

    def get_transformer(self, transformer_number: str) -> TransformerMetadata:
        self._enter("transformer", transformer_number)
        if transformer_number not in self.transformers:
            raise NotFound(transformer_number)
        return self.transformers[transformer_number]

    def get_maintenance_records(self, transformer_number: str) -> List[MaintenanceRecord]:
        self._enter("records", transformer_number)
        return list(self.records.get(transformer_number, []))

    def get_inspections(self, transformer_number: str) -> List[Inspection]:
        self._enter("inspections", transformer_number)
        return list(self.inspections.get(transformer_number, []))

    def get_detections(self, inspection_number: str) -> List[Detection]:
        self._enter("detections", inspection_number)
        return list(self.detections.get(inspection_number, []))

    def get_comments(self, inspection_number: str) -> List[Comment]:
        self._enter("comments", inspection_number)
        return list(self.comments.get(inspection_number, []))

    def get_image(self, inspection_number: str) -> Optional[RasterImage]:
        self._enter("image", inspection_number)
        return self.images.get(inspection_number)

    def submit_maintenance_report(self, transformer_number: str, record: MaintenanceRecord) -> Ack:
        self.submitted.append((transformer_number, record))
        if self.submit_error is not None:
            raise self.submit_error
        return Ack(transformer_number=transformer_number, record_id=42)

    def close(self):
        self.closed = True


@pytest.fixture
def temp_dir(tmp_path):
    """Scratch directory for generated reports."""
    return tmp_path


@pytest.fixture
def sample_image():
    return make_image()


@pytest.fixture
def transformer():
    return TransformerMetadata(
        transformer_number="T1",
        pole_number="P-100",
        region="Colombo",
        type="Distribution",
        location_details="Near the junction",
    )


@pytest.fixture
def completed_inspection():
    return Inspection(
        inspection_number="INS-1",
        transformer_number="T1",
        inspection_date="2024-03-01",
        inspection_time="09:15",
        branch="Nugegoda",
        status="Completed",
    )


@pytest.fixture
def fault_detections():
    return [
        Detection(class_name="pf", confidence=0.91, x=100, y=60, width=40, height=30),
        Detection(class_name="f", confidence=0.60, x=50, y=50, width=20, height=20),
    ]


@pytest.fixture
def inspection_comment():
    return Comment(
        topic="Oil leak",
        comment="Minor seepage near the bushing.",
        author="Alice",
        created_at=datetime(2024, 3, 1, 10, 30),
    )


@pytest.fixture
def fake_service(transformer, completed_inspection, fault_detections, inspection_comment, sample_image):
    """Transformer T1 with one completed inspection, two detections and a comment."""
    return FakeDataService(
        transformers={"T1": transformer},
        records={"T1": [MaintenanceRecord(id=7, inspector_name="Bob", voltage=230.5, current=15.3)]},
        inspections={"T1": [completed_inspection]},
        detections={"INS-1": fault_detections},
        comments={"INS-1": [inspection_comment]},
        images={"INS-1": sample_image},
    )
