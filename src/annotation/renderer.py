"""
Defect annotation for inspection images.
Draws detection bounding boxes and labels onto a copy of the raster buffer.
"""

from typing import List, Literal, Optional, Tuple

import cv2

from src.errors import RenderDegraded
from src.schemas.models import Detection
from utils.config import config
from utils.image_utils import RasterImage, decode_image, encode_image
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="ANNOTATION")


# ============================================================================
# DRAWING CONSTANTS
# ============================================================================

BOX_THICKNESS = 3
LABEL_HEIGHT = 25
LABEL_PADDING = 10
LABEL_TEXT_OFFSET_X = 5
LABEL_TEXT_OFFSET_Y = 7
LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_FONT_SCALE = 0.6
LABEL_FONT_THICKNESS = 2

# BGR
COLOR_CRITICAL = (0, 0, 255)      # Red
COLOR_FAULT = (0, 165, 255)       # Orange
COLOR_NORMAL = (50, 205, 50)      # Lime green
COLOR_LABEL_TEXT = (255, 255, 255)

Severity = Literal["critical", "fault", "normal"]

_SEVERITY_COLORS = {
    "critical": COLOR_CRITICAL,
    "fault": COLOR_FAULT,
    "normal": COLOR_NORMAL,
}


def box_corner(detection: Detection) -> Tuple[float, float]:
    """Top-left corner of a center-anchored detection box."""
    return detection.x - detection.width / 2, detection.y - detection.height / 2


def classify_label(label: Optional[str]) -> Severity:
    """
    Classify a raw detection class code.

    Total over all strings: anything outside the configured critical and
    fault buckets is "normal".
    """
    key = (label or "").strip().lower()
    if key in config.critical_fault_labels_list:
        return "critical"
    if key in config.fault_labels_list:
        return "fault"
    return "normal"


def label_color(label: Optional[str]) -> Tuple[int, int, int]:
    """Stroke color (BGR) for a detection class code."""
    return _SEVERITY_COLORS[classify_label(label)]


def _draw_detection(img, detection: Detection) -> None:
    left, top = box_corner(detection)
    x = int(round(left))
    y = int(round(top))
    w = int(round(detection.width))
    h = int(round(detection.height))

    color = label_color(detection.class_name)

    # Bounding box
    cv2.rectangle(img, (x, y), (x + w, y + h), color, BOX_THICKNESS)

    # Label background sized to the text, directly above the box
    label = detection.label
    (text_width, _), _ = cv2.getTextSize(label, LABEL_FONT, LABEL_FONT_SCALE, LABEL_FONT_THICKNESS)
    cv2.rectangle(
        img,
        (x, y - LABEL_HEIGHT),
        (x + text_width + LABEL_PADDING, y),
        color,
        -1
    )

    # Label text
    cv2.putText(
        img,
        label,
        (x + LABEL_TEXT_OFFSET_X, y - LABEL_TEXT_OFFSET_Y),
        LABEL_FONT,
        LABEL_FONT_SCALE,
        COLOR_LABEL_TEXT,
        LABEL_FONT_THICKNESS
    )


def annotate_image(image: RasterImage, detections: List[Detection]) -> RasterImage:
    """
    Annotate an image with bounding boxes for detections.

    Best effort: on any decode, draw or encode failure the original image is
    returned unchanged.

    Args:
        image: Encoded source image (never modified)
        detections: Detections in image pixel space

    Returns:
        Newly encoded annotated image, or the original on failure
    """
    if not detections:
        return image

    try:
        img = decode_image(image)

        for detection in detections:
            _draw_detection(img, detection)

        annotated = RasterImage(data=encode_image(img, ".jpg"), content_type="image/jpeg")
        logger.debug(f"Annotated image with {len(detections)} detection(s)")
        return annotated

    except Exception as e:
        logger.error(str(RenderDegraded(f"Image annotation failed, using original image: {e}")))
        return image
