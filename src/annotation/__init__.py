"""
Image annotation module for defect detections.
"""

from src.annotation.renderer import (
    annotate_image,
    box_corner,
    classify_label,
    label_color,
)

__all__ = [
    "annotate_image",
    "box_corner",
    "classify_label",
    "label_color",
]
