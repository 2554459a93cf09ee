"""
Unit tests for detection annotation.
"""

import logging

import pytest

from src.annotation import annotate_image, box_corner, classify_label, label_color
from src.annotation.renderer import COLOR_CRITICAL, COLOR_FAULT, COLOR_NORMAL
from src.schemas.models import Detection
from utils.image_utils import RasterImage, decode_image


class TestLabelClassification:
    """Tests for severity classification of class codes."""

    @pytest.mark.parametrize("label,expected", [
        ("pf", "critical"),
        ("PF", "critical"),
        (" pf ", "critical"),
        ("f", "fault"),
        ("F", "fault"),
        ("normal", "normal"),
        ("rust", "normal"),
        ("", "normal"),
        (None, "normal"),
    ])
    def test_classify_label(self, label, expected):
        """Every string falls into exactly one bucket."""
        assert classify_label(label) == expected

    def test_label_colors(self):
        assert label_color("pf") == COLOR_CRITICAL
        assert label_color("f") == COLOR_FAULT
        assert label_color("anything else") == COLOR_NORMAL


class TestBoxGeometry:
    """Tests for center-to-corner conversion."""

    def test_box_corner(self):
        detection = Detection(class_name="pf", x=100, y=50, width=40, height=20)
        assert box_corner(detection) == (80, 40)

    def test_box_corner_fractional(self):
        detection = Detection(class_name="f", x=10.5, y=7.5, width=5, height=3)
        assert box_corner(detection) == (8.0, 6.0)


class TestAnnotateImage:
    """Tests for annotate_image."""

    def test_no_detections_returns_same_image(self, sample_image):
        assert annotate_image(sample_image, []) is sample_image

    def test_source_image_untouched(self, sample_image, fault_detections):
        original_bytes = sample_image.data
        annotated = annotate_image(sample_image, fault_detections)

        assert annotated is not sample_image
        assert annotated.data != original_bytes
        assert sample_image.data == original_bytes
        assert annotated.content_type == "image/jpeg"

    def test_critical_box_is_red(self, sample_image):
        detection = Detection(class_name="pf", confidence=0.9, x=120, y=80, width=40, height=30)
        annotated = annotate_image(sample_image, [detection])

        img = decode_image(annotated)
        # Left edge of the box at x=100, inside its vertical span
        b, g, r = (int(c) for c in img[80, 100])
        assert r > 150
        assert b < 100
        assert g < 100

    def test_fault_box_is_orange(self, sample_image):
        detection = Detection(class_name="f", confidence=0.7, x=120, y=80, width=40, height=30)
        annotated = annotate_image(sample_image, [detection])

        b, g, r = (int(c) for c in decode_image(annotated)[80, 100])
        assert r > 200
        assert 100 < g < 220
        assert b < 100

    def test_preserves_dimensions(self, sample_image, fault_detections):
        annotated = annotate_image(sample_image, fault_detections)
        assert decode_image(annotated).shape == decode_image(sample_image).shape

    def test_corrupt_image_falls_back_to_original(self, fault_detections, caplog):
        broken = RasterImage(data=b"not an image")

        with caplog.at_level(logging.ERROR, logger="src.annotation.renderer"):
            assert annotate_image(broken, fault_detections) is broken

        assert "Image annotation failed, using original image" in caplog.text
