"""
Unit tests for raster image helpers and input validators.
"""

import numpy as np
import pytest

from utils.image_utils import RasterImage, decode_image, load_optional_image, load_pil_image
from utils.validators import (
    validate_reading,
    validate_record_id,
    validate_signature_path,
    validate_transformer_number,
    validate_transformer_status,
)
from tests.conftest import make_image, make_signature


class TestRasterImage:
    """Tests for RasterImage."""

    def test_blank_signature_is_empty(self):
        assert make_signature(blank=True).is_empty()

    def test_drawn_signature_not_empty(self):
        assert not make_signature().is_empty()

    def test_single_color_is_empty(self):
        flat = RasterImage.from_array(np.full((20, 20, 3), 255, dtype=np.uint8), ".png")
        assert flat.is_empty()

    @pytest.mark.parametrize("data", [b"", b"garbage"])
    def test_unreadable_is_empty(self, data):
        assert RasterImage(data=data).is_empty()

    def test_from_path(self, temp_dir):
        path = temp_dir / "sig.png"
        path.write_bytes(make_signature().data)

        image = RasterImage.from_path(path)
        assert image.content_type == "image/png"
        assert image.size_bytes == path.stat().st_size

    def test_decode_roundtrip_shape(self):
        assert decode_image(make_image(64, 32)).shape == (32, 64, 3)

    def test_decode_failure(self):
        with pytest.raises(ValueError):
            decode_image(RasterImage(data=b"garbage"))

    def test_load_pil_image(self):
        assert load_pil_image(make_image(40, 30)).size == (40, 30)

    def test_load_pil_image_failure(self):
        with pytest.raises(ValueError):
            load_pil_image(RasterImage(data=b"garbage"))

    def test_load_optional_image(self, temp_dir):
        assert load_optional_image(None) is None
        assert load_optional_image(temp_dir / "missing.png") is None


class TestValidators:
    """Tests for input validators."""

    @pytest.mark.parametrize("value,ok", [("T1", True), (" AZ-100 ", True), ("", False), ("T/1", False)])
    def test_transformer_number(self, value, ok):
        assert validate_transformer_number(value)[0] is ok

    def test_record_id(self):
        assert validate_record_id(None) == (True, None, None)
        assert validate_record_id("12") == (True, None, 12)
        assert validate_record_id("x")[0] is False
        assert validate_record_id(0)[0] is False

    def test_reading(self):
        assert validate_reading("") == (True, None, None)
        assert validate_reading("230.5") == (True, None, 230.5)
        assert validate_reading("-1", "voltage")[0] is False
        assert validate_reading("abc", "current")[1].startswith("Current")

    def test_transformer_status(self):
        assert validate_transformer_status("faulty") == (True, None, "Faulty")
        assert validate_transformer_status("broken")[0] is False

    def test_signature_path(self, temp_dir):
        assert validate_signature_path(None) == (True, None, None)
        assert validate_signature_path(str(temp_dir / "nope.png"))[0] is False

        text = temp_dir / "sig.txt"
        text.write_text("hello")
        assert validate_signature_path(str(text))[0] is False

        png = temp_dir / "sig.png"
        png.write_bytes(make_signature().data)
        assert validate_signature_path(str(png)) == (True, None, png)
