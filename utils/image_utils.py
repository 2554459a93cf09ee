"""
Image utilities for the maintenance report pipeline.
Owned raster buffers plus decoding, encoding and loading helpers.
"""

import io
from pathlib import Path
from typing import Optional

from PIL import Image
import cv2
import numpy as np
from pydantic import BaseModel, ConfigDict

from utils.config import config
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="IMAGE_UTILS")

JPEG_QUALITY = 95


class RasterImage(BaseModel):
    """
    An owned, immutable encoded raster buffer (JPEG/PNG bytes).

    Used for inspection images, annotated images and signature captures.
    Drawing always happens on a decoded copy, never on this buffer.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: str = "image/jpeg"

    @classmethod
    def from_path(cls, path: Path) -> "RasterImage":
        """Read an encoded image file into a raster buffer."""
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        suffix = path.suffix.lower().lstrip(".")
        content_type = "image/png" if suffix == "png" else "image/jpeg"
        return cls(data=path.read_bytes(), content_type=content_type)

    @classmethod
    def from_array(cls, img: np.ndarray, fmt: str = ".jpg") -> "RasterImage":
        """Encode an OpenCV (BGR/BGRA) array into a raster buffer."""
        return cls(data=encode_image(img, fmt), content_type=_content_type_for(fmt))

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        """
        Check whether the buffer carries no visible content.

        A signature pad that was never drawn on encodes as a fully
        transparent or single-color image, which counts as empty.
        """
        if not self.data:
            return True

        img = cv2.imdecode(np.frombuffer(self.data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        if img is None or img.size == 0:
            return True

        if img.ndim == 3 and img.shape[2] == 4:
            alpha = img[:, :, 3]
            if not alpha.any():
                return True

        return int(np.ptp(img)) == 0


def _content_type_for(fmt: str) -> str:
    return "image/png" if fmt.lower() == ".png" else "image/jpeg"


def decode_image(image: RasterImage) -> np.ndarray:
    """
    Decode a raster buffer into a new BGR array.

    Raises:
        ValueError: If the buffer cannot be decoded
    """
    buffer = np.frombuffer(image.data, dtype=np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Failed to decode image ({len(image.data)} bytes)")
    return img


def encode_image(img: np.ndarray, fmt: str = ".jpg") -> bytes:
    """
    Encode a BGR array to bytes.

    Raises:
        ValueError: If encoding fails
    """
    params = [int(cv2.IMWRITE_JPEG_QUALITY), JPEG_QUALITY] if fmt.lower() in (".jpg", ".jpeg") else []
    ok, encoded = cv2.imencode(fmt, img, params)
    if not ok:
        raise ValueError(f"Failed to encode image as {fmt}")
    return encoded.tobytes()


def load_pil_image(image: RasterImage) -> Image.Image:
    """
    Load a raster buffer with PIL, forcing a full decode.

    Raises:
        ValueError: If the buffer is corrupt or the format unsupported
    """
    try:
        img = Image.open(io.BytesIO(image.data))
        img.load()  # Force load to catch corrupt images
    except Exception as e:
        raise ValueError(f"Failed to load image: {e}")

    logger.debug(f"Loaded image: size={img.size}, mode={img.mode}")
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGB")
    return img


def load_optional_image(path: Optional[Path]) -> Optional[RasterImage]:
    """Load an image file if a path was given and it exists."""
    if path is None:
        return None
    if not path.exists():
        logger.warning(f"Image file not found, ignoring: {path}")
        return None
    return RasterImage.from_path(path)
