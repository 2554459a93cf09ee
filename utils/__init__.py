"""
Utility modules for the maintenance report tools.
"""

from utils.config import config, REPORT_DIR, LOG_DIR
from utils.logger import setup_logger
from utils.image_utils import (
    RasterImage,
    decode_image,
    encode_image,
    load_pil_image,
    load_optional_image,
)

__all__ = [
    "config",
    "REPORT_DIR",
    "LOG_DIR",
    "setup_logger",
    "RasterImage",
    "decode_image",
    "encode_image",
    "load_pil_image",
    "load_optional_image",
]
