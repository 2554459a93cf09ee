"""
Input validators for the maintenance report tools.
Provides validation functions for command line and draft inputs.
"""

from pathlib import Path
from typing import Optional, Tuple, Any
import re

from src.schemas.models import TRANSFORMER_STATUSES

SIGNATURE_EXTENSIONS = ("png", "jpg", "jpeg")
MAX_SIGNATURE_SIZE_MB = 5


def validate_transformer_number(value: str) -> Tuple[bool, Optional[str], str]:
    """
    Validate a transformer number.

    Args:
        value: Transformer number as typed by the user

    Returns:
        Tuple of (is_valid, error_message, normalized_value)
    """
    normalized = (value or "").strip()

    if not normalized:
        return False, "Transformer number is required", value

    # Used verbatim in URL paths
    if not re.fullmatch(r"[A-Za-z0-9_.-]+", normalized):
        return False, f"Invalid transformer number: {value}", value

    return True, None, normalized


def validate_record_id(value: Any) -> Tuple[bool, Optional[str], Optional[int]]:
    """
    Validate an optional maintenance record id.

    Returns:
        Tuple of (is_valid, error_message, record_id)
    """
    if value is None or value == "":
        return True, None, None

    try:
        record_id = int(value)
    except (TypeError, ValueError):
        return False, f"Record id must be an integer: {value}", None

    if record_id <= 0:
        return False, f"Record id must be positive: {record_id}", None

    return True, None, record_id


def validate_reading(value: Any, name: str = "reading") -> Tuple[bool, Optional[str], Optional[float]]:
    """
    Validate an electrical reading. Blank input means "not measured".

    Returns:
        Tuple of (is_valid, error_message, value)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return True, None, None

    try:
        reading = float(value)
    except (TypeError, ValueError):
        return False, f"{name.capitalize()} must be a number: {value}", None

    if reading < 0:
        return False, f"{name.capitalize()} cannot be negative: {reading}", None

    return True, None, reading


def validate_transformer_status(value: str) -> Tuple[bool, Optional[str], str]:
    """
    Validate a transformer status, matching case-insensitively.

    Returns:
        Tuple of (is_valid, error_message, normalized_value)
    """
    for status in TRANSFORMER_STATUSES:
        if (value or "").strip().lower() == status.lower():
            return True, None, status

    return False, f"Invalid status. Must be one of: {list(TRANSFORMER_STATUSES)}", value


def validate_signature_path(path: Optional[str]) -> Tuple[bool, Optional[str], Optional[Path]]:
    """
    Validate an optional signature image path.

    Args:
        path: Path string

    Returns:
        Tuple of (is_valid, error_message, Path object)
    """
    if not path:
        return True, None, None

    signature_path = Path(path)

    if not signature_path.exists():
        return False, f"File not found: {path}", None

    if not signature_path.is_file():
        return False, f"Not a file: {path}", None

    ext = signature_path.suffix.lower().lstrip(".")
    if ext not in SIGNATURE_EXTENSIONS:
        return False, f"Invalid file type: {ext}", None

    size_mb = signature_path.stat().st_size / (1024 * 1024)
    if size_mb > MAX_SIGNATURE_SIZE_MB:
        return False, f"File too large: {size_mb:.1f}MB (max: {MAX_SIGNATURE_SIZE_MB}MB)", None

    if size_mb == 0:
        return False, "File is empty", None

    return True, None, signature_path
