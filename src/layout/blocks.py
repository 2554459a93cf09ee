"""
Layout blocks consumed by the LayoutEngine.

Blocks are immutable plain data. Fixed-height blocks carry their height in
layout units (millimetres); text blocks are measured by the engine after
wrapping.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from utils.image_utils import RasterImage

# ============================================================================
# HEIGHTS
# ============================================================================

SECTION_HEADER_HEIGHT = 12.0
KEY_VALUE_ROW_HEIGHT = 7.0
PARAGRAPH_LINE_HEIGHT = 5.0
ENTRY_BOX_HEIGHT = 25.0
ENTRY_HEADER_HEIGHT = 28.0
IMAGE_WIDTH = 120.0
IMAGE_HEIGHT = 70.0
IMAGE_CAPTION_HEIGHT = 5.0
SIGNATURE_WIDTH = 65.0
SIGNATURE_HEIGHT = 25.0
SIGNATURE_HEADER_HEIGHT = 15.0
SIGNATURE_CAPTION_HEIGHT = 8.0

IMAGE_CAPTION = "Annotated Image with Detections:"


@dataclass(frozen=True)
class SectionHeader:
    """Shaded band with a bold section title."""
    title: str

    @property
    def estimated_height(self) -> float:
        return SECTION_HEADER_HEIGHT


@dataclass(frozen=True)
class KeyValueRow:
    """
    Two label/value pairs on one line.

    The second pair is optional; the first column starts at the left
    margin and the second at the middle of the page.
    """
    label: str
    value: str
    label2: Optional[str] = None
    value2: Optional[str] = None
    spacing_after: float = 0.0

    @property
    def estimated_height(self) -> float:
        return KEY_VALUE_ROW_HEIGHT + self.spacing_after


@dataclass(frozen=True)
class Paragraph:
    """Free text wrapped to the content width minus a nested indent."""
    text: str
    indent: float = 5.0
    spacing_after: float = 10.0

    @property
    def estimated_height(self) -> float:
        # At least one line; the engine measures the wrapped height
        return PARAGRAPH_LINE_HEIGHT + self.spacing_after


@dataclass(frozen=True)
class CommentEntry:
    topic: str
    body: str
    author: str
    timestamp: str

    @property
    def byline(self) -> str:
        return f"By: {self.author or 'Unknown'} - {self.timestamp}"


@dataclass(frozen=True)
class ImageBlock:
    """
    Fixed-size bordered image centered in the content width.

    image is None when the inspection has no image at all.
    """
    image: Optional[RasterImage]
    caption: str = IMAGE_CAPTION

    @property
    def estimated_height(self) -> float:
        if self.image is None:
            return IMAGE_CAPTION_HEIGHT
        return IMAGE_CAPTION_HEIGHT + IMAGE_HEIGHT + 2


@dataclass(frozen=True)
class BorderedEntry:
    """One inspection summary: header box, issues, comments and image."""
    inspection_number: str
    status: str
    date_line: str
    branch_line: str
    maintenance_line: Optional[str] = None
    issues: Tuple[str, ...] = ()
    comments: Tuple[CommentEntry, ...] = ()
    image: ImageBlock = ImageBlock(image=None)

    @property
    def estimated_height(self) -> float:
        # Sub-blocks are checked for overflow individually as they are drawn
        return ENTRY_HEADER_HEIGHT


@dataclass(frozen=True)
class SignaturePair:
    """Titled pair of signature boxes, technician left and supervisor right."""
    technician: Optional[RasterImage] = None
    supervisor: Optional[RasterImage] = None
    title: str = "SIGNATURES"

    @property
    def estimated_height(self) -> float:
        return SIGNATURE_HEADER_HEIGHT + SIGNATURE_HEIGHT + SIGNATURE_CAPTION_HEIGHT


ReportBlock = Union[SectionHeader, KeyValueRow, Paragraph, BorderedEntry, ImageBlock, SignaturePair]
