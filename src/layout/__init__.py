"""
Paginated document layout.
"""

from src.layout.blocks import (
    BorderedEntry,
    CommentEntry,
    ImageBlock,
    KeyValueRow,
    Paragraph,
    ReportBlock,
    SectionHeader,
    SignaturePair,
)
from src.layout.engine import LayoutEngine, status_color
from src.layout.text import wrap_text

__all__ = [
    "BorderedEntry",
    "CommentEntry",
    "ImageBlock",
    "KeyValueRow",
    "LayoutEngine",
    "Paragraph",
    "ReportBlock",
    "SectionHeader",
    "SignaturePair",
    "status_color",
    "wrap_text",
]
