"""
Cursor-based paginator for the maintenance report.

Places layout blocks top-down on A4 pages (units are millimetres measured
from the top-left corner) and starts a new page whenever the next block
would cross the bottom threshold.
"""

import io
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from PIL import Image
from reportlab.lib.colors import HexColor, white
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader

from src.errors import RenderDegraded
from src.layout.blocks import (
    ENTRY_BOX_HEIGHT,
    ENTRY_HEADER_HEIGHT,
    IMAGE_CAPTION_HEIGHT,
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    KEY_VALUE_ROW_HEIGHT,
    PARAGRAPH_LINE_HEIGHT,
    SECTION_HEADER_HEIGHT,
    SIGNATURE_CAPTION_HEIGHT,
    SIGNATURE_HEADER_HEIGHT,
    SIGNATURE_HEIGHT,
    SIGNATURE_WIDTH,
    BorderedEntry,
    CommentEntry,
    ImageBlock,
    KeyValueRow,
    Paragraph,
    ReportBlock,
    SectionHeader,
    SignaturePair,
)
from src.layout.canvas import ReportCanvas
from src.layout.text import wrap_text
from utils.config import config
from utils.image_utils import RasterImage, load_pil_image
from utils.logger import setup_logger

logger = setup_logger(__name__, level=config.log_level, component="LAYOUT")


# ============================================================================
# PAGE GEOMETRY
# ============================================================================

PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN = 15.0
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
TOP_MARGIN = 15.0
BOTTOM_LIMIT = 270.0
IMAGE_BOTTOM_LIMIT = 240.0
FOOTER_Y = PAGE_HEIGHT - 15

BANNER_HEIGHT = 20.0
BANNER_TITLE = "MAINTENANCE RECORD REPORT"

VALUE_OFFSET = 50.0
VALUE_OFFSET_RIGHT = 30.0

COMMENT_LINE_HEIGHT = 4.0
ISSUE_LINE_HEIGHT = 5.0
SUB_HEADER_HEIGHT = 6.0
ENTRY_SPACING = 3.0
PLACEHOLDER_HEIGHT = 3.0

NO_IMAGE_TEXT = "(No image available)"
IMAGE_FAILED_TEXT = "(Image could not be loaded)"


# ============================================================================
# COLORS
# ============================================================================

BRAND_PRIMARY = HexColor("#2980b9")
BAND_GRAY = HexColor("#f0f0f0")
TEXT_DARK = HexColor("#3c3c3c")
TEXT_MUTED = HexColor("#787878")
PLACEHOLDER_GRAY = HexColor("#969696")
FRAME_GRAY = HexColor("#b4b4b4")
ISSUE_RED = HexColor("#c80000")

STATUS_COLORS = {
    "Completed": HexColor("#4caf50"),
    "Pending": HexColor("#ffc107"),
}
STATUS_DEFAULT_COLOR = HexColor("#9e9e9e")


def status_color(status: str):
    """Badge color for an inspection status."""
    return STATUS_COLORS.get(status, STATUS_DEFAULT_COLOR)


class LayoutEngine:
    """
    Single-threaded page state machine.

    The cursor y starts at the top margin on every page. Before a piece of
    height h is placed, the engine breaks the page if y + h would exceed the
    applicable bottom threshold, unless the cursor already sits at the top
    of a fresh page.
    """

    def __init__(
        self,
        top_margin: float = TOP_MARGIN,
        bottom_limit: float = BOTTOM_LIMIT,
        image_bottom_limit: float = IMAGE_BOTTOM_LIMIT,
        image_timeout: Optional[float] = None
    ):
        self.top_margin = top_margin
        self.bottom_limit = bottom_limit
        self.image_bottom_limit = image_bottom_limit
        self.image_timeout = image_timeout if image_timeout is not None else config.image_load_timeout

        self._buffer = io.BytesIO()
        self.canvas = ReportCanvas(self._buffer)

        self.y = top_margin
        self.page_count = 1
        self.drawn_text: List[Tuple[int, str]] = []
        self._fresh_page = True
        self._finished = False
        self.logger = logger

    # ========================================================================
    # CURSOR
    # ========================================================================

    @property
    def page_capacity(self) -> float:
        return self.bottom_limit - self.top_margin

    def new_page(self):
        """Close the current page and reset the cursor."""
        self.canvas.showPage()
        self.page_count += 1
        self.y = self.top_margin
        self._fresh_page = True
        self.logger.debug(f"Started page {self.page_count}")

    def ensure_space(self, height: float, limit: Optional[float] = None) -> bool:
        """
        Break the page if height does not fit below the cursor.

        Returns:
            True if a new page was started
        """
        limit = self.bottom_limit if limit is None else limit
        if self.y + height > limit and not self._fresh_page:
            self.new_page()
            return True
        return False

    def advance(self, height: float):
        if height > 0:
            self.y += height
            self._fresh_page = False

    # ========================================================================
    # DRAWING PRIMITIVES
    # ========================================================================

    def _pt_y(self, y: float) -> float:
        """Convert a top-down mm position into a bottom-up PDF coordinate."""
        return (PAGE_HEIGHT - y) * mm

    def _text(
        self,
        text: str,
        x: float,
        y: float,
        font: str = "Helvetica",
        size: float = 10,
        color=TEXT_DARK,
        align: str = "left"
    ):
        self.canvas.setFont(font, size)
        self.canvas.setFillColor(color)
        if align == "center":
            self.canvas.drawCentredString(x * mm, self._pt_y(y), text)
        elif align == "right":
            self.canvas.drawRightString(x * mm, self._pt_y(y), text)
        else:
            self.canvas.drawString(x * mm, self._pt_y(y), text)
        self.drawn_text.append((self.page_count, text))

    def _rect(self, x: float, y: float, width: float, height: float, stroke=None, fill=None, line_width: float = 0.5):
        self.canvas.saveState()
        if stroke is not None:
            self.canvas.setStrokeColor(stroke)
            self.canvas.setLineWidth(line_width)
        if fill is not None:
            self.canvas.setFillColor(fill)
        self.canvas.rect(
            x * mm,
            self._pt_y(y + height),
            width * mm,
            height * mm,
            stroke=1 if stroke is not None else 0,
            fill=1 if fill is not None else 0
        )
        self.canvas.restoreState()

    def _draw_raster(self, pil_image: Image.Image, x: float, y: float, width: float, height: float):
        self.canvas.drawImage(
            ImageReader(pil_image),
            x * mm,
            self._pt_y(y + height),
            width=width * mm,
            height=height * mm,
            mask="auto"
        )

    # ========================================================================
    # BANNER & FOOTER
    # ========================================================================

    def draw_banner(self, generated_at: Optional[datetime] = None):
        """Draw the colored title banner and generation timestamp."""
        generated_at = generated_at or datetime.now()

        self._rect(MARGIN, self.y, CONTENT_WIDTH, BANNER_HEIGHT, fill=BRAND_PRIMARY)
        self._text(
            BANNER_TITLE,
            PAGE_WIDTH / 2,
            self.y + 13,
            font="Helvetica-Bold",
            size=22,
            color=white,
            align="center"
        )
        self.advance(BANNER_HEIGHT + 8)

        self._text(
            f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
            PAGE_WIDTH - MARGIN,
            self.y,
            size=10,
            color=TEXT_MUTED,
            align="right"
        )
        self.advance(12)

    def finish(self, footer: Optional[str] = None) -> bytes:
        """
        Write the footer on the last page and produce the PDF.

        Returns:
            PDF document bytes
        """
        if self._finished:
            raise RuntimeError("Layout already finished")

        if footer:
            self._text(
                footer,
                PAGE_WIDTH / 2,
                FOOTER_Y,
                font="Helvetica-Oblique",
                size=8,
                color=TEXT_MUTED,
                align="center"
            )

        self.canvas.showPage()
        self.canvas.save()
        self._finished = True

        self.logger.info(f"Layout finished with {self.page_count} page(s)")
        return self._buffer.getvalue()

    # ========================================================================
    # BLOCKS
    # ========================================================================

    def render(self, blocks: Iterable[ReportBlock]):
        for block in blocks:
            self.place(block)

    def place(self, block: ReportBlock):
        """Place one block, breaking the page first if it would overflow."""
        if isinstance(block, SectionHeader):
            self._place_section_header(block)
        elif isinstance(block, KeyValueRow):
            self._place_key_value_row(block)
        elif isinstance(block, Paragraph):
            self._place_paragraph(block)
        elif isinstance(block, BorderedEntry):
            self._place_bordered_entry(block)
        elif isinstance(block, ImageBlock):
            self._place_image(block, x_indent=6)
        elif isinstance(block, SignaturePair):
            self._place_signatures(block)
        else:
            raise TypeError(f"Unsupported layout block: {type(block).__name__}")

    def _place_section_header(self, block: SectionHeader):
        self.ensure_space(SECTION_HEADER_HEIGHT)
        self._rect(MARGIN, self.y, CONTENT_WIDTH, 8, fill=BAND_GRAY)
        self._text(
            block.title,
            MARGIN + 2,
            self.y + 6,
            font="Helvetica-Bold",
            size=14,
            color=BRAND_PRIMARY
        )
        self.advance(SECTION_HEADER_HEIGHT)

    def _place_key_value_row(self, block: KeyValueRow):
        self.ensure_space(KEY_VALUE_ROW_HEIGHT)
        baseline = self.y + 4

        self._text(block.label, MARGIN, baseline, font="Helvetica-Bold", size=11)
        self._text(block.value, MARGIN + VALUE_OFFSET, baseline, size=11)

        if block.label2 is not None:
            column = PAGE_WIDTH / 2
            self._text(block.label2, column, baseline, font="Helvetica-Bold", size=11)
            self._text(block.value2 or "", column + VALUE_OFFSET_RIGHT, baseline, size=11)

        self.advance(KEY_VALUE_ROW_HEIGHT + block.spacing_after)

    def _place_paragraph(self, block: Paragraph):
        width = CONTENT_WIDTH - 2 * block.indent
        lines = wrap_text(block.text, width * mm, "Helvetica", 10)
        height = len(lines) * PARAGRAPH_LINE_HEIGHT

        if height <= self.page_capacity:
            self.ensure_space(height)
            for line in lines:
                self._text(line, MARGIN + block.indent, self.y + 4, size=10)
                self.advance(PARAGRAPH_LINE_HEIGHT)
        else:
            # Taller than a whole page; continue line by line
            self.logger.debug(f"Paragraph of {len(lines)} lines spans pages")
            for line in lines:
                self.ensure_space(PARAGRAPH_LINE_HEIGHT)
                self._text(line, MARGIN + block.indent, self.y + 4, size=10)
                self.advance(PARAGRAPH_LINE_HEIGHT)

        self.advance(block.spacing_after)

    def _place_bordered_entry(self, block: BorderedEntry):
        self.ensure_space(ENTRY_HEADER_HEIGHT)
        top = self.y

        self._rect(MARGIN + 3, top, CONTENT_WIDTH - 6, ENTRY_BOX_HEIGHT, stroke=BRAND_PRIMARY, line_width=0.5)
        self._text(
            f"Inspection: {block.inspection_number}",
            MARGIN + 6,
            top + 6,
            font="Helvetica-Bold",
            size=12,
            color=TEXT_DARK
        )

        badge_x = PAGE_WIDTH - MARGIN - 35
        self.canvas.saveState()
        self.canvas.setFillColor(status_color(block.status))
        self.canvas.roundRect(badge_x * mm, self._pt_y(top + 8), 30 * mm, 6 * mm, 2 * mm, stroke=0, fill=1)
        self.canvas.restoreState()
        self._text(block.status or "N/A", badge_x + 15, top + 6, font="Helvetica-Bold", size=9, color=white, align="center")

        self._text(block.date_line, MARGIN + 6, top + 12)
        self._text(block.branch_line, MARGIN + 6, top + 17)
        if block.maintenance_line:
            self._text(block.maintenance_line, MARGIN + 6, top + 22)
        self.advance(ENTRY_HEADER_HEIGHT)

        if block.issues:
            self._place_issues(block.issues)

        if block.comments:
            self._place_comments(block.comments)

        self._place_image(block.image, x_indent=6)
        self.advance(ENTRY_SPACING)

    def _place_issues(self, issues: Tuple[str, ...]):
        self.ensure_space(SUB_HEADER_HEIGHT + ISSUE_LINE_HEIGHT)
        self._text(
            f"Detected Issues ({len(issues)}):",
            MARGIN + 6,
            self.y + 4,
            font="Helvetica-Bold",
            color=ISSUE_RED
        )
        self.advance(SUB_HEADER_HEIGHT)

        for line in issues:
            self.ensure_space(ISSUE_LINE_HEIGHT)
            self._text(line, MARGIN + 10, self.y + 4)
            self.advance(ISSUE_LINE_HEIGHT)
        self.advance(1)

    def _place_comments(self, comments: Tuple[CommentEntry, ...]):
        self.ensure_space(SUB_HEADER_HEIGHT + COMMENT_LINE_HEIGHT)
        self._text("Comments:", MARGIN + 6, self.y + 4, font="Helvetica-Bold", color=BRAND_PRIMARY)
        self.advance(SUB_HEADER_HEIGHT)

        body_width = (CONTENT_WIDTH - 30) * mm
        for comment in comments:
            body = wrap_text(comment.body, body_width, "Helvetica", 9)
            height = COMMENT_LINE_HEIGHT + len(body) * COMMENT_LINE_HEIGHT + 5
            self.ensure_space(height)

            self._text(f"- {comment.topic or 'N/A'}", MARGIN + 10, self.y + 3, font="Helvetica-Bold")
            self.advance(COMMENT_LINE_HEIGHT)
            for line in body:
                self._text(line, MARGIN + 12, self.y + 3, size=9)
                self.advance(COMMENT_LINE_HEIGHT)
            self._text(comment.byline, MARGIN + 12, self.y + 3, size=8, color=TEXT_MUTED)
            self.advance(5)
        self.advance(1)

    def _place_image(self, block: ImageBlock, x_indent: float = 6):
        if block.image is None:
            self.ensure_space(PLACEHOLDER_HEIGHT + 2)
            self._placeholder(NO_IMAGE_TEXT)
            return

        self.ensure_space(block.estimated_height, limit=self.image_bottom_limit)
        self._text(block.caption, MARGIN + x_indent, self.y + 4, font="Helvetica-Bold")
        self.advance(IMAGE_CAPTION_HEIGHT)

        pil_image = self.load_image(block.image)
        if pil_image is None:
            self._placeholder(IMAGE_FAILED_TEXT)
            return

        x = MARGIN + (CONTENT_WIDTH - IMAGE_WIDTH) / 2
        self._draw_raster(pil_image, x, self.y, IMAGE_WIDTH, IMAGE_HEIGHT)
        self._rect(x, self.y, IMAGE_WIDTH, IMAGE_HEIGHT, stroke=FRAME_GRAY, line_width=0.3)
        self.advance(IMAGE_HEIGHT + 2)

    def _placeholder(self, text: str):
        self._text(text, MARGIN + 5, self.y + 4, color=PLACEHOLDER_GRAY)
        self.advance(PLACEHOLDER_HEIGHT + 2)

    def _place_signatures(self, block: SignaturePair):
        self.ensure_space(block.estimated_height)

        self._rect(MARGIN, self.y, CONTENT_WIDTH, 8, fill=BAND_GRAY)
        self._text(block.title, MARGIN + 2, self.y + 6, font="Helvetica-Bold", size=14, color=BRAND_PRIMARY)
        self.advance(SIGNATURE_HEADER_HEIGHT)

        boxes = (
            (MARGIN + 10, block.technician, "Technician Signature"),
            (PAGE_WIDTH / 2 + 10, block.supervisor, "Supervisor Signature"),
        )
        for x, signature, caption in boxes:
            self._rect(x, self.y, SIGNATURE_WIDTH, SIGNATURE_HEIGHT, stroke=FRAME_GRAY, line_width=0.3)
            if signature is not None and not signature.is_empty():
                pil_image = self.load_image(signature)
                if pil_image is not None:
                    self._draw_raster(pil_image, x + 2, self.y + 2, SIGNATURE_WIDTH - 4, SIGNATURE_HEIGHT - 4)
            self._text(
                caption,
                x + SIGNATURE_WIDTH / 2,
                self.y + SIGNATURE_HEIGHT + 6,
                font="Helvetica-Bold",
                align="center"
            )

        self.advance(SIGNATURE_HEIGHT + SIGNATURE_CAPTION_HEIGHT)

    # ========================================================================
    # IMAGE LOADING
    # ========================================================================

    def _decode_image(self, image: RasterImage) -> Image.Image:
        return load_pil_image(image)

    def load_image(self, image: RasterImage) -> Optional[Image.Image]:
        """
        Decode an image with a bounded wait.

        A decode that has not finished within image_timeout is abandoned and
        its late result discarded.

        Returns:
            Decoded image, or None on timeout or decode failure
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="image-load")
        future = executor.submit(self._decode_image, image)
        try:
            return future.result(timeout=self.image_timeout)
        except FutureTimeoutError:
            future.cancel()
            self.logger.warning(str(RenderDegraded(f"Image load exceeded {self.image_timeout:.2f}s")))
            return None
        except Exception as e:
            self.logger.warning(str(RenderDegraded(f"Image could not be decoded: {e}")))
            return None
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
