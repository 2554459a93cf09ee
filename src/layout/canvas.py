"""
PDF canvas with page border and page numbers.
"""

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

BORDER_COLOR = HexColor("#c8c8c8")
PAGE_NUMBER_COLOR = HexColor("#787878")

# x, y, width, height in mm measured from the top-left corner
PAGE_BORDER = (10, 10, 190, 277)


class ReportCanvas(canvas.Canvas):
    """Canvas that decorates every page once the total page count is known."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("pagesize", A4)
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_decorations(num_pages)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_page_decorations(self, page_count: int):
        """Draw the page border and page number."""
        page_width, page_height = self._pagesize
        x, y, width, height = PAGE_BORDER

        self.saveState()
        self.setStrokeColor(BORDER_COLOR)
        self.setLineWidth(0.5)
        self.rect(x * mm, page_height - (y + height) * mm, width * mm, height * mm, stroke=1, fill=0)

        self.setFont("Helvetica", 8)
        self.setFillColor(PAGE_NUMBER_COLOR)
        self.drawRightString(
            page_width - 15 * mm,
            5 * mm,
            f"Page {self._pageNumber} of {page_count}"
        )
        self.restoreState()
