"""
Greedy word wrapping against real font metrics.
"""

from typing import Callable, List

from reportlab.pdfbase.pdfmetrics import stringWidth

Measure = Callable[[str, str, float], float]


def _break_word(word: str, max_width: float, font_name: str, font_size: float, measure: Measure) -> List[str]:
    """Split a word wider than max_width at character boundaries."""
    if measure(word, font_name, font_size) <= max_width:
        return [word]

    pieces = []
    current = ""
    for char in word:
        candidate = current + char
        if current and measure(candidate, font_name, font_size) > max_width:
            pieces.append(current)
            current = char
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


def wrap_text(
    text: str,
    max_width: float,
    font_name: str = "Helvetica",
    font_size: float = 10,
    measure: Measure = stringWidth
) -> List[str]:
    """
    Wrap text greedily so that no line is wider than max_width.

    Explicit line breaks are kept; blank lines are dropped. A word that is
    wider than max_width on its own is hard-broken.

    Args:
        text: Text to wrap
        max_width: Available width, in the unit returned by measure
        font_name: Font used to measure
        font_size: Font size used to measure
        measure: Width function (text, font_name, font_size)

    Returns:
        Wrapped lines, empty for blank text
    """
    lines: List[str] = []

    for source_line in (text or "").splitlines():
        current = ""
        for word in source_line.split():
            for piece in _break_word(word, max_width, font_name, font_size, measure):
                candidate = f"{current} {piece}" if current else piece
                if measure(candidate, font_name, font_size) <= max_width:
                    current = candidate
                else:
                    if current:
                        lines.append(current)
                    current = piece
        if current:
            lines.append(current)

    return lines
