"""Page geometry, fonts and colors for the on-device PDF composer.

All measurements are in PDF points (1/72 inch).
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Color palette (RGB tuples)
# ---------------------------------------------------------------------------

class Colors:
    TITLE = (27, 42, 47)             # Deep slate
    TEXT = (73, 102, 106)            # Muted teal-gray


# ---------------------------------------------------------------------------
# Font configuration
# ---------------------------------------------------------------------------

class Fonts:
    TITLE = "Helvetica-Bold"
    BODY = "Helvetica"

    TITLE_SIZE_PT = 24
    BODY_SIZE_PT = 14


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class Layout:
    """US Letter page with fixed margins."""
    PAGE_WIDTH = 612
    PAGE_HEIGHT = 792
    MARGIN_X = 48
    MARGIN_Y = 72

    # Spacing
    TITLE_GAP = 24
    LINE_SPACING = 6
    PARAGRAPH_SPACING = 12

    @classmethod
    def content_width(cls) -> float:
        return cls.PAGE_WIDTH - 2 * cls.MARGIN_X

    @classmethod
    def content_bottom(cls) -> float:
        """Lowest cursor position (measured from the top) a block may reach."""
        return cls.PAGE_HEIGHT - cls.MARGIN_Y


def rgb(color: tuple[int, int, int]) -> tuple[float, float, float]:
    """Convert an 8-bit RGB tuple to the 0..1 floats reportlab expects."""
    return color[0] / 255, color[1] / 255, color[2] / 255
