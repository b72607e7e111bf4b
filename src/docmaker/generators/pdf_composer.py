"""Lay out a title and text sections onto fixed-size PDF pages.

Layout is measure-then-place: every block is word-wrapped with the exact
font metrics used for drawing, its height is known before it is placed, and
a page break happens *before* a block that would not fit. Sections are never
split across pages. The single exception is a block that is taller than a
whole content area; it starts on a fresh page and its lines run on.

``paginate`` returns the layout as plain data and ``compose`` draws exactly
that layout with ReportLab, so page breaks can be checked without parsing
PDF bytes.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field

from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..core.errors import RenderError
from .styles import Colors, Fonts, Layout, rgb

log = logging.getLogger(__name__)

_LEADING_FACTOR = 1.2


# ---------------------------------------------------------------------------
# Layout data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlacedBlock:
    """A wrapped block positioned on a page.

    ``top`` is the distance of the block's upper edge from the top of the
    page. ``index`` is the section index, or ``None`` for the title.
    """
    index: int | None
    lines: tuple[str, ...]
    top: float
    height: float
    font: str
    size: float
    leading: float
    continued: bool = False

    @property
    def is_title(self) -> bool:
        return self.index is None

    @property
    def text(self) -> str:
        return " ".join(self.lines)


@dataclass
class PageLayout:
    number: int
    blocks: list[PlacedBlock] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def section_indices(self) -> list[int]:
        return [b.index for b in self.blocks if b.index is not None]


@dataclass(frozen=True)
class _Measured:
    index: int | None
    lines: tuple[str, ...]
    font: str
    size: float
    leading: float
    spacing_after: float

    @property
    def height(self) -> float:
        return len(self.lines) * self.leading + self.spacing_after


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------

class PdfComposer:
    """On-device PDF layout engine.

    Pure and synchronous: identical inputs produce byte-identical output
    (ReportLab runs in invariant mode, so no creation date or random file
    id is embedded).
    """

    def __init__(self, author: str = "DocMaker") -> None:
        self.author = author

    # -- Public API ------------------------------------------------------

    def compose(self, title: str, sections: list[str]) -> bytes:
        """Render *title* and *sections* to PDF bytes.

        Raises :class:`RenderError` if the canvas produced no output.
        """
        pages = self.paginate(title, sections)
        buf = io.BytesIO()
        pdf = canvas.Canvas(
            buf,
            pagesize=(Layout.PAGE_WIDTH, Layout.PAGE_HEIGHT),
            invariant=1,
        )
        pdf.setTitle(title)
        pdf.setAuthor(self.author)

        for page in pages:
            for block in page.blocks:
                self._draw_block(pdf, block)
            pdf.showPage()
        pdf.save()

        data = buf.getvalue()
        if not data:
            raise RenderError("PDF canvas produced no output")
        log.debug("Composed %d page(s), %d bytes for %r", len(pages), len(data), title)
        return data

    def paginate(self, title: str, sections: list[str]) -> list[PageLayout]:
        """Compute page assignment and vertical positions for every block."""
        pages = [PageLayout(number=1)]
        cursor = float(Layout.MARGIN_Y)

        measured = [self._measure_title(title)] if title.strip() else []
        measured += [self._measure_section(i, s) for i, s in enumerate(sections)]

        for block in measured:
            page = pages[-1]
            if cursor + block.height > Layout.content_bottom() and not page.is_empty:
                page = PageLayout(number=page.number + 1)
                pages.append(page)
                cursor = float(Layout.MARGIN_Y)

            if cursor + block.height <= Layout.content_bottom():
                page.blocks.append(self._placed(block, block.lines, cursor, block.height))
                cursor += block.height
                continue

            # Taller than a full content area: run the lines on across pages.
            remaining = block.lines
            continued = False
            while remaining:
                room = int((Layout.content_bottom() - cursor) // block.leading)
                take = max(1, room)
                chunk, remaining = remaining[:take], remaining[take:]
                height = len(chunk) * block.leading
                if not remaining:
                    height += block.spacing_after
                page.blocks.append(
                    self._placed(block, chunk, cursor, height, continued=continued)
                )
                cursor += height
                continued = True
                if remaining:
                    page = PageLayout(number=page.number + 1)
                    pages.append(page)
                    cursor = float(Layout.MARGIN_Y)

        return pages

    # -- Measurement -----------------------------------------------------

    @staticmethod
    def _wrap(text: str, font: str, size: float) -> tuple[str, ...]:
        return tuple(simpleSplit(text, font, size, Layout.content_width()))

    def _measure_title(self, title: str) -> _Measured:
        size = Fonts.TITLE_SIZE_PT
        return _Measured(
            index=None,
            lines=self._wrap(title, Fonts.TITLE, size),
            font=Fonts.TITLE,
            size=size,
            leading=size * _LEADING_FACTOR,
            spacing_after=Layout.TITLE_GAP,
        )

    def _measure_section(self, index: int, text: str) -> _Measured:
        size = Fonts.BODY_SIZE_PT
        # An empty section still occupies one line
        lines = self._wrap(text, Fonts.BODY, size) or ("",)
        return _Measured(
            index=index,
            lines=lines,
            font=Fonts.BODY,
            size=size,
            leading=size * _LEADING_FACTOR + Layout.LINE_SPACING,
            spacing_after=Layout.PARAGRAPH_SPACING,
        )

    @staticmethod
    def _placed(
        block: _Measured,
        lines: tuple[str, ...],
        top: float,
        height: float,
        *,
        continued: bool = False,
    ) -> PlacedBlock:
        return PlacedBlock(
            index=block.index,
            lines=lines,
            top=top,
            height=height,
            font=block.font,
            size=block.size,
            leading=block.leading,
            continued=continued,
        )

    # -- Drawing ---------------------------------------------------------

    @staticmethod
    def _draw_block(pdf: canvas.Canvas, block: PlacedBlock) -> None:
        color = Colors.TITLE if block.is_title else Colors.TEXT
        pdf.setFillColorRGB(*rgb(color))
        pdf.setFont(block.font, block.size)
        for i, line in enumerate(block.lines):
            baseline = block.top + block.size + i * block.leading
            pdf.drawString(Layout.MARGIN_X, Layout.PAGE_HEIGHT - baseline, line)


def compose(title: str, sections: list[str]) -> bytes:
    """Module-level shortcut for ``PdfComposer().compose``."""
    return PdfComposer().compose(title, sections)
