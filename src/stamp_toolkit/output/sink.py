"""
Module: output.sink

Purpose:
    Render sink the layout engine draws into. Operations are issued in
    the exact order paragraphs and lines are assembled; a sink never
    reorders or batches them.

Key Classes:
    - RenderSink: Abstract sink (text blocks, fonts, colors, images)
    - ReportLabSink: Sink drawing onto a reportlab canvas

Coordinates:
    Origin at lower-left, y increases upward, units are PDF points.
    move_by() is relative to the start of the current line, like the PDF
    ``Td`` operator.

Dependencies:
    - reportlab: Canvas text objects and image drawing
    - PIL: Image handling
    - fonts.registry: Font name resolution

Used By:
    - output.writer: Paragraph and line drawing
    - holes: Hole fillers
    - output.document: One sink per overlay page
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas
from reportlab.pdfgen.textobject import PDFTextObject

from stamp_toolkit.core.models import Format
from stamp_toolkit.errors import StampError
from stamp_toolkit.fonts.registry import FontRegistry

logger = logging.getLogger(__name__)


class SinkStateError(StampError):
    """A text operation was issued outside a text block, or blocks nested."""


class RenderSink(ABC):
    """Ordered drawing operations used by hole fillers."""

    @abstractmethod
    def begin_text(self) -> None:
        """Open a text block."""

    @abstractmethod
    def set_position(self, x: float, y: float) -> None:
        """Move the text cursor (line start) to an absolute position."""

    @abstractmethod
    def set_font(self, fmt: Format) -> None:
        """Use the font family, style and size of a format."""

    @abstractmethod
    def set_color(self, rgb: Sequence[int]) -> None:
        """Use an RGB fill color, 0-255 per channel."""

    @abstractmethod
    def draw_run(self, text: str) -> None:
        """Draw text at the cursor and advance it horizontally."""

    @abstractmethod
    def move_by(self, dx: float, dy: float) -> None:
        """Start a new line offset from the start of the current line."""

    @abstractmethod
    def end_text(self) -> None:
        """Close the current text block."""

    @abstractmethod
    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        """Draw an image with its lower-left corner at (x, y)."""


class ReportLabSink(RenderSink):
    """
    Render sink on a reportlab canvas.

    Text blocks map to reportlab text objects, drawn onto the canvas when
    the block ends.

    Example:
        >>> c = canvas.Canvas(io.BytesIO())
        >>> sink = ReportLabSink(c, FontRegistry())
        >>> sink.begin_text()
        >>> sink.set_position(72, 720)
        >>> sink.set_font(Format(font="helvetica", size=12))
        >>> sink.draw_run("Hello")
        >>> sink.end_text()
        >>> sink.has_content
        True
    """

    def __init__(self, canvas: rl_canvas.Canvas, fonts: FontRegistry):
        self._canvas = canvas
        self._fonts = fonts
        self._text: Optional[PDFTextObject] = None
        self.has_content = False

    def _require_text(self) -> PDFTextObject:
        if self._text is None:
            raise SinkStateError("Text operation outside begin_text()/end_text()")
        return self._text

    def begin_text(self) -> None:
        if self._text is not None:
            raise SinkStateError("Text blocks cannot be nested")
        self._text = self._canvas.beginText()

    def set_position(self, x: float, y: float) -> None:
        self._require_text().setTextOrigin(x, y)

    def set_font(self, fmt: Format) -> None:
        font_name = self._fonts.font_name(fmt.font, fmt.style)
        self._require_text().setFont(font_name, fmt.size)

    def set_color(self, rgb: Sequence[int]) -> None:
        r, g, b = rgb
        self._require_text().setFillColorRGB(r / 255, g / 255, b / 255)

    def draw_run(self, text: str) -> None:
        self._require_text().textOut(text)
        self.has_content = True

    def move_by(self, dx: float, dy: float) -> None:
        # reportlab's moveCursor counts y downward
        self._require_text().moveCursor(dx, -dy)

    def end_text(self) -> None:
        text = self._require_text()
        self._canvas.drawText(text)
        self._text = None

    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        self._canvas.drawImage(
            _pil_to_reader(image),
            x,
            y,
            width=width,
            height=height,
            mask="auto",
        )
        self.has_content = True
        logger.debug(f"Drew {image.size[0]}x{image.size[1]} image at ({x:.1f}, {y:.1f})")


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)
