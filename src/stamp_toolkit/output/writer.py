"""
Module: output.writer

Purpose:
    Draw assembled paragraphs and single text lines onto a render sink.

Key Functions:
    - write_paragraphs(): Draw paragraphs from the top-left of a hole
    - write_unparsed_line(): Draw one aligned line inside a hole

Drawing Rules:
    - Every line advances by the pitch the splitter reserved for the hole
      (line height of the hole's first format, line spacing included).
    - Paragraph spacing moves the cursor down before the first line
      (above) and after the last line (below); the paragraph indent shifts
      every line of the paragraph.
    - A paragraph marker is drawn once, left of the first line, at twice
      its own width from the line start.
    - Each run is drawn with a single leading space, matching the word
      widths the splitter measured.

Dependencies:
    - output.sink: RenderSink
    - fonts.metrics: FontMetrics
    - layout: Paragraph, line_height

Used By:
    - holes.text: Text hole fillers
"""

from __future__ import annotations

import logging
from typing import Sequence

from stamp_toolkit.core.models import Format, Hole
from stamp_toolkit.fonts.metrics import FontMetrics
from stamp_toolkit.layout import Paragraph, line_height

from .sink import RenderSink

logger = logging.getLogger(__name__)


def _draw_marker(sink: RenderSink, paragraph: Paragraph, metrics: FontMetrics) -> None:
    fmt = paragraph.format
    offset = 2 * metrics.string_width(paragraph.marker, fmt)
    sink.move_by(-offset, 0)
    sink.set_font(fmt)
    sink.set_color(fmt.color)
    sink.draw_run(paragraph.marker)
    sink.move_by(offset, 0)


def write_paragraphs(
    sink: RenderSink,
    paragraphs: Sequence[Paragraph],
    metrics: FontMetrics,
    line_format: Format,
    x: float,
    top: float,
) -> float:
    """
    Draw paragraphs top-down starting at (x, top).

    Args:
        sink: Render sink
        paragraphs: Paragraphs from the assembler
        metrics: Font metrics provider used for the split
        line_format: LayoutResult.line_format of the split
        x: Left edge of the hole
        top: Top edge of the hole

    Returns:
        Vertical distance advanced, in points
    """
    if not paragraphs:
        return 0.0

    pitch = line_height(line_format, metrics)
    advanced = 0.0

    sink.begin_text()
    sink.set_position(x, top - line_format.spacing.line_above - metrics.ascent(line_format))

    for paragraph in paragraphs:
        fmt = paragraph.format
        sink.move_by(fmt.indent, -fmt.spacing.paragraph_above)
        advanced += fmt.spacing.paragraph_above

        for index, line in enumerate(paragraph.lines):
            if index == 0 and paragraph.marker:
                _draw_marker(sink, paragraph, metrics)
            for run in line.runs:
                sink.set_font(run.format)
                sink.set_color(run.format.color)
                sink.draw_run(" " + run.text)
            sink.move_by(0, -pitch)
            advanced += pitch

        sink.move_by(-fmt.indent, -fmt.spacing.paragraph_below)
        advanced += fmt.spacing.paragraph_below

    sink.end_text()
    logger.debug(f"Drew {len(paragraphs)} paragraphs, {advanced:.1f}pt")
    return advanced


def write_unparsed_line(
    sink: RenderSink,
    text: str,
    fmt: Format,
    hole: Hole,
    metrics: FontMetrics,
) -> None:
    """
    Draw text as a single unwrapped line aligned inside a hole.

    Horizontal alignment uses the measured text width; vertical alignment
    places the line box (ascent to descent) at the hole's top, middle or
    bottom. Text wider than the hole is drawn anyway.
    """
    width = metrics.string_width(text, fmt)
    if hole.align.horizontal == "center":
        x = hole.x + (hole.width - width) / 2
    elif hole.align.horizontal == "right":
        x = hole.x + hole.width - width
    else:
        x = hole.x

    box = metrics.line_height(fmt)
    ascent = metrics.ascent(fmt)
    if hole.align.vertical == "top":
        baseline = hole.top - ascent
    elif hole.align.vertical == "center":
        baseline = hole.y + (hole.height - box) / 2 + (box - ascent)
    else:
        baseline = hole.y + (box - ascent)

    if width > hole.width:
        logger.debug(f"Text in hole {hole.name!r} is wider than the hole ({width:.1f} > {hole.width})")

    sink.begin_text()
    sink.set_position(x, baseline)
    sink.set_font(fmt)
    sink.set_color(fmt.color)
    sink.draw_run(text)
    sink.end_text()
