"""
Module: fonts.metrics

Purpose:
    Font metrics used by the layout engine for fit decisions. Metrics must
    be pure: the same text and format always measure the same.

Key Classes:
    - FontMetrics: Abstract metrics provider
    - ReportLabFontMetrics: Metrics from ReportLab font tables

Dependencies:
    - reportlab.pdfbase.pdfmetrics: String widths and ascent/descent
    - fonts.registry: Font name resolution

Used By:
    - layout.splitter: Word widths and line heights
    - output.writer: Marker widths, alignment, baselines
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from reportlab.pdfbase import pdfmetrics

from stamp_toolkit.core.models.formats import Format

from .registry import FontRegistry


class FontMetrics(ABC):
    """
    Abstract interface for measuring text.

    All values are in points.
    """

    @abstractmethod
    def string_width(self, text: str, fmt: Format) -> float:
        """Width of text drawn in the given format."""

    @abstractmethod
    def line_height(self, fmt: Format) -> float:
        """Height of one line of text in the given format (no spacing)."""

    def word_width(self, text: str, fmt: Format) -> float:
        """
        Width a word occupies on a line.

        Every word is drawn with a single leading space, so the separating
        space is part of the word's width.
        """
        return self.string_width(" " + text, fmt)

    def ascent(self, fmt: Format) -> float:
        """
        Distance from the top of a line to its baseline.

        Defaults to the full line height (baseline at the bottom of the
        line box).
        """
        return self.line_height(fmt)


class ReportLabFontMetrics(FontMetrics):
    """
    Metrics backed by ReportLab's font tables.

    Example:
        >>> metrics = ReportLabFontMetrics(FontRegistry())
        >>> metrics.string_width("", Format(font="times", size=12))
        0.0
    """

    def __init__(self, fonts: FontRegistry):
        self._fonts = fonts

    def _font_name(self, fmt: Format) -> str:
        return self._fonts.font_name(fmt.font, fmt.style)

    def string_width(self, text: str, fmt: Format) -> float:
        return float(pdfmetrics.stringWidth(text, self._font_name(fmt), fmt.size))

    def line_height(self, fmt: Format) -> float:
        ascent, descent = pdfmetrics.getAscentDescent(self._font_name(fmt), fmt.size)
        return float(ascent - descent)

    def ascent(self, fmt: Format) -> float:
        ascent, _ = pdfmetrics.getAscentDescent(self._font_name(fmt), fmt.size)
        return float(ascent)
