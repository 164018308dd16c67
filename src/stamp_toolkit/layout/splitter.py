"""
Module: layout.splitter

Purpose:
    Greedy line breaking and fit-checking of a token sequence against a
    hole's width and height. Decides which tokens are drawn in the hole
    ("selected") and which must overflow ("remaining").

Key Functions:
    - split_tokens(): Main splitting function

Algorithm:
    1. Walk tokens left to right, accumulating word widths on the
       current line (a word's width includes its separating space).
    2. A word that would push the line past the hole width less the
       paragraph indent starts a new line, unless the line has no word
       yet; an over-long word alone on its line is accepted as is and
       never split.
    3. new-line/new-paragraph end the line unconditionally; new-page ends
       the line and stops consuming the hole.
    4. Each completed line reserves the line height of the hole's first
       token format (line spacing included) plus paragraph spacing of its
       paragraph. The first line that does not fit, and everything after
       it, is remaining.
    5. List markers occupy a line but not its width.

Dependencies:
    - core.models: Token, FormatTable
    - fonts.metrics: FontMetrics

Used By:
    - layout.assembler: Builds paragraphs from the split lines
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from stamp_toolkit.core.models import Format, FormatTable, StyleRef, Token, TokenKind
from stamp_toolkit.fonts.metrics import FontMetrics

from .models import LayoutResult

logger = logging.getLogger(__name__)


def paragraph_format(token: Token, formats: FormatTable) -> Format:
    """Format of the paragraph a token belongs to, without character styles."""
    return formats.resolve(StyleRef(token.style.format))


def line_height(fmt: Format, metrics: FontMetrics) -> float:
    """Height reserved for one line in a format, line spacing included."""
    return metrics.line_height(fmt) + fmt.spacing.line_total


class _HoleFiller:
    """Height bookkeeping for lines completed within one hole."""

    def __init__(
        self,
        tokens: Tuple[Token, ...],
        height: float,
        formats: FormatTable,
        metrics: FontMetrics,
    ):
        self.tokens = tokens
        self.height = height
        self.formats = formats
        self.used = 0.0
        self.lines: List[Tuple[Token, ...]] = []
        self.line_format = paragraph_format(tokens[0], formats)
        self.line_height = line_height(self.line_format, metrics)
        self._paragraph: Optional[Format] = None

    def add_line(self, start: int, end: int) -> bool:
        """
        Reserve space for tokens[start:end] as one line.

        Returns:
            False if the line does not fit; nothing is reserved then
        """
        line = self.tokens[start:end]
        last = line[-1]

        if len(line) == 1 and last.kind is TokenKind.NEW_PAGE:
            # A page break on an empty line takes no room
            self.lines.append(line)
            return True

        paragraph = self._paragraph or paragraph_format(line[0], self.formats)
        cost = self.line_height
        if self._paragraph is None:
            cost += paragraph.spacing.paragraph_above
        if last.kind is TokenKind.NEW_PARAGRAPH:
            cost += paragraph.spacing.paragraph_below

        if self.used + cost > self.height:
            return False

        self.used += cost
        self.lines.append(line)
        self._paragraph = None if last.kind is TokenKind.NEW_PARAGRAPH else paragraph
        return True

    def available_width(self, start: int, width: float) -> float:
        """Width available to the line starting at tokens[start], less its paragraph indent."""
        paragraph = self._paragraph or paragraph_format(self.tokens[start], self.formats)
        return width - paragraph.indent


def split_tokens(
    tokens: Sequence[Token],
    width: float,
    height: float,
    formats: FormatTable,
    metrics: FontMetrics,
) -> LayoutResult:
    """
    Split tokens into those that fit a width x height hole and the rest.

    Args:
        tokens: Token sequence in reading order
        width: Hole width in points
        height: Hole height in points
        formats: Format table covering every style in tokens
        metrics: Font metrics provider

    Returns:
        LayoutResult whose selected + remaining equals tokens

    Raises:
        UnknownFormat: If a token's format key is missing from formats

    Example:
        >>> result = split_tokens(tokens, 100, 200, formats, metrics)
        >>> result.selected + result.remaining == tuple(tokens)
        True
    """
    tokens = tuple(tokens)
    if not tokens:
        return LayoutResult(selected=(), remaining=(), lines=(), height_used=0.0)

    formats.check_tokens(tokens)
    filler = _HoleFiller(tokens, height, formats, metrics)

    def result(consumed: int) -> LayoutResult:
        return LayoutResult(
            selected=tokens[:consumed],
            remaining=tokens[consumed:],
            lines=tuple(filler.lines),
            height_used=filler.used,
            line_format=filler.line_format,
        )

    line_start = 0
    line_width = 0.0
    available = filler.available_width(0, width)
    line_has_word = False
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if token.is_word:
            word_width = metrics.word_width(token.text, formats.resolve(token.style))
            if line_has_word and line_width + word_width > available:
                if not filler.add_line(line_start, i):
                    return result(line_start)
                line_start, line_width, line_has_word = i, 0.0, False
                available = filler.available_width(line_start, width)
            line_width += word_width
            line_has_word = True
            i += 1

        elif token.is_break:
            i += 1
            if not filler.add_line(line_start, i):
                return result(line_start)
            line_start, line_width, line_has_word = i, 0.0, False
            if token.kind is TokenKind.NEW_PAGE:
                logger.debug(f"Page break after {i} of {len(tokens)} tokens")
                return result(i)
            if i < len(tokens):
                available = filler.available_width(i, width)

        else:
            # markers sit in the margin; no width
            i += 1

    if line_start < len(tokens) and not filler.add_line(line_start, len(tokens)):
        return result(line_start)
    return result(len(tokens))
