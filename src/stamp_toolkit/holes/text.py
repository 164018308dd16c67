"""
Module: holes.text

Purpose:
    Fill "text" and "text-parsed" holes.

Key Classes:
    - TextHoleFiller: One unwrapped, aligned line; never overflows
    - ParsedTextHoleFiller: Markup or tokens laid out with the layout
      engine; returns what did not fit as overflow

Contents:
    {"text": str}                          for "text"
    {"text": str | Sequence[Token]}        for "text-parsed"

Dependencies:
    - tokenizer: Markup -> tokens
    - layout: Split and assemble
    - output.writer: Drawing
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stamp_toolkit.core.models import Hole, Location, StyleRef, Token
from stamp_toolkit.layout import assemble
from stamp_toolkit.output.writer import write_paragraphs, write_unparsed_line
from stamp_toolkit.tokenizer import tokenize

from .registry import HoleContentError, HoleFiller, Overflow

if TYPE_CHECKING:
    from stamp_toolkit.context import StampContext
    from stamp_toolkit.output.sink import RenderSink

logger = logging.getLogger(__name__)

LINE_FORMAT_KEY = "paragraph"


class TextHoleFiller(HoleFiller):
    """Draws plain text on one line in the hole's "paragraph" format."""

    def fill(
        self,
        sink: RenderSink,
        hole: Hole,
        location: Location,
        context: StampContext,
    ) -> Overflow:
        text = self.content(hole, location, "text")
        if not isinstance(text, str):
            raise HoleContentError(hole, f"text must be a string, got {type(text).__name__}")
        if not text:
            return None

        fmt = context.format_table(hole.format_ref).resolve(StyleRef(LINE_FORMAT_KEY))
        write_unparsed_line(sink, text, fmt, hole, context.metrics)
        return None


class ParsedTextHoleFiller(HoleFiller):
    """
    Lays out markup (or an already tokenized sequence) in the hole.

    Args:
        number_base: First ordinal of numbered lists
    """

    def __init__(self, number_base: int = 0):
        self.number_base = number_base

    def _tokens(self, hole: Hole, location: Location) -> tuple:
        text = self.content(hole, location, "text")
        if isinstance(text, str):
            return tokenize(text, number_base=self.number_base)
        tokens = tuple(text)
        if not all(isinstance(token, Token) for token in tokens):
            raise HoleContentError(hole, "text must be markup or a sequence of tokens")
        return tokens

    def fill(
        self,
        sink: RenderSink,
        hole: Hole,
        location: Location,
        context: StampContext,
    ) -> Overflow:
        tokens = self._tokens(hole, location)
        if not tokens:
            return None

        formats = context.format_table(hole.format_ref)
        paragraphs, overflow, result = assemble(tokens, hole, formats, context.metrics)
        if paragraphs:
            write_paragraphs(sink, paragraphs, context.metrics, result.line_format, hole.x, hole.top)

        logger.debug(
            f"Hole {hole.name!r}: {len(result.selected)} tokens in {result.line_count} lines, "
            f"{len(result.remaining)} overflowing"
        )
        return overflow
