"""
Module: layout.models

Purpose:
    Data models produced by the layout engine.
    Immutable dataclasses for split results, styled runs, lines and
    paragraphs.

Key Classes:
    - LayoutResult: Tokens that fit a hole and tokens that do not
    - Run: Contiguous text sharing one resolved format
    - Line: Ordered runs drawn on one line
    - Paragraph: Lines sharing one paragraph format (+ optional marker)

Dependencies:
    - core.models: Token, Format

Used By:
    - layout.splitter: Creates LayoutResults
    - layout.assembler: Creates Paragraphs
    - output.writer: Draws Paragraphs
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from stamp_toolkit.core.models import Format, Token


@dataclass(frozen=True)
class LayoutResult:
    """
    Outcome of splitting a token sequence into a hole.

    Invariants:
        - selected + remaining == the input tokens (no loss, no reordering)
        - concatenating lines gives selected; break tokens end the line
          they terminate

    Attributes:
        selected: Prefix of the input that fits the hole
        remaining: Unconsumed suffix, carried to an overflow hole
        lines: Line partition of selected
        height_used: Vertical space reserved by selected, in points
        line_format: Format whose line height sets the pitch of every line
            in the hole (format of the first token); None when empty

    Example:
        >>> result = LayoutResult(selected=(), remaining=(), lines=(), height_used=0)
        >>> result.overflows
        False
    """

    selected: Tuple[Token, ...]
    remaining: Tuple[Token, ...]
    lines: Tuple[Tuple[Token, ...], ...]
    height_used: float
    line_format: Optional[Format] = None

    @property
    def overflows(self) -> bool:
        """True if some tokens did not fit."""
        return bool(self.remaining)

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class Run:
    """Text drawn in one format; drawn with a single leading space."""
    text: str
    format: Format


@dataclass(frozen=True)
class Line:
    """Runs drawn left to right on one line; empty for blank lines."""
    runs: Tuple[Run, ...] = ()

    @property
    def text(self) -> str:
        return " ".join(run.text for run in self.runs)


@dataclass(frozen=True)
class Paragraph:
    """
    Group of lines drawn with one paragraph format.

    Attributes:
        format_key: Format key of the paragraph's first token
        format: Resolved paragraph format (spacing, indent, list settings)
        lines: Lines in drawing order
        marker: Bullet/number text drawn before the first line, if any
    """

    format_key: str
    format: Format
    lines: Tuple[Line, ...]
    marker: Optional[str] = None

    @property
    def text(self) -> str:
        return " ".join(line.text for line in self.lines if line.runs)
