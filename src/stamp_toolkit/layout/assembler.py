"""
Module: layout.assembler

Purpose:
    Group the lines produced by the splitter into paragraphs carrying
    their resolved format, and report what overflowed the hole.

Key Functions:
    - assemble_paragraphs(): Lines -> Paragraphs
    - assemble(): Split + assemble for one hole, with overflow marker
    - handle_overflow(): Remaining tokens -> overflow locations

Rules:
    - A paragraph starts at the beginning of the hole and after every line
      ending in new-paragraph.
    - The paragraph format is the format of the paragraph's first token
      (character styles excluded).
    - A bullet/number token that opens a paragraph becomes its marker,
      drawn once before the first line. Markers anywhere else are drawn
      inline as ordinary text.
    - Consecutive words with the same resolved format form one run.

Dependencies:
    - layout.splitter: split_tokens
    - layout.models: Paragraph, Line, Run

Used By:
    - holes.text: ParsedTextHoleFiller
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from stamp_toolkit.core.models import FormatTable, Hole, Location, Token, TokenKind
from stamp_toolkit.fonts.metrics import FontMetrics

from .models import LayoutResult, Line, Paragraph, Run
from .splitter import paragraph_format, split_tokens


def _marker_text(token: Token, formats: FormatTable) -> str:
    fmt = paragraph_format(token, formats)
    return fmt.marker_text(token.ordinal if token.kind is TokenKind.NUMBER else None)


def _line_runs(tokens: Sequence[Token], formats: FormatTable) -> Tuple[Run, ...]:
    runs: List[Run] = []
    words: List[str] = []
    current = None

    for token in tokens:
        if token.is_break:
            continue
        if token.is_marker:
            text, fmt = _marker_text(token, formats), paragraph_format(token, formats)
        else:
            text, fmt = token.text, formats.resolve(token.style)
        if fmt != current and words:
            runs.append(Run(" ".join(words), current))
            words = []
        current = fmt
        words.append(text)

    if words:
        runs.append(Run(" ".join(words), current))
    return tuple(runs)


def assemble_paragraphs(
    lines: Sequence[Sequence[Token]],
    formats: FormatTable,
) -> Tuple[Paragraph, ...]:
    """
    Group split lines into paragraphs.

    Args:
        lines: Line partition from LayoutResult.lines
        formats: Format table used for the split

    Returns:
        Paragraphs in drawing order

    Example:
        >>> paragraphs = assemble_paragraphs(result.lines, formats)
        >>> [p.format_key for p in paragraphs]
        ['heading-1', 'paragraph']
    """
    paragraphs: List[Paragraph] = []
    first: Optional[Token] = None
    marker: Optional[str] = None
    current: List[Line] = []

    def flush() -> None:
        nonlocal first, marker, current
        if first is not None:
            paragraphs.append(Paragraph(
                format_key=first.style.format,
                format=paragraph_format(first, formats),
                lines=tuple(current),
                marker=marker,
            ))
        first, marker, current = None, None, []

    for line in lines:
        if len(line) == 1 and line[0].kind is TokenKind.NEW_PAGE:
            continue

        content = tuple(line)
        if first is None:
            first = content[0]
            if first.is_marker:
                marker = _marker_text(first, formats)
                content = content[1:]

        current.append(Line(_line_runs(content, formats)))

        if line[-1].kind is TokenKind.NEW_PARAGRAPH:
            flush()

    flush()
    return tuple(paragraphs)


def handle_overflow(remaining: Sequence[Token], hole_name: str) -> Optional[Dict[str, Location]]:
    """
    Build the overflow marker for a hole.

    Returns:
        {hole_name: Location({"text": remaining})} if anything remains,
        otherwise None
    """
    if not remaining:
        return None
    return {hole_name: Location(contents={"text": tuple(remaining)})}


def assemble(
    tokens: Sequence[Token],
    hole: Hole,
    formats: FormatTable,
    metrics: FontMetrics,
) -> Tuple[Tuple[Paragraph, ...], Optional[Dict[str, Location]], LayoutResult]:
    """
    Lay out tokens in a hole.

    Args:
        tokens: Token sequence for the hole
        hole: Target hole (width/height/name are used)
        formats: Format table for the hole
        metrics: Font metrics provider

    Returns:
        (paragraphs to draw, overflow marker or None, raw split result)
    """
    result = split_tokens(tokens, hole.width, hole.height, formats, metrics)
    paragraphs = assemble_paragraphs(result.lines, formats)
    return paragraphs, handle_overflow(result.remaining, hole.name), result
