"""
Module: layout

Purpose:
    Text layout and pagination engine.
    Splits token streams into holes and groups the fitted lines into
    paragraphs ready for drawing.

Key Functions:
    - split_tokens(): Fit tokens into a width x height hole
    - assemble_paragraphs(): Group split lines into paragraphs
    - assemble(): Split + assemble + overflow marker for one hole
    - handle_overflow(): Overflow locations for remaining tokens

Key Classes:
    - LayoutResult: selected/remaining tokens plus line partition
    - Paragraph, Line, Run: Drawing units

Dependencies:
    - core.models: Tokens and formats
    - fonts.metrics: Text measurement

Used By:
    - holes.text: Parsed text holes
"""

from .models import LayoutResult, Line, Paragraph, Run
from .splitter import split_tokens, line_height
from .assembler import assemble, assemble_paragraphs, handle_overflow

__all__ = [
    # Models
    "LayoutResult",
    "Line",
    "Paragraph",
    "Run",
    # Functions
    "split_tokens",
    "line_height",
    "assemble",
    "assemble_paragraphs",
    "handle_overflow",
]
