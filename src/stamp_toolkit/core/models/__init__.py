"""
Core Models Package

Immutable data models shared by the tokenizer, the layout engine and the
page cascade.

All models in this package are frozen dataclasses (FormatTable is a
read-only Mapping). Tokens are created once by the tokenizer and never
mutated; their position in the sequence is their only identity.
"""

from .tokens import Token, TokenKind, StyleRef
from .formats import Format, FormatTable, ListFormat, Spacing, UnknownFormat
from .templates import (
    Align,
    Hole,
    Location,
    PageData,
    Template,
    HOLE_IMAGE,
    HOLE_TEXT,
    HOLE_TEXT_PARSED,
)

__all__ = [
    "Token",
    "TokenKind",
    "StyleRef",
    "Format",
    "FormatTable",
    "ListFormat",
    "Spacing",
    "UnknownFormat",
    "Align",
    "Hole",
    "Location",
    "PageData",
    "Template",
    "HOLE_IMAGE",
    "HOLE_TEXT",
    "HOLE_TEXT_PARSED",
]
