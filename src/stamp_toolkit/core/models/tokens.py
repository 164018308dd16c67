"""
Module: tokens

Purpose:
    Provides the Token dataclass - the atomic unit of styled content fed
    to the layout engine. A token is either a word, an explicit break
    (line, paragraph, page) or a list marker (bullet, number). Order in
    the token sequence is the single source of truth for layout.

Key Classes:
    - TokenKind: Tagged variant discriminator
    - StyleRef: Format key plus character style flags
    - Token: Immutable token with classmethod constructors

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - tokenizer.markup: Produces tokens from markup
    - layout.splitter: Splits token sequences into holes
    - layout.assembler: Groups lines into paragraphs
    - core.models.formats: Resolves StyleRef to Format
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional


CHARACTER_STYLES = frozenset({"bold", "italic"})


class TokenKind(str, Enum):
    """Kind of token in the layout stream."""
    WORD = "word"
    NEW_LINE = "new-line"
    NEW_PARAGRAPH = "new-paragraph"
    NEW_PAGE = "new-page"
    BULLET = "bullet"
    NUMBER = "number"

    def __str__(self) -> str:
        return self.value


BREAK_KINDS = frozenset({TokenKind.NEW_LINE, TokenKind.NEW_PARAGRAPH, TokenKind.NEW_PAGE})
MARKER_KINDS = frozenset({TokenKind.BULLET, TokenKind.NUMBER})


@dataclass(frozen=True, slots=True)
class StyleRef:
    """
    Reference to a format key plus optional character style flags.

    Attributes:
        format: Format key like "paragraph", "heading-1" or "bullet"
        character_style: Subset of {"bold", "italic"}

    Example:
        >>> ref = StyleRef("paragraph", frozenset({"bold"})).with_flags({"italic"})
        >>> sorted(ref.character_style)
        ['bold', 'italic']
    """

    format: str
    character_style: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.format:
            raise ValueError("StyleRef.format must be a non-empty format key")
        if not isinstance(self.character_style, frozenset):
            object.__setattr__(self, "character_style", frozenset(self.character_style))
        unknown = self.character_style - CHARACTER_STYLES
        if unknown:
            raise ValueError(f"Unknown character styles: {sorted(unknown)}")

    def with_flags(self, flags: Iterable[str]) -> StyleRef:
        """Return a copy with additional character style flags."""
        return StyleRef(self.format, self.character_style | frozenset(flags))


@dataclass(frozen=True, slots=True)
class Token:
    """
    Single unit of styled content (immutable).

    Use the classmethod constructors rather than building tokens by hand;
    they enforce the per-kind invariants.

    Attributes:
        kind: What the token is
        style: Style reference used to resolve its Format
        text: Word text (WORD only)
        ordinal: List item ordinal (NUMBER only)

    Example:
        >>> style = StyleRef("paragraph")
        >>> Token.word("hello", style).is_break
        False
        >>> Token.new_line(style).is_break
        True
    """

    kind: TokenKind
    style: StyleRef
    text: Optional[str] = None
    ordinal: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind is TokenKind.WORD:
            if not self.text or any(ch.isspace() for ch in self.text):
                raise ValueError(f"Word tokens need non-empty text without whitespace: {self.text!r}")
        elif self.text is not None:
            raise ValueError(f"{self.kind} tokens carry no text")
        if self.kind is TokenKind.NUMBER:
            if self.ordinal is None or self.ordinal < 0:
                raise ValueError(f"Number tokens need a non-negative ordinal: {self.ordinal!r}")
        elif self.ordinal is not None:
            raise ValueError(f"{self.kind} tokens carry no ordinal")

    @classmethod
    def word(cls, text: str, style: StyleRef) -> Token:
        return cls(TokenKind.WORD, style, text=text)

    @classmethod
    def new_line(cls, style: StyleRef) -> Token:
        return cls(TokenKind.NEW_LINE, style)

    @classmethod
    def new_paragraph(cls, style: StyleRef) -> Token:
        return cls(TokenKind.NEW_PARAGRAPH, style)

    @classmethod
    def new_page(cls, style: StyleRef) -> Token:
        return cls(TokenKind.NEW_PAGE, style)

    @classmethod
    def bullet(cls, style: StyleRef) -> Token:
        return cls(TokenKind.BULLET, style)

    @classmethod
    def number(cls, style: StyleRef, ordinal: int) -> Token:
        return cls(TokenKind.NUMBER, style, ordinal=ordinal)

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD

    @property
    def is_break(self) -> bool:
        """True for new-line, new-paragraph and new-page tokens."""
        return self.kind in BREAK_KINDS

    @property
    def is_marker(self) -> bool:
        """True for bullet and number list markers."""
        return self.kind in MARKER_KINDS
