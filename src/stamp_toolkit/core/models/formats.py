"""
Module: formats

Purpose:
    Typographic formats and the format table that resolves a token's
    StyleRef into concrete attributes (font, size, color, spacing,
    indent, list settings).

    There is no implicit default format: every format key reachable from a
    token stream must be present in the table, otherwise UnknownFormat is
    raised before any layout takes place.

Key Classes:
    - Spacing: Paragraph and line spacing in points
    - ListFormat: List type, level and numbering pattern
    - Format: Resolved typography for one format key
    - FormatTable: Immutable mapping of format key to Format
    - UnknownFormat: Raised for a missing format key

Dependencies:
    - core.schemas.validator: Table validation (jsonschema)
    - core.models.tokens: StyleRef, Token

Used By:
    - layout.splitter / layout.assembler: Style resolution
    - output.writer: Drawing attributes
    - context: Named format tables referenced by holes
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from stamp_toolkit.errors import StampError

from ..schemas.validator import validate_format_table
from .tokens import StyleRef, Token


DEFAULT_NUMBERING = "{n}."


class UnknownFormat(StampError):
    """A style references a format key missing from the format table."""

    def __init__(self, key: str):
        super().__init__(f"No format defined for key {key!r}")
        self.key = key


@dataclass(frozen=True)
class Spacing:
    """Vertical spacing in points, applied per paragraph and per line."""
    paragraph_above: float = 0
    paragraph_below: float = 0
    line_above: float = 0
    line_below: float = 0

    @property
    def line_total(self) -> float:
        return self.line_above + self.line_below


@dataclass(frozen=True)
class ListFormat:
    """
    List settings for bullet/number formats.

    Attributes:
        type: "bullet" or "number"
        level: Nesting level (0 for top-level lists)
        numbering: Format string with an ``{n}`` placeholder for numbers
    """
    type: str
    level: int = 0
    numbering: str = DEFAULT_NUMBERING

    def __post_init__(self) -> None:
        if self.type not in ("bullet", "number"):
            raise ValueError(f"list type must be 'bullet' or 'number': {self.type!r}")
        if "{n}" not in self.numbering:
            raise ValueError(f"numbering must contain '{{n}}': {self.numbering!r}")


@dataclass(frozen=True)
class Format:
    """
    Resolved typographic attributes (immutable).

    Attributes:
        font: Font family name known to the font registry
        size: Font size in points
        style: Font style set, subset of {"bold", "italic"}
        color: RGB triple, 0-255 per channel
        spacing: Paragraph/line spacing
        indent: Left indent for all lines of the paragraph (points)
        list: List settings for bullet/number formats
        bullet_char: Marker glyph for bullet lists

    Example:
        >>> fmt = Format(font="times", size=12)
        >>> sorted(fmt.with_character_style({"bold"}).style)
        ['bold']
    """

    font: str
    size: float
    style: FrozenSet[str] = field(default_factory=frozenset)
    color: Tuple[int, int, int] = (0, 0, 0)
    spacing: Spacing = field(default_factory=Spacing)
    indent: float = 0
    list: Optional[ListFormat] = None
    bullet_char: Optional[str] = None

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"size must be positive: {self.size}")
        style = frozenset(self.style) - {"regular"}
        object.__setattr__(self, "style", style)
        object.__setattr__(self, "color", tuple(self.color))
        if self.list is not None and self.list.type == "bullet" and not self.bullet_char:
            raise ValueError("bullet list formats need a bullet_char")

    def with_character_style(self, flags: Iterable[str]) -> Format:
        """Return this format with character style flags merged in."""
        flags = frozenset(flags)
        if flags <= self.style:
            return self
        return replace(self, style=self.style | flags)

    def marker_text(self, ordinal: Optional[int] = None) -> str:
        """
        Text drawn in the marker margin of a list paragraph.

        Args:
            ordinal: Zero-based ordinal for number markers, None for bullets
        """
        if ordinal is None:
            return self.bullet_char or ""
        numbering = self.list.numbering if self.list else DEFAULT_NUMBERING
        return numbering.format(n=ordinal + 1)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Format:
        """Build a Format from an already validated format description."""
        spacing = data.get("spacing", {})
        paragraph = spacing.get("paragraph", {})
        line = spacing.get("line", {})
        list_data = data.get("list")
        return cls(
            font=data["font"],
            size=data["size"],
            style=frozenset(data.get("style", ())),
            color=tuple(data.get("color", (0, 0, 0))),
            spacing=Spacing(
                paragraph_above=paragraph.get("above", 0),
                paragraph_below=paragraph.get("below", 0),
                line_above=line.get("above", 0),
                line_below=line.get("below", 0),
            ),
            indent=data.get("indent", {}).get("all", 0),
            list=ListFormat(
                type=list_data["type"],
                level=list_data.get("level", 0),
                numbering=list_data.get("numbering", DEFAULT_NUMBERING),
            ) if list_data else None,
            bullet_char=data.get("bullet-char"),
        )


class FormatTable(Mapping[str, Format]):
    """
    Immutable collection of formats keyed by format key.

    Example:
        >>> table = FormatTable({"paragraph": Format(font="times", size=12)})
        >>> table.resolve(StyleRef("paragraph")).size
        12
    """

    def __init__(self, formats: Mapping[str, Format]):
        self._formats = dict(formats)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FormatTable:
        """
        Validate and build a table from plain data.

        Raises:
            ValidationError: If the data does not match format.schema.json
        """
        validate_format_table(dict(data))
        return cls({key: Format.from_dict(value) for key, value in data.items()})

    def __getitem__(self, key: str) -> Format:
        return self._formats[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._formats)

    def __len__(self) -> int:
        return len(self._formats)

    def __repr__(self) -> str:
        return f"FormatTable({sorted(self._formats)!r})"

    def resolve(self, style: StyleRef) -> Format:
        """
        Resolve a style reference to a concrete Format.

        Character style flags are merged into the format's style set.

        Raises:
            UnknownFormat: If style.format is not in the table
        """
        try:
            base = self._formats[style.format]
        except KeyError:
            raise UnknownFormat(style.format) from None
        return base.with_character_style(style.character_style)

    def check_tokens(self, tokens: Iterable[Token]) -> None:
        """
        Ensure every style key used by the tokens is defined.

        Raises:
            UnknownFormat: For the first missing format key
        """
        for token in tokens:
            if token.style.format not in self._formats:
                raise UnknownFormat(token.style.format)

    @property
    def fonts(self) -> FrozenSet[Tuple[str, FrozenSet[str]]]:
        """(family, style) pairs referenced by this table."""
        return frozenset((fmt.font, fmt.style) for fmt in self._formats.values())
