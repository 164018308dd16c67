"""
Module: fonts.registry

Purpose:
    Map (family, style set) pairs used in formats to font names registered
    with ReportLab. The PDF standard 14 families are available out of the
    box; TrueType fonts are added with add_font() and embedded in the
    output by ReportLab when used.

Key Classes:
    - FontRegistry: Immutable family/style -> font name mapping
    - UnknownFont: Raised for an unregistered family

Dependencies:
    - reportlab.pdfbase: Font registration

Used By:
    - context: Owns the registry
    - fonts.metrics: Measures text with resolved font names
    - output.sink: Sets fonts on the text object
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Tuple, Union

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from stamp_toolkit.errors import StampError

logger = logging.getLogger(__name__)

StyleSet = FrozenSet[str]

_REGULAR: StyleSet = frozenset()
_BOLD: StyleSet = frozenset({"bold"})
_ITALIC: StyleSet = frozenset({"italic"})
_BOLD_ITALIC: StyleSet = frozenset({"bold", "italic"})

STANDARD_FAMILIES: Dict[str, Dict[StyleSet, str]] = {
    "times": {
        _REGULAR: "Times-Roman",
        _BOLD: "Times-Bold",
        _ITALIC: "Times-Italic",
        _BOLD_ITALIC: "Times-BoldItalic",
    },
    "helvetica": {
        _REGULAR: "Helvetica",
        _BOLD: "Helvetica-Bold",
        _ITALIC: "Helvetica-Oblique",
        _BOLD_ITALIC: "Helvetica-BoldOblique",
    },
    "courier": {
        _REGULAR: "Courier",
        _BOLD: "Courier-Bold",
        _ITALIC: "Courier-Oblique",
        _BOLD_ITALIC: "Courier-BoldOblique",
    },
}


class UnknownFont(StampError):
    """A format references a font family that is not registered."""

    def __init__(self, family: str):
        super().__init__(f"No font registered for family {family!r}")
        self.family = family


def _normalize_style(style: Iterable[str]) -> StyleSet:
    return frozenset(style) - {"regular"}


class FontRegistry:
    """
    Resolves format font references to ReportLab font names.

    Registries are immutable; add_font() returns a new registry.

    Example:
        >>> registry = FontRegistry()
        >>> registry.font_name("times", {"bold"})
        'Times-Bold'
        >>> registry.font_name("times", {"regular"})
        'Times-Roman'
    """

    def __init__(self, families: Mapping[str, Mapping[StyleSet, str]] | None = None):
        source = STANDARD_FAMILIES if families is None else families
        self._families: Dict[str, Dict[StyleSet, str]] = {
            family: dict(styles) for family, styles in source.items()
        }

    @property
    def families(self) -> Tuple[str, ...]:
        return tuple(sorted(self._families))

    def has_family(self, family: str) -> bool:
        return family in self._families

    def add_font(
        self,
        path: Union[str, Path],
        family: str,
        style: Iterable[str] = (),
    ) -> FontRegistry:
        """
        Register a TrueType font file for a family/style pair.

        Args:
            path: Path to a .ttf file (bare names are searched on
                ReportLab's TTF search path)
            family: Family name used in formats, e.g. "open-sans"
            style: Style set, e.g. {"bold"}; {"regular"} or empty for the
                regular face

        Returns:
            New registry including the font

        Raises:
            reportlab.pdfbase.ttfonts.TTFError: If the file is not a
                usable TrueType font
        """
        style_set = _normalize_style(style)
        suffix = "-".join(sorted(style_set)) or "regular"
        font_name = f"{family}-{suffix}"
        pdfmetrics.registerFont(TTFont(font_name, str(path)))
        logger.info(f"Registered font {font_name} from {path}")

        families = {name: dict(styles) for name, styles in self._families.items()}
        families.setdefault(family, {})[style_set] = font_name
        return FontRegistry(families)

    def font_name(self, family: str, style: Iterable[str] = ()) -> str:
        """
        Resolve a family and style set to a registered font name.

        A missing style variant falls back to the family's regular face,
        then to any face of the family.

        Raises:
            UnknownFont: If the family is not registered
        """
        faces = self._families.get(family)
        if not faces:
            raise UnknownFont(family)
        style_set = _normalize_style(style)
        if style_set in faces:
            return faces[style_set]
        fallback = faces.get(_REGULAR) or next(iter(faces.values()))
        logger.debug(f"No {sorted(style_set)} face for {family!r}, using {fallback}")
        return fallback
