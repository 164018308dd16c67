"""
Module: context

Purpose:
    Everything a stamping run needs besides the page data: fonts,
    templates (with their PDF pages), named format tables and hole-type
    fillers. Contexts are immutable; every add_* method returns a new
    context.

Key Classes:
    - StampContext: Fonts + templates + format tables + hole types
    - TemplateEntry: Template plus its optional PDF page
    - UnknownTemplate: Template name not in the context
    - UnknownFormatTable: Format table name not in the context

Key Functions:
    - base_context(): Context with standard fonts and built-in hole types

Usage:
    context = (
        base_context()
        .add_formats("body", {"paragraph": {"font": "times", "size": 12}})
        .add_template({"name": "first", "holes": [...], "overflow": "next"}, "first.pdf")
        .add_template({"name": "next", "holes": [...]})
    )
    pdf = fill_pages([{"template": "first", "locations": {...}}], context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import cached_property
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from stamp_toolkit.core.models import (
    HOLE_TEXT,
    HOLE_TEXT_PARSED,
    FormatTable,
    StyleRef,
    Template,
)
from stamp_toolkit.core.schemas import ValidationError
from stamp_toolkit.errors import StampError
from stamp_toolkit.fonts import FontRegistry, ReportLabFontMetrics, UnknownFont
from stamp_toolkit.holes import HoleFiller, HoleRegistry, UnsupportedHoleType, default_registry
from stamp_toolkit.holes.text import LINE_FORMAT_KEY
from stamp_toolkit.output.document import DocumentSource

logger = logging.getLogger(__name__)

_FORMATTED_HOLES = (HOLE_TEXT, HOLE_TEXT_PARSED)


class UnknownTemplate(StampError):
    """Raised when a template name is not registered in the context."""

    def __init__(self, name: str):
        super().__init__(f"No template named {name!r}")
        self.name = name


class UnknownFormatTable(StampError):
    """Raised when a hole references a format table missing from the context."""

    def __init__(self, name: Optional[str]):
        super().__init__(f"No format table named {name!r}")
        self.name = name


@dataclass(frozen=True)
class TemplateEntry:
    """
    A template and the PDF whose first page is its background.

    Attributes:
        template: Hole layout and overflow target
        document: PDF path or bytes; None for a blank page
    """
    template: Template
    document: Optional[DocumentSource] = None


@dataclass(frozen=True, eq=False)
class StampContext:
    """
    Immutable stamping context.

    Attributes:
        fonts: Font registry
        templates: Template entries by template name
        formats: Format tables by name (Hole.format_ref)
        hole_types: Hole type -> filler
    """

    fonts: FontRegistry = field(default_factory=FontRegistry)
    templates: Mapping[str, TemplateEntry] = field(default_factory=dict)
    formats: Mapping[str, FormatTable] = field(default_factory=dict)
    hole_types: HoleRegistry = field(default_factory=default_registry)

    @cached_property
    def metrics(self) -> ReportLabFontMetrics:
        return ReportLabFontMetrics(self.fonts)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def add_font(
        self,
        path: Union[str, Path],
        family: str,
        style: Iterable[str] = (),
    ) -> StampContext:
        """Register a TrueType font; see FontRegistry.add_font()."""
        return replace(self, fonts=self.fonts.add_font(path, family, style))

    def add_template(
        self,
        template: Union[Template, Mapping[str, Any]],
        document: Optional[DocumentSource] = None,
    ) -> StampContext:
        """
        Add (or replace) a template.

        Args:
            template: Template, or a description validated against
                template.schema.json
            document: Template PDF (path or bytes), first page used

        Raises:
            ValidationError: If the description is invalid
            FileNotFoundError: If document is a path that does not exist
        """
        if not isinstance(template, Template):
            template = Template.from_dict(template)
        if isinstance(document, (str, Path)) and not Path(document).exists():
            raise FileNotFoundError(f"Template PDF not found: {document}")

        templates = dict(self.templates)
        templates[template.name] = TemplateEntry(template, document)
        logger.info(f"Added template {template.name!r} ({len(template.holes)} holes)")
        return replace(self, templates=templates)

    def add_formats(
        self,
        name: str,
        table: Union[FormatTable, Mapping[str, Any]],
    ) -> StampContext:
        """
        Add (or replace) a named format table.

        Raises:
            ValidationError: If a plain table fails schema validation
            UnknownFont: If a format uses an unregistered font family
        """
        if not isinstance(table, FormatTable):
            table = FormatTable.from_dict(table)
        for family, _ in sorted(table.fonts, key=lambda f: f[0]):
            if not self.fonts.has_family(family):
                raise UnknownFont(family)

        formats = dict(self.formats)
        formats[name] = table
        logger.debug(f"Added format table {name!r} with {len(table)} formats")
        return replace(self, formats=formats)

    def add_hole_type(self, hole_type: str, filler: HoleFiller) -> StampContext:
        """Register a filler for a (new or built-in) hole type."""
        return replace(self, hole_types=self.hole_types.register(hole_type, filler))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def template(self, name: str) -> TemplateEntry:
        try:
            return self.templates[name]
        except KeyError:
            raise UnknownTemplate(name) from None

    def format_table(self, name: Optional[str]) -> FormatTable:
        if name is None or name not in self.formats:
            raise UnknownFormatTable(name)
        return self.formats[name]

    def validate(self) -> None:
        """
        Check cross references before any page is processed.

        Raises:
            UnknownTemplate: For an overflow target that does not exist
            UnsupportedHoleType: For a hole type with no filler
            UnknownFormatTable: For a hole format_ref that does not exist
            ValidationError: For a text hole without format_ref
            UnknownFormat: For a "text" hole whose table has no
                "paragraph" format
        """
        for name, entry in self.templates.items():
            template = entry.template
            if template.overflow is not None and template.overflow not in self.templates:
                raise UnknownTemplate(template.overflow)

            for hole in template.holes:
                if hole.type not in self.hole_types:
                    raise UnsupportedHoleType(hole.type)
                if hole.type in _FORMATTED_HOLES and hole.format_ref is None:
                    raise ValidationError(
                        f"Hole {hole.name!r} in template {name!r} needs a format",
                        path=f"{name}.{hole.name}.format",
                    )
                if hole.format_ref is not None:
                    table = self.format_table(hole.format_ref)
                    if hole.type == HOLE_TEXT:
                        table.resolve(StyleRef(LINE_FORMAT_KEY))


def base_context() -> StampContext:
    """Context with the standard fonts and the built-in hole types."""
    return StampContext()
