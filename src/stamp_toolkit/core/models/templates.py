"""
Module: templates

Purpose:
    Template descriptions and page data. A template is a named page
    layout made of holes (named rectangles) and an optional overflow
    template that receives any hole content this template could not fit.
    Page data says which template a page uses and what goes in each hole.

Key Classes:
    - Align: Horizontal/vertical alignment for single-line text holes
    - Hole: Named rectangular region on a template
    - Template: Named set of holes plus optional overflow target
    - Location: Contents for one hole on one page
    - PageData: Template name plus locations

Coordinates:
    Origin at lower-left, y increases upward, units are PDF points.
    (x, y) of a hole is its lower-left corner.

Dependencies:
    - core.schemas.validator: Template validation (jsonschema)

Used By:
    - context: Template repository
    - cascade: Page filling and overflow cascade
    - holes: Hole fillers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..schemas.validator import ValidationError, validate_template


# Built-in hole types; the registry accepts any other tag as well.
HOLE_IMAGE = "image"
HOLE_TEXT = "text"
HOLE_TEXT_PARSED = "text-parsed"

_HORIZONTAL = ("left", "center", "right")
_VERTICAL = ("top", "center", "bottom")


@dataclass(frozen=True)
class Align:
    """Alignment of a single line of text inside its hole."""
    horizontal: str = "left"
    vertical: str = "bottom"

    def __post_init__(self) -> None:
        if self.horizontal not in _HORIZONTAL:
            raise ValueError(f"horizontal must be one of {_HORIZONTAL}: {self.horizontal!r}")
        if self.vertical not in _VERTICAL:
            raise ValueError(f"vertical must be one of {_VERTICAL}: {self.vertical!r}")


@dataclass(frozen=True)
class Hole:
    """
    Named rectangular region on a template (immutable).

    Attributes:
        name: Unique name within the template
        type: Hole type tag ("image", "text", "text-parsed", or custom)
        x: Left edge in points
        y: Bottom edge in points
        width: Width in points
        height: Height in points
        priority: Draw order, ascending; only affects stacking
        format_ref: Name of the format table used by text holes
        align: Alignment used by "text" holes

    Example:
        >>> hole = Hole("body", "text-parsed", x=50, y=50, width=400, height=600)
        >>> hole.top
        650
    """

    name: str
    type: str
    x: float
    y: float
    width: float
    height: float
    priority: int = 0
    format_ref: Optional[str] = None
    align: Align = field(default_factory=Align)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Hole name must not be empty")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Hole {self.name!r} needs positive dimensions: {self.width}x{self.height}")

    @property
    def top(self) -> float:
        """Y coordinate of the top edge."""
        return self.y + self.height

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Hole:
        align = data.get("align", {})
        return cls(
            name=data["name"],
            type=data["type"],
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
            priority=data.get("priority", 0),
            format_ref=data.get("format"),
            align=Align(
                horizontal=align.get("horizontal", "left"),
                vertical=align.get("vertical", "bottom"),
            ),
        )


@dataclass(frozen=True)
class Template:
    """
    Named page layout (immutable).

    Attributes:
        name: Template name used by PageData.template
        holes: Holes on the template, unique by name
        overflow: Template that receives overflowing hole content; when
            None, overflowing content is discarded
        page_size: (width, height) used when the template has no PDF page

    Example:
        >>> t = Template("first", (Hole("body", "text-parsed", 0, 0, 100, 100),), overflow="next")
        >>> t.hole("body").name
        'body'
    """

    name: str
    holes: Tuple[Hole, ...] = ()
    overflow: Optional[str] = None
    page_size: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "holes", tuple(self.holes))
        names = [hole.name for hole in self.holes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValidationError(
                f"Template {self.name!r} has duplicate hole names: {duplicates}",
                path="holes",
            )

    @property
    def hole_names(self) -> frozenset[str]:
        return frozenset(hole.name for hole in self.holes)

    def hole(self, name: str) -> Optional[Hole]:
        """Return the hole with the given name, or None."""
        for hole in self.holes:
            if hole.name == name:
                return hole
        return None

    def holes_by_priority(self) -> Tuple[Hole, ...]:
        """Holes in draw order (ascending priority, stable)."""
        return tuple(sorted(self.holes, key=lambda h: h.priority))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Template:
        """
        Validate and build a template from a plain description.

        Raises:
            ValidationError: If data does not match template.schema.json
        """
        validate_template(dict(data))
        page_size = data.get("page-size")
        return cls(
            name=data["name"],
            holes=tuple(Hole.from_dict(h) for h in data["holes"]),
            overflow=data.get("overflow"),
            page_size=tuple(page_size) if page_size else None,
        )


@dataclass(frozen=True)
class Location:
    """
    Contents for a single hole on a single page.

    Attributes:
        contents: Hole-type specific data, e.g. {"text": "..."} or
            {"image": <PIL.Image>}
        repeat: Repeat these contents on every overflow page produced
            from the page they belong to
    """
    contents: Mapping[str, Any]
    repeat: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Location:
        if "contents" not in data:
            raise ValidationError("Location needs 'contents'", path="contents")
        return cls(contents=dict(data["contents"]), repeat=bool(data.get("repeat", False)))


@dataclass(frozen=True)
class PageData:
    """
    Data for one requested page.

    Attributes:
        template: Template name in the context
        locations: Mapping of hole name to Location

    Example:
        >>> page = PageData("first", {"title": Location({"text": "Hello"})})
        >>> page.template
        'first'
    """

    template: str
    locations: Mapping[str, Location] = field(default_factory=dict)

    def location(self, hole_name: str) -> Optional[Location]:
        return self.locations.get(hole_name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PageData:
        if "template" not in data:
            raise ValidationError("Page data needs 'template'", path="template")
        locations: Dict[str, Location] = {}
        for name, loc in data.get("locations", {}).items():
            locations[name] = loc if isinstance(loc, Location) else Location.from_dict(loc)
        return cls(template=data["template"], locations=locations)
