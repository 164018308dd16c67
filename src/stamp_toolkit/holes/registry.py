"""
Module: holes.registry

Purpose:
    Dispatch from a hole's type tag to the filler that draws its contents.
    The built-in types are "image", "text" and "text-parsed"; callers
    register further types on the context.

Key Classes:
    - HoleFiller: Fill one hole from one location
    - HoleRegistry: Immutable type tag -> filler mapping
    - UnsupportedHoleType: No filler registered for a type tag
    - HoleContentError: Location contents do not suit the hole type

Used By:
    - context: Owns the registry
    - cascade: Fills holes page by page
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from stamp_toolkit.core.models import HOLE_IMAGE, HOLE_TEXT, HOLE_TEXT_PARSED, Hole, Location
from stamp_toolkit.errors import StampError

if TYPE_CHECKING:
    from stamp_toolkit.context import StampContext
    from stamp_toolkit.output.sink import RenderSink

logger = logging.getLogger(__name__)

Overflow = Optional[Dict[str, Location]]


class UnsupportedHoleType(StampError):
    """Raised when a hole type has no registered filler."""

    def __init__(self, hole_type: str):
        super().__init__(f"No filler registered for hole type {hole_type!r}")
        self.hole_type = hole_type


class HoleContentError(StampError):
    """Raised when a location's contents cannot fill its hole."""

    def __init__(self, hole: Hole, message: str):
        super().__init__(f"Hole {hole.name!r} ({hole.type}): {message}")
        self.hole = hole.name


class HoleFiller(ABC):
    """
    Draws one location into one hole.

    Fillers must not keep state between calls; the same filler serves
    every hole of its type.
    """

    @abstractmethod
    def fill(
        self,
        sink: RenderSink,
        hole: Hole,
        location: Location,
        context: StampContext,
    ) -> Overflow:
        """
        Draw location contents into hole.

        Returns:
            Overflow locations keyed by hole name, or None when
            everything fit
        """

    @staticmethod
    def content(hole: Hole, location: Location, key: str) -> Any:
        """Fetch a required contents entry."""
        try:
            return location.contents[key]
        except KeyError:
            raise HoleContentError(hole, f"location has no {key!r} contents") from None


class HoleRegistry:
    """
    Immutable mapping of hole type tag to filler.

    Example:
        >>> registry = HoleRegistry().register(HOLE_TEXT, TextHoleFiller())
        >>> registry.get("text")
        <...TextHoleFiller object at ...>
        >>> registry.get("video")
        Traceback (most recent call last):
        UnsupportedHoleType: No filler registered for hole type 'video'
    """

    def __init__(self, fillers: Optional[Mapping[str, HoleFiller]] = None):
        self._fillers: Dict[str, HoleFiller] = dict(fillers or {})

    def register(self, hole_type: str, filler: HoleFiller) -> HoleRegistry:
        """Return a registry with filler handling hole_type (replacing any previous one)."""
        if not hole_type:
            raise ValueError("Hole type must not be empty")
        if hole_type in self._fillers:
            logger.debug(f"Replacing filler for hole type {hole_type!r}")
        fillers = dict(self._fillers)
        fillers[hole_type] = filler
        return HoleRegistry(fillers)

    def get(self, hole_type: str) -> HoleFiller:
        try:
            return self._fillers[hole_type]
        except KeyError:
            raise UnsupportedHoleType(hole_type) from None

    def __contains__(self, hole_type: object) -> bool:
        return hole_type in self._fillers

    @property
    def types(self) -> Tuple[str, ...]:
        return tuple(sorted(self._fillers))


def default_registry() -> HoleRegistry:
    """Registry with the built-in image, text and text-parsed fillers."""
    from .image import ImageHoleFiller
    from .text import ParsedTextHoleFiller, TextHoleFiller

    return (
        HoleRegistry()
        .register(HOLE_IMAGE, ImageHoleFiller())
        .register(HOLE_TEXT, TextHoleFiller())
        .register(HOLE_TEXT_PARSED, ParsedTextHoleFiller())
    )
