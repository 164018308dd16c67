"""
Module: holes

Purpose:
    Hole-type dispatch and the built-in hole fillers.

Key Classes:
    - HoleFiller: Interface for filling one hole
    - HoleRegistry: Type tag -> filler
    - ImageHoleFiller, TextHoleFiller, ParsedTextHoleFiller: Built-ins
"""

from .registry import (
    HoleContentError,
    HoleFiller,
    HoleRegistry,
    UnsupportedHoleType,
    default_registry,
)
from .image import ImageHoleFiller, fit_image
from .text import ParsedTextHoleFiller, TextHoleFiller

__all__ = [
    "HoleContentError",
    "HoleFiller",
    "HoleRegistry",
    "UnsupportedHoleType",
    "default_registry",
    "ImageHoleFiller",
    "fit_image",
    "ParsedTextHoleFiller",
    "TextHoleFiller",
]
