"""
Module: holes.image

Purpose:
    Fill "image" holes. The image is scaled to fit the hole, keeping its
    aspect ratio, and centred in the hole.

Contents:
    {"image": PIL.Image.Image | bytes | str | Path}
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Tuple

from PIL import Image, UnidentifiedImageError

from stamp_toolkit.core.models import Hole, Location

from .registry import HoleContentError, HoleFiller, Overflow

if TYPE_CHECKING:
    from stamp_toolkit.context import StampContext
    from stamp_toolkit.output.sink import RenderSink

logger = logging.getLogger(__name__)


def _load_image(hole: Hole, value) -> Image.Image:
    if isinstance(value, Image.Image):
        return value
    try:
        if isinstance(value, (bytes, bytearray)):
            img = Image.open(io.BytesIO(value))
        elif isinstance(value, (str, Path)):
            img = Image.open(value)
        else:
            raise HoleContentError(hole, f"unsupported image contents {type(value).__name__}")
        img.load()
    except (OSError, UnidentifiedImageError) as e:
        raise HoleContentError(hole, f"cannot read image: {e}") from e
    return img


def fit_image(size: Tuple[int, int], hole: Hole) -> Tuple[float, float, float, float]:
    """
    Placement of an image scaled into a hole.

    Returns:
        (x, y, width, height) in points

    Example:
        >>> fit_image((200, 100), Hole("logo", "image", 0, 0, 100, 100))
        (0.0, 25.0, 100.0, 50.0)
    """
    img_width, img_height = size
    scale = min(hole.width / img_width, hole.height / img_height)
    width = img_width * scale
    height = img_height * scale
    x = hole.x + (hole.width - width) / 2
    y = hole.y + (hole.height - height) / 2
    return (float(x), float(y), float(width), float(height))


class ImageHoleFiller(HoleFiller):
    """Draws an image scaled to fit its hole. Never overflows."""

    def fill(
        self,
        sink: RenderSink,
        hole: Hole,
        location: Location,
        context: StampContext,
    ) -> Overflow:
        img = _load_image(hole, self.content(hole, location, "image"))
        if img.width == 0 or img.height == 0:
            raise HoleContentError(hole, "image is empty")

        x, y, width, height = fit_image(img.size, hole)
        sink.draw_image(img, x, y, width, height)
        logger.debug(f"Placed image in hole {hole.name!r} at {width:.1f}x{height:.1f}pt")
        return None
