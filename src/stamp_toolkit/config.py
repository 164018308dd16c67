"""
Module: config

Purpose:
    Configuration for a stamping run. Immutable configuration with
    validation on construction.

Key Classes:
    - OverflowPolicy: What to do with overflow that has nowhere to go
    - StampConfig: Options for stamp_pages()

Used By:
    - controller: stamp_pages()
    - cascade: Overflow handling
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple

from reportlab.lib.pagesizes import A4


class OverflowPolicy(Enum):
    """
    Handling of overflow that cannot be carried to another page.

    Overflow is lost when its template names no overflow template, or
    when the overflow template has no hole of the same name.

    Attributes:
        SILENT: Discard without notice
        WARN: Discard, log a warning and report it in StampResult.warnings
        RAISE: Abort the run with OverflowDiscardedError

    Example:
        >>> StampConfig(overflow_policy=OverflowPolicy.RAISE).overflow_policy.name
        'RAISE'
    """

    SILENT = auto()
    WARN = auto()
    RAISE = auto()


@dataclass(frozen=True)
class StampConfig:
    """
    Options for a stamping run (immutable).

    Attributes:
        overflow_policy: Handling of overflow with no target hole
        default_page_size: (width, height) in points of pages whose
            template has neither a PDF nor a page size
    """

    overflow_policy: OverflowPolicy = OverflowPolicy.WARN
    default_page_size: Tuple[float, float] = A4

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not isinstance(self.overflow_policy, OverflowPolicy):
            raise ValueError(f"overflow_policy must be an OverflowPolicy: {self.overflow_policy!r}")
        if len(self.default_page_size) != 2:
            raise ValueError(f"default_page_size must be (width, height): {self.default_page_size!r}")
        width, height = self.default_page_size
        if width <= 0 or height <= 0:
            raise ValueError(f"default_page_size must be positive: {self.default_page_size!r}")
        object.__setattr__(self, "default_page_size", (float(width), float(height)))
