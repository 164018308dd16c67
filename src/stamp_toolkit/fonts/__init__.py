"""
Module: fonts

Purpose:
    Font registration and text metrics.

Key Classes:
    - FontRegistry: Family/style -> ReportLab font name
    - FontMetrics: Abstract metrics provider
    - ReportLabFontMetrics: Metrics from ReportLab font tables
    - UnknownFont: Unregistered font family
"""

from .registry import FontRegistry, UnknownFont, STANDARD_FAMILIES
from .metrics import FontMetrics, ReportLabFontMetrics

__all__ = [
    "FontRegistry",
    "UnknownFont",
    "STANDARD_FAMILIES",
    "FontMetrics",
    "ReportLabFontMetrics",
]
