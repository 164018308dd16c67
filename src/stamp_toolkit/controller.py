"""
Module: controller

Purpose:
    Orchestrate a complete stamping run.
    Validate → Resolve pages → Cascade each page → Compose PDF

Key Functions:
    - stamp_pages(): Main entry point, returns PDF bytes plus run details
    - fill_pages(): PDF bytes only

Key Classes:
    - StampResult: Output of a stamping run

Dependencies:
    - context: Templates, formats, fonts, hole types
    - cascade: Per-page overflow cascade
    - output.document: PDF composition

Errors:
    Every failure aborts the run; no partial document is returned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from stamp_toolkit.cascade import cascade_page
from stamp_toolkit.config import StampConfig
from stamp_toolkit.context import StampContext
from stamp_toolkit.core.models import PageData
from stamp_toolkit.errors import StampError
from stamp_toolkit.output.document import DocumentBuilder

logger = logging.getLogger(__name__)

PageInput = Union[PageData, Mapping[str, Any]]


class NoPagesError(StampError):
    """Raised when stamp_pages() is called without pages."""


@dataclass(frozen=True)
class StampResult:
    """
    Complete stamping result (immutable).

    Attributes:
        pdf: Generated PDF file contents
        page_count: Pages in the PDF, overflow pages included
        warnings: Discarded overflow notices

    Example:
        >>> result = stamp_pages(pages, context)
        >>> Path("out.pdf").write_bytes(result.pdf)
    """
    pdf: bytes
    page_count: int
    warnings: tuple[str, ...]


def _page_data(pages: Iterable[PageInput]) -> List[PageData]:
    return [page if isinstance(page, PageData) else PageData.from_dict(page) for page in pages]


def stamp_pages(
    pages: Iterable[PageInput],
    context: StampContext,
    config: Optional[StampConfig] = None,
) -> StampResult:
    """
    Fill template pages and produce a PDF.

    Each requested page is rendered on its template; text that does not
    fit its hole continues on the template's overflow template, one page
    per step, before the next requested page starts.

    Args:
        pages: PageData objects or {"template": ..., "locations": ...} dicts
        context: Stamping context
        config: Run options

    Returns:
        StampResult with PDF bytes

    Raises:
        NoPagesError: If pages is empty (a PDF cannot have zero pages)
        UnknownTemplate: If a page or overflow target names a missing template
        StampError: For any other failure (subclasses name the cause)

    Example:
        >>> result = stamp_pages([{"template": "letter", "locations": {...}}], context)
        >>> print(f"Generated {result.page_count} pages")
    """
    config = config or StampConfig()
    start_time = time.perf_counter()

    page_data = _page_data(pages)
    if not page_data:
        raise NoPagesError("No pages to stamp")

    context.validate()
    for page in page_data:
        context.template(page.template)

    logger.info(f"Stamping {len(page_data)} pages with {len(context.templates)} templates")

    warnings: List[str] = []
    with DocumentBuilder(context.fonts, config.default_page_size) as builder:
        for page in page_data:
            result = cascade_page(builder, page, context, config)
            warnings.extend(result.warnings)
        pdf = builder.finish()
        page_count = builder.page_count

    elapsed = time.perf_counter() - start_time
    logger.info(f"Stamped {page_count} pages in {elapsed:.2f}s")
    if warnings:
        logger.info(f"{len(warnings)} overflow warnings")

    return StampResult(pdf=pdf, page_count=page_count, warnings=tuple(warnings))


def fill_pages(pages: Iterable[PageInput], context: StampContext) -> bytes:
    """
    Fill template pages with the default configuration and return the PDF.

    An empty page sequence is rejected with NoPagesError: a PDF needs at
    least one page, so there is no empty document to return.
    """
    return stamp_pages(pages, context).pdf
