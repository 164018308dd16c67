"""
Module: cascade

Purpose:
    Fill one requested page and every overflow page it produces.
    Holes are filled in priority order; content a hole could not fit is
    carried to the hole of the same name on the template's overflow
    template, page after page, until nothing is left over.

Key Functions:
    - fill_holes(): Fill every hole of one page, collect overflow
    - cascade_page(): Run the overflow cascade for one requested page

Key Classes:
    - CascadeResult: Pages produced and warnings raised
    - CascadeStalledError: Overflow stopped shrinking
    - OverflowDiscardedError: Overflow had nowhere to go (RAISE policy)

Algorithm:
    1. Pop (template, page data) from the work list and render it.
    2. Overflow from a template without an overflow target, or for a
       hole the overflow template lacks, is discarded per OverflowPolicy.
    3. Carried overflow, merged over the page's repeat=True locations,
       becomes the next page on the overflow template.
    4. The number of pending overflow tokens must shrink; more stalled
       steps in a row than there are templates is an error.

Dependencies:
    - context: Templates, hole types
    - output.document: Page lifecycle

Used By:
    - controller: stamp_pages()
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Mapping, Optional, Tuple

from stamp_toolkit.config import OverflowPolicy, StampConfig
from stamp_toolkit.context import StampContext
from stamp_toolkit.core.models import Location, PageData, Template, Token
from stamp_toolkit.errors import StampError
from stamp_toolkit.output.document import DocumentBuilder
from stamp_toolkit.output.sink import RenderSink

logger = logging.getLogger(__name__)


class CascadeStalledError(StampError):
    """Raised when overflow keeps cascading without being consumed."""

    def __init__(self, template: str, pending: int, steps: int):
        super().__init__(
            f"Overflow stopped shrinking at template {template!r}: "
            f"{pending} tokens pending after {steps} pages without progress"
        )
        self.template = template
        self.pending = pending


class OverflowDiscardedError(StampError):
    """Raised under OverflowPolicy.RAISE when overflow cannot be placed."""

    def __init__(self, message: str, template: str, hole: str):
        super().__init__(message)
        self.template = template
        self.hole = hole


@dataclass(frozen=True)
class CascadeResult:
    """
    Outcome of cascading one requested page.

    Attributes:
        page_count: Pages rendered (the requested page plus overflow pages)
        warnings: Discarded overflow notices (OverflowPolicy.WARN)
    """
    page_count: int
    warnings: Tuple[str, ...] = ()


def fill_holes(
    sink: RenderSink,
    template: Template,
    page: PageData,
    context: StampContext,
) -> Dict[str, Location]:
    """
    Fill the holes of one page in ascending priority order.

    Holes without a location on the page are skipped.

    Returns:
        Overflow locations keyed by hole name (empty if everything fit)

    Raises:
        UnsupportedHoleType: If a hole type has no filler
    """
    overflows: Dict[str, Location] = {}
    for hole in template.holes_by_priority():
        location = page.location(hole.name)
        if location is None:
            logger.debug(f"No contents for hole {hole.name!r} on {template.name!r}")
            continue
        filler = context.hole_types.get(hole.type)
        overflow = filler.fill(sink, hole, location, context)
        if overflow:
            overflows.update(overflow)
    return overflows


def _token_count(location: Location) -> Optional[int]:
    """Number of pending tokens, or None for non-token overflow."""
    text = location.contents.get("text")
    if isinstance(text, tuple) and all(isinstance(t, Token) for t in text):
        return len(text)
    return None


def _pending_tokens(locations: Mapping[str, Location]) -> Optional[int]:
    total = 0
    for location in locations.values():
        count = _token_count(location)
        if count is None:
            return None
        total += count
    return total


class _Cascade:
    """Work list state for one requested page."""

    def __init__(self, builder: DocumentBuilder, context: StampContext, config: StampConfig):
        self.builder = builder
        self.context = context
        self.config = config
        self.warnings: List[str] = []
        self.pages = 0
        self._stalled = 0
        self._last_pending: Optional[int] = None
        self._stall_limit = max(1, len(context.templates))

    def discard(self, template: Template, hole_name: str, location: Location, reason: str) -> None:
        count = _token_count(location)
        size = f"{count} tokens" if count is not None else "non-text contents"
        message = f"Discarded overflow of hole {hole_name!r} on template {template.name!r} ({size}): {reason}"

        policy = self.config.overflow_policy
        if policy is OverflowPolicy.RAISE:
            raise OverflowDiscardedError(message, template.name, hole_name)
        if policy is OverflowPolicy.WARN:
            logger.warning(message)
            self.warnings.append(message)
        else:
            logger.debug(message)

    def next_page(
        self,
        template: Template,
        page: PageData,
        overflows: Mapping[str, Location],
    ) -> Tuple[Optional[PageData], Dict[str, Location]]:
        """
        Page data for the overflow template (None when the cascade ends)
        and the overflow carried onto it.
        """
        if not overflows:
            return None, {}

        if template.overflow is None:
            for name, location in overflows.items():
                self.discard(template, name, location, "template has no overflow template")
            return None, {}

        target = self.context.template(template.overflow).template
        carried: Dict[str, Location] = {}
        for name, location in overflows.items():
            if target.hole(name) is None:
                self.discard(template, name, location, f"no hole {name!r} on {target.name!r}")
            else:
                carried[name] = location
        if not carried:
            return None, {}

        locations = {name: loc for name, loc in page.locations.items() if loc.repeat}
        locations.update(carried)
        return PageData(target.name, locations), carried

    def check_progress(self, template: Template, overflows: Mapping[str, Location]) -> None:
        pending = _pending_tokens(overflows)
        if pending is None:
            self._stalled = 0
            self._last_pending = None
            return

        if self._last_pending is not None and pending >= self._last_pending:
            self._stalled += 1
            if self._stalled > self._stall_limit:
                raise CascadeStalledError(template.name, pending, self._stalled)
        else:
            self._stalled = 0
        self._last_pending = pending

    def render(self, page: PageData) -> Tuple[Template, Dict[str, Location]]:
        entry = self.context.template(page.template)
        sink = self.builder.begin_page(entry.template, entry.document)
        overflows = fill_holes(sink, entry.template, page, self.context)
        self.builder.end_page()
        self.pages += 1
        return entry.template, overflows

    def run(self, page: PageData) -> CascadeResult:
        work: Deque[PageData] = deque([page])
        while work:
            current = work.popleft()
            template, overflows = self.render(current)

            following, carried = self.next_page(template, current, overflows)
            if following is None:
                continue

            self.check_progress(template, carried)
            logger.debug(f"Overflow from {template.name!r} continues on {following.template!r}")
            work.append(following)

        return CascadeResult(page_count=self.pages, warnings=tuple(self.warnings))


def cascade_page(
    builder: DocumentBuilder,
    page: PageData,
    context: StampContext,
    config: Optional[StampConfig] = None,
) -> CascadeResult:
    """
    Render a requested page and all of its overflow pages.

    Args:
        builder: Document receiving the pages
        page: Requested page
        context: Stamping context
        config: Run options (overflow policy)

    Returns:
        CascadeResult with the number of pages rendered

    Raises:
        UnknownTemplate: If a template in the chain does not exist
        CascadeStalledError: If overflow stops being consumed
        OverflowDiscardedError: If overflow is lost under OverflowPolicy.RAISE
    """
    result = _Cascade(builder, context, config or StampConfig()).run(page)
    if result.page_count > 1:
        logger.info(f"Page on {page.template!r} cascaded onto {result.page_count - 1} overflow pages")
    return result
