"""
Module: output.document

Purpose:
    Build the output PDF. Hole contents are drawn with reportlab onto an
    overlay document (one overlay page per output page); PyMuPDF then
    copies each template's PDF page, or creates a blank page when the
    template has none, and stamps the matching overlay page on top.

Key Classes:
    - DocumentBuilder: Page-by-page document assembly
    - TemplateDocumentError: Unreadable template PDF

Dependencies:
    - reportlab: Overlay canvas
    - fitz (PyMuPDF): Template page copy and overlay stamping
    - output.sink: ReportLabSink

Used By:
    - cascade: One begin_page()/end_page() pair per rendered page
    - controller: finish() produces the final bytes
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import fitz
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from stamp_toolkit.core.models import Template
from stamp_toolkit.errors import StampError
from stamp_toolkit.fonts.registry import FontRegistry

from .sink import ReportLabSink

logger = logging.getLogger(__name__)

DocumentSource = Union[str, Path, bytes]


class TemplateDocumentError(StampError):
    """A template's PDF cannot be opened or has no pages."""

    def __init__(self, template: str, message: str):
        super().__init__(f"Template {template!r}: {message}")
        self.template = template


class DocumentStateError(StampError):
    """Pages were begun, ended or finished out of order."""


@dataclass(frozen=True)
class _OverlayPage:
    template: str
    page_size: Tuple[float, float]
    has_content: bool


class DocumentBuilder:
    """
    Assembles output pages from template pages plus drawn overlays.

    Use as a context manager so template documents are closed on errors.

    Example:
        >>> with DocumentBuilder(FontRegistry()) as builder:
        ...     sink = builder.begin_page(template)
        ...     sink.begin_text()
        ...     ...
        ...     builder.end_page()
        ...     pdf_bytes = builder.finish()
    """

    def __init__(
        self,
        fonts: FontRegistry,
        default_page_size: Tuple[float, float] = A4,
    ):
        self._fonts = fonts
        self._default_page_size = default_page_size
        self._overlay_buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._overlay_buffer, pagesize=default_page_size)
        self._pages: List[_OverlayPage] = []
        self._documents: Dict[str, fitz.Document] = {}
        self._sources: Dict[str, Optional[DocumentSource]] = {}
        self._sink: Optional[ReportLabSink] = None
        self._current: Optional[Tuple[str, Tuple[float, float]]] = None
        self._finished = False

    def __enter__(self) -> DocumentBuilder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def _template_document(self, name: str) -> Optional[fitz.Document]:
        if name in self._documents:
            return self._documents[name]
        source = self._sources.get(name)
        if source is None:
            return None
        try:
            if isinstance(source, bytes):
                doc = fitz.open(stream=source, filetype="pdf")
            else:
                doc = fitz.open(str(source))
        except (RuntimeError, ValueError, OSError) as e:
            raise TemplateDocumentError(name, f"cannot open PDF: {e}") from e
        if doc.page_count == 0:
            doc.close()
            raise TemplateDocumentError(name, "PDF has no pages")
        self._documents[name] = doc
        logger.debug(f"Opened template document for {name!r}")
        return doc

    def _page_size(self, template: Template) -> Tuple[float, float]:
        doc = self._template_document(template.name)
        if doc is not None:
            rect = doc[0].rect
            return (rect.width, rect.height)
        if template.page_size:
            return template.page_size
        return self._default_page_size

    def begin_page(
        self,
        template: Template,
        document: Optional[DocumentSource] = None,
    ) -> ReportLabSink:
        """
        Start an output page based on a template.

        Args:
            template: Template of the page
            document: Template PDF (path or bytes); its first page is the
                page background. None gives a blank page.

        Returns:
            Sink drawing onto the page's overlay
        """
        if self._finished:
            raise DocumentStateError("Document already finished")
        if self._sink is not None:
            raise DocumentStateError("Previous page not ended")

        self._sources.setdefault(template.name, document)
        page_size = self._page_size(template)
        self._canvas.setPageSize(page_size)
        self._sink = ReportLabSink(self._canvas, self._fonts)
        self._current = (template.name, page_size)
        return self._sink

    def end_page(self) -> None:
        if self._sink is None or self._current is None:
            raise DocumentStateError("No page in progress")
        name, page_size = self._current
        self._canvas.showPage()
        self._pages.append(_OverlayPage(name, page_size, self._sink.has_content))
        self._sink = None
        self._current = None

    def finish(self) -> bytes:
        """
        Compose template pages and overlays into the final PDF.

        Returns:
            PDF file contents

        Raises:
            DocumentStateError: If a page is still open or there are no pages
        """
        if self._sink is not None:
            raise DocumentStateError("Page still in progress")
        if not self._pages:
            raise DocumentStateError("Document has no pages")

        self._canvas.save()
        self._finished = True

        overlay = fitz.open(stream=self._overlay_buffer.getvalue(), filetype="pdf")
        output = fitz.open()
        try:
            for index, page in enumerate(self._pages):
                source = self._template_document(page.template)
                if source is not None:
                    output.insert_pdf(source, from_page=0, to_page=0)
                    target = output[-1]
                else:
                    width, height = page.page_size
                    target = output.new_page(width=width, height=height)
                # fitz refuses to show an empty page
                if page.has_content:
                    target.show_pdf_page(target.rect, overlay, index)
            data = output.tobytes(garbage=3, deflate=True)
        finally:
            output.close()
            overlay.close()

        logger.info(f"Composed {len(self._pages)} pages ({len(data)} bytes)")
        return data

    def close(self) -> None:
        """Close every opened template document."""
        for doc in self._documents.values():
            doc.close()
        self._documents.clear()
