"""
Module: output

Purpose:
    Drawing and PDF generation.
    Hole fillers draw onto a RenderSink; DocumentBuilder composes the
    drawn overlays with template pages using ReportLab and PyMuPDF.

Key Classes:
    - RenderSink / ReportLabSink: Ordered drawing operations
    - DocumentBuilder: Output document assembly

Key Functions:
    - write_paragraphs(): Draw assembled paragraphs
    - write_unparsed_line(): Draw one aligned line

Used By:
    - holes: Hole fillers
    - cascade / controller: Page and document lifecycle
"""

from .sink import RenderSink, ReportLabSink, SinkStateError
from .writer import write_paragraphs, write_unparsed_line
from .document import DocumentBuilder, DocumentStateError, TemplateDocumentError

__all__ = [
    "RenderSink",
    "ReportLabSink",
    "SinkStateError",
    "write_paragraphs",
    "write_unparsed_line",
    "DocumentBuilder",
    "DocumentStateError",
    "TemplateDocumentError",
]
