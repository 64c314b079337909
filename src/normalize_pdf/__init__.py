"""
Document rasterization (PDF -> in-memory page images).

This package is intentionally limited to format normalization:
- It renders PDF pages to images deterministically at an explicit scale.
- It performs NO OCR, text extraction, layout inference, or content filtering.
- It is the ONLY stage allowed to handle PDFs.
"""

from .contracts import ColorMode, RasterEngineName, RenderedPage
from .data_access import DataAccessError, resolve_source_pdf
from .engines import PdfRasterEngine, RasterDocument
from .module import get_engine, open_pdf_document, parse_page_selection

__all__ = [
    "ColorMode",
    "DataAccessError",
    "PdfRasterEngine",
    "RasterDocument",
    "RasterEngineName",
    "RenderedPage",
    "get_engine",
    "open_pdf_document",
    "parse_page_selection",
    "resolve_source_pdf",
]
