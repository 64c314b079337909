"""
Layout-preserving text extraction (PDF -> plain text).

Per page: rasterize -> recognize -> correct/filter -> group rows -> space
columns; page blocks are joined with a blank line.

`extract_text` is the best-effort entry point (always a string, never raises);
`run_extract_text_on_pdf` keeps per-page and document-level failure details.
"""

from .contracts import (
    DocumentTextResult,
    ExtractError,
    ExtractErrorKind,
    ExtractOptions,
    PageTextResult,
)
from .module import (
    build_page_fragments,
    extract_text,
    join_page_blocks,
    page_text_from_observations,
    run_extract_text_on_pdf,
)

__all__ = [
    "DocumentTextResult",
    "ExtractError",
    "ExtractErrorKind",
    "ExtractOptions",
    "PageTextResult",
    "build_page_fragments",
    "extract_text",
    "join_page_blocks",
    "page_text_from_observations",
    "run_extract_text_on_pdf",
]
