from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .contracts import RasterEngineName
from .engines import PdfRasterEngine, Pypdfium2Engine, RasterDocument

logger = logging.getLogger(__name__)


def get_engine(engine: RasterEngineName) -> PdfRasterEngine:
    if engine == RasterEngineName.PYPDFIUM2:
        return Pypdfium2Engine()
    raise ValueError(f"Unsupported rasterization engine: {engine}")


def canonical_page_selection(selection: str | None) -> str:
    """
    Deterministic canonicalization for audit metadata (does NOT validate semantics).
    """
    if selection is None:
        return "all"
    s = "".join(selection.split())
    return s if s != "" else "all"


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """
    Parse "1,3-5" into a sorted list of unique 1-indexed page numbers.
    None/blank => all pages.
    """

    if selection is None or selection.strip() == "":
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            a_str, b_str = part.split("-", 1)
            a = int(a_str.strip())
            b = int(b_str.strip())
            if a <= 0 or b <= 0:
                raise ValueError("page numbers must be >= 1")
            if b < a:
                raise ValueError(f"invalid range: {part!r}")
            pages.update(range(a, b + 1))
        else:
            p = int(part)
            if p <= 0:
                raise ValueError("page numbers must be >= 1")
            pages.add(p)

    ordered = sorted(pages)
    if ordered and ordered[-1] > page_count:
        raise ValueError(f"page selection out of bounds (1..{page_count})")
    return ordered


@contextmanager
def open_pdf_document(*, engine: PdfRasterEngine, pdf_file: Path) -> Iterator[RasterDocument]:
    """
    Scoped document access: the document is released on every exit path,
    including exceptions raised while pages are being processed.
    """

    doc = engine.open_document(pdf_file=pdf_file)
    try:
        logger.debug("opened %s with %s (%d pages)", pdf_file.name, engine.backend_id(), doc.page_count)
        yield doc
    finally:
        doc.close()
