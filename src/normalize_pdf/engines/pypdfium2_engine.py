from __future__ import annotations

import logging
from pathlib import Path

import pypdfium2 as pdfium

from ..contracts import ColorMode, RenderedPage

from .base import PdfRasterEngine, RasterDocument

logger = logging.getLogger(__name__)


class Pypdfium2Document(RasterDocument):
    def __init__(self, doc: pdfium.PdfDocument) -> None:
        self._doc = doc
        self._closed = False

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def render_page(self, *, page_num: int, scale: float, color_mode: ColorMode) -> RenderedPage:
        page_count = len(self._doc)
        if page_num < 1 or page_num > page_count:
            raise ValueError(f"Page out of range: {page_num} (1..{page_count})")

        page = self._doc[page_num - 1]
        try:
            # Default fill is opaque white, matching a paper background.
            bitmap = page.render(scale=scale)
            pil_img = bitmap.to_pil()
        finally:
            page.close()

        if color_mode == ColorMode.GRAY:
            pil_img = pil_img.convert("L")
        else:
            pil_img = pil_img.convert("RGB")

        width_px, height_px = pil_img.size
        logger.debug("rendered page %d at scale %.2f -> %dx%d", page_num, scale, width_px, height_px)
        return RenderedPage(
            page_num=page_num,
            image=pil_img,
            width_px=int(width_px),
            height_px=int(height_px),
        )

    def close(self) -> None:
        if not self._closed:
            self._doc.close()
            self._closed = True


class Pypdfium2Engine(PdfRasterEngine):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        version = getattr(pdfium, "__version__", None)
        return None if version is None else str(version)

    def open_document(self, *, pdf_file: Path) -> RasterDocument:
        return Pypdfium2Document(pdfium.PdfDocument(str(pdf_file)))
