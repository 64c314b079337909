from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..contracts import ColorMode, RenderedPage


class RasterDocument(ABC):
    """
    An opened PDF owned by a single extraction run.

    Must be closed on every exit path; use as a context manager.
    """

    @property
    @abstractmethod
    def page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def render_page(self, *, page_num: int, scale: float, color_mode: ColorMode) -> RenderedPage:
        """
        Render a 1-indexed page at `scale` (1.0 == 72 dpi) on a white background.
        """

        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "RasterDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PdfRasterEngine(ABC):
    """
    Rendering engine abstraction.

    Engines must:
    - Render PDF pages to raster images
    - Be deterministic for a given input+params
    - Perform NO OCR, text extraction, or layout inference
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def open_document(self, *, pdf_file: Path) -> RasterDocument:
        """
        Open and parse `pdf_file`. Raises if the file cannot be read or parsed.
        """

        raise NotImplementedError
