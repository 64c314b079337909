from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from grouping.config import LayoutConfig
from normalize_pdf.contracts import ColorMode, RasterEngineName
from ocr.contracts import OcrConfig, OcrEngineName


class ExtractErrorKind(str, Enum):
    """
    Failure taxonomy. The never-throws entry point erases these; the richer
    result keeps them for diagnostics.
    """

    RESOURCE = "resource"  # document unreadable / unparseable: whole result empty
    PAGE = "page"  # one page unrenderable or unrecognizable: empty contribution
    CONFIG = "config"  # request cannot be satisfied for this document (e.g. page selection)


@dataclass(frozen=True, slots=True)
class ExtractError:
    code: str
    kind: ExtractErrorKind
    message: str
    page_num: int | None = None
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class PageTextResult:
    page_num: int  # 1-indexed
    ok: bool
    text: str  # page block; "" when the page has no usable fragments or failed
    errors: list[ExtractError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DocumentTextResult:
    """
    Full extraction outcome.

    `ok` is True iff there are no document-level errors and every page is ok.
    `text` is always a string; failed pages contribute nothing.
    """

    ok: bool
    source_pdf: str
    text: str
    pages: list[PageTextResult]
    errors: list[ExtractError]
    meta: dict[str, Any]

    def all_errors(self) -> list[ExtractError]:
        out = list(self.errors)
        for p in self.pages:
            out.extend(p.errors)
        return out

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ExtractOptions:
    """
    Extraction configuration.

    - scale: rasterization scale factor (1.0 == 72 dpi); higher improves
      recognition at the cost of time. Spacing thresholds are calibrated for 1.5.
    - y_tolerance: vertical pixel tolerance for row clustering
    - enable_text_correction: the recognizer's own language correction
    - minimum_confidence: observations below this are discarded before layout
    - max_workers: > 1 fans page recognition out to a thread pool
    """

    scale: float = 1.5
    y_tolerance: float = 10.0
    enable_text_correction: bool = True
    minimum_confidence: float = 0.5

    color_mode: ColorMode = ColorMode.RGB
    page_selection: str | None = None  # e.g. "1,3-5"; None => all pages
    language: str = "eng"
    psm: int | None = None
    ocr_timeout_s: float = 120.0
    max_workers: int = 1

    raster_engine: RasterEngineName = RasterEngineName.PYPDFIUM2
    ocr_engine: OcrEngineName = OcrEngineName.TESSERACT_CLI

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError("scale must be > 0")
        if self.y_tolerance < 0:
            raise ValueError("y_tolerance must be >= 0")
        if not (0.0 <= self.minimum_confidence <= 1.0):
            raise ValueError("minimum_confidence must be within [0.0, 1.0]")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    def layout_config(self) -> LayoutConfig:
        return LayoutConfig(y_tolerance=self.y_tolerance)

    def ocr_config(self) -> OcrConfig:
        return OcrConfig(
            engine=self.ocr_engine,
            enable_text_correction=self.enable_text_correction,
            language=self.language,
            psm=self.psm,
            timeout_s=self.ocr_timeout_s,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
