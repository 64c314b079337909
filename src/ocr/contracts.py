from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from contracts.ocr import RecognizedText


class OcrEngineName(str, Enum):
    """
    OCR backends supported by this module.
    """

    TESSERACT_CLI = "tesseract_cli"


@dataclass(frozen=True, slots=True)
class OcrError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class OcrPageResult:
    """
    Recognition output for one page image.

    On failure, `ok` is False and `observations` is empty. No content is
    fabricated to "fill in" missing OCR results.
    """

    ok: bool
    engine: OcrEngineName
    observations: list[RecognizedText]
    errors: list[OcrError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class OcrConfig:
    """
    Recognition configuration.

    `enable_text_correction` toggles the engine's own language-level correction
    (dictionaries). The fixed-rule correction in `grouping.text_correction`
    always runs regardless.
    """

    engine: OcrEngineName = OcrEngineName.TESSERACT_CLI
    enable_text_correction: bool = True
    language: str = "eng"  # engine hint, e.g. "eng+spa+fra"
    psm: int | None = None  # Tesseract page segmentation mode; if None, use default.
    timeout_s: float = 120.0

    def __post_init__(self) -> None:
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if not self.language.strip():
            raise ValueError("language must be a non-empty engine hint")
