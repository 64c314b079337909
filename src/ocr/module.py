from __future__ import annotations

from PIL import Image

from .contracts import OcrConfig, OcrEngineName, OcrPageResult
from .engines import OcrEngine, TesseractCliEngine


def get_engine(engine: OcrEngineName) -> OcrEngine:
    if engine == OcrEngineName.TESSERACT_CLI:
        return TesseractCliEngine()
    raise ValueError(f"Unsupported OCR engine: {engine}")


def recognize_page_image(
    *, config: OcrConfig, image: Image.Image, engine: OcrEngine | None = None
) -> OcrPageResult:
    """
    Run OCR on an in-memory page image.

    `engine` overrides the backend selected by `config.engine` (pluggable
    recognizers, fakes in tests).
    """

    if engine is None:
        engine = get_engine(config.engine)
    return engine.recognize_image(config=config, image=image)
