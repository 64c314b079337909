"""
OCR stage (perception only).

Contract:
- Input: an in-memory page image
- Output: recognized text, confidence in [0, 1], normalized bounding boxes
  (origin bottom-left)
- Constraints: no fixed-rule correction, no merging, no layout inference
"""

from .contracts import OcrConfig, OcrEngineName, OcrError, OcrPageResult
from .engines import OcrEngine, TesseractCliEngine
from .module import get_engine, recognize_page_image

__all__ = [
    "OcrConfig",
    "OcrEngine",
    "OcrEngineName",
    "OcrError",
    "OcrPageResult",
    "TesseractCliEngine",
    "get_engine",
    "recognize_page_image",
]
