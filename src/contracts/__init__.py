"""
Canonical data contracts shared between stages.

- `contracts.ocr`: recognizer output (normalized, bottom-left origin boxes)
- `contracts.layout`: page-pixel fragments and rows consumed by layout reconstruction

Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .layout import Fragment, PixelRect, Row
from .ocr import NormalizedBox, RecognizedText

__all__ = [
    "Fragment",
    "NormalizedBox",
    "PixelRect",
    "RecognizedText",
    "Row",
]
