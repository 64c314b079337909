from __future__ import annotations

from abc import ABC, abstractmethod

from PIL import Image

from ..contracts import OcrConfig, OcrPageResult


class OcrEngine(ABC):
    """
    Interface for OCR perception engines.

    IMPORTANT:
    - Engines return literal text hypotheses, confidences in [0, 1] and
      normalized bounding boxes (origin bottom-left).
    - Engines report failures through `OcrPageResult.errors`, not exceptions.
    """

    @abstractmethod
    def recognize_image(self, *, config: OcrConfig, image: Image.Image) -> OcrPageResult:
        raise NotImplementedError
