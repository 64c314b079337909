from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .layout import PixelRect


@dataclass(frozen=True, slots=True)
class NormalizedBox:
    """
    Recognizer-space bounding box.

    Coordinates are normalized to [0, 1] relative to the page image with the
    origin at the BOTTOM-left (y increases upward).
    """

    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    def to_pixel_rect(self, image_width: float, image_height: float) -> PixelRect:
        # Flip to top-left origin while scaling into pixel space.
        return PixelRect(
            x=self.min_x * image_width,
            y=(1.0 - self.max_y) * image_height,
            width=self.width * image_width,
            height=self.height * image_height,
        )

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "NormalizedBox":
        return NormalizedBox(
            min_x=float(d["min_x"]),
            min_y=float(d["min_y"]),
            width=float(d["width"]),
            height=float(d["height"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"min_x": self.min_x, "min_y": self.min_y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class RecognizedText:
    """
    Single recognition hypothesis: text, confidence in [0, 1], normalized box.

    `text` is exactly what the engine returned (no fixed-rule correction yet).
    """

    text: str
    confidence: float
    bbox: NormalizedBox

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "RecognizedText":
        return RecognizedText(
            text=str(d.get("text", "")),
            confidence=float(d["confidence"]),
            bbox=NormalizedBox.from_dict(d["bbox"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "confidence": self.confidence, "bbox": self.bbox.to_dict()}
