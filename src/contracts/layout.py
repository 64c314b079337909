from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PixelRect:
    """
    Axis-aligned rectangle in page-pixel coordinates:
    - (x, y) is the top-left origin, y increases downward
    - width/height may be negative for malformed OCR geometry; accessors standardize
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return min(self.x, self.x + self.width)

    @property
    def max_x(self) -> float:
        return max(self.x, self.x + self.width)

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def min_y(self) -> float:
        return min(self.y, self.y + self.height)

    @property
    def max_y(self) -> float:
        return max(self.y, self.y + self.height)

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PixelRect":
        return PixelRect(
            x=float(d["x"]),
            y=float(d["y"]),
            width=float(d["width"]),
            height=float(d["height"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Fragment:
    """
    Recognized text unit placed on the page (a "word box").

    `text` is already corrected by the fixed-rule normalizer.
    """

    text: str
    rect: PixelRect

    @property
    def min_x(self) -> float:
        return self.rect.min_x

    @property
    def max_x(self) -> float:
        return self.rect.max_x

    @property
    def mid_x(self) -> float:
        return self.rect.mid_x

    @property
    def mid_y(self) -> float:
        return self.rect.mid_y

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Fragment":
        return Fragment(text=str(d.get("text", "")), rect=PixelRect.from_dict(d["rect"]))

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "rect": self.rect.to_dict()}


@dataclass(frozen=True, slots=True)
class Row:
    # Reading order: ascending min_x.
    fragments: tuple[Fragment, ...]

    def __len__(self) -> int:
        return len(self.fragments)

    def texts(self) -> list[str]:
        return [f.text for f in self.fragments]

    def to_dict(self) -> dict[str, Any]:
        return {"fragments": [f.to_dict() for f in self.fragments]}
