from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from PIL import Image


class ColorMode(str, Enum):
    RGB = "rgb"
    GRAY = "gray"


class RasterEngineName(str, Enum):
    """
    Rendering backend identifiers.
    """

    PYPDFIUM2 = "pypdfium2"


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """
    One rasterized page held in memory.

    The image lives only as long as the page is being processed.
    """

    page_num: int  # 1-indexed
    image: Image.Image
    width_px: int
    height_px: int
