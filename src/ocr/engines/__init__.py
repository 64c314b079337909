from .base import OcrEngine
from .tesseract_cli import TesseractCliEngine

__all__ = ["OcrEngine", "TesseractCliEngine"]
