"""
OCR Module for the price-list recognizer

Pluggable OCR adapters. The recognition pipeline only needs a callable
ocr_fn(image) -> str; engines created here satisfy that contract.

Usage:
    from pricelist.ocr import create_engine

    # Create an OCR engine (Tesseract)
    engine = create_engine("tesseract", language="jpn+eng")

    # Read one cropped cell
    text = engine.recognize(cell_image)

Custom engines:
    from pricelist.ocr import OCREngine, register_engine

    class VisionEngine(OCREngine):
        ...

    register_engine("vision", VisionEngine)
"""

# Public API - Base class for custom engines
from .base import OCREngine

# Public API - Factory functions
from .factory import (
    create_engine,
    register_engine,
    available_engines,
)

__all__ = [
    # Base class
    "OCREngine",
    # Factory
    "create_engine",
    "register_engine",
    "available_engines",
]
