"""
Tesseract OCR Engine

OCR implementation using Tesseract (via pytesseract) with OpenCV
preprocessing tuned for photographed price-list cells.
"""

import logging
import time
from typing import Optional

import cv2
import numpy as np
import pytesseract
from PIL import Image

from .base import OCREngine

logger = logging.getLogger(__name__)


# Japanese card names with Latin suffixes ("ex", "VMAX") and prices
DEFAULT_LANGUAGE = "jpn+eng"

# 6 = assume a single uniform block of text
DEFAULT_PSM = 6

# Cells cropped from phone photos are small; Tesseract prefers ~30px glyphs
DEFAULT_SCALE = 2.0

# Cells narrower/shorter than this are not worth a Tesseract call
MIN_CELL_SIZE = 4


def preprocess_cell(cell_image: np.ndarray, scale: float = DEFAULT_SCALE) -> np.ndarray:
    """
    Apply preprocessing pipeline to a cell image before recognition.

    Grayscale, upscale, light denoise, then Otsu binarization. Dark text on
    a light background is expected; inverted cells are flipped back.

    Args:
        cell_image: RGB or grayscale cell as a numpy array
        scale: Upscale factor

    Returns:
        Binary (0/255) uint8 image
    """
    if len(cell_image.shape) == 3:
        gray = cv2.cvtColor(cell_image, cv2.COLOR_RGB2GRAY)
    else:
        gray = cell_image

    if scale and scale != 1.0:
        gray = cv2.resize(gray, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)

    gray = cv2.medianBlur(gray, 3)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)

    # Mostly-dark result means light text on a dark banner
    if np.mean(binary) < 127:
        binary = cv2.bitwise_not(binary)

    return binary


class TesseractOCREngine(OCREngine):
    """
    OCR engine backed by the Tesseract binary.

    Failures inside Tesseract propagate; wrap the engine with
    pricelist.recognition.tolerant() to turn them into empty text per cell.
    """

    def __init__(self, language: str = DEFAULT_LANGUAGE, psm: int = DEFAULT_PSM,
                 scale: float = DEFAULT_SCALE):
        """
        Initialize the Tesseract engine.

        Args:
            language: Tesseract language pack(s), e.g. "jpn+eng"
            psm: Tesseract page segmentation mode
            scale: Upscale factor applied before recognition
        """
        self._language = language
        self._psm = psm
        self._scale = scale

    @property
    def name(self) -> str:
        return "tesseract"

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Args:
            language: Tesseract language string
            psm: Page segmentation mode
            scale: Upscale factor
        """
        if "language" in kwargs:
            self._language = str(kwargs["language"])
        if "psm" in kwargs:
            self._psm = int(kwargs["psm"])
        if "scale" in kwargs:
            self._scale = float(kwargs["scale"])

    def recognize(self, image: Image.Image) -> str:
        """
        Read the text in one cropped cell.

        Args:
            image: PIL Image of the cell

        Returns:
            Raw text (may contain several lines); empty for tiny cells
        """
        width, height = image.size
        if width < MIN_CELL_SIZE or height < MIN_CELL_SIZE:
            return ""

        start_time = time.perf_counter()
        binary = preprocess_cell(np.array(image.convert("RGB")), self._scale)
        text = pytesseract.image_to_string(
            Image.fromarray(binary),
            lang=self._language,
            config=self._config(),
        )
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(f"Tesseract read {len(text.strip())} chars in {elapsed_ms:.1f}ms")
        return text.strip()

    def _config(self) -> str:
        # Japanese text is not space-separated; keep Tesseract from inserting spaces
        return f"--psm {self._psm} -c preserve_interword_spaces=1"

    @property
    def language(self) -> Optional[str]:
        return self._language
