"""
OCR Engine Base Interface

Abstract base class defining the OCR engine contract.
"""

from abc import ABC, abstractmethod
from PIL import Image


class OCREngine(ABC):
    """
    Abstract base class for OCR engines.

    All OCR implementations must inherit from this class and implement
    recognize() to return the raw text found in one cropped region.
    Engines are callable, so an instance can be passed anywhere an
    ocr_fn(image) -> str is expected.
    """

    @abstractmethod
    def recognize(self, image: Image.Image) -> str:
        """
        Read the text in one cropped region.

        Args:
            image: PIL Image of a single template cell

        Returns:
            Raw multi-line text; empty string when nothing was read
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Engine identifier.

        Returns:
            String name identifying this engine type (e.g., "tesseract")
        """
        pass

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Override in subclasses to support runtime configuration.
        Default implementation does nothing.

        Args:
            **kwargs: Engine-specific configuration options
        """
        pass

    def __call__(self, image: Image.Image) -> str:
        return self.recognize(image)
