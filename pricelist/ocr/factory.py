"""
OCR Engine Factory

Builds OCR engines by name. Built-in engines are imported on first use so
that importing pricelist.ocr does not require Tesseract or OpenCV.
"""

import importlib
from typing import Dict, Type, Union

from .base import OCREngine


# Engine name -> "module.ClassName" (built-in, lazy) or a registered class
_ENGINE_REGISTRY: Dict[str, Union[str, Type[OCREngine]]] = {
    "tesseract": "tesseract_engine.TesseractOCREngine",
}

# Classes already resolved from the registry
_ENGINE_CACHE: Dict[str, Type[OCREngine]] = {}


def _load_engine_class(engine_type: str) -> Type[OCREngine]:
    if engine_type in _ENGINE_CACHE:
        return _ENGINE_CACHE[engine_type]

    entry = _ENGINE_REGISTRY[engine_type]
    if isinstance(entry, str):
        module_name, class_name = entry.rsplit(".", 1)
        module = importlib.import_module(f".{module_name}", package=__package__)
        engine_class = getattr(module, class_name)
    else:
        engine_class = entry

    _ENGINE_CACHE[engine_type] = engine_class
    return engine_class


def create_engine(engine_type: str = "tesseract", **config) -> OCREngine:
    """
    Instantiate an OCR engine.

    Args:
        engine_type: Registered engine name ("tesseract" is built in)
        **config: Passed to OCREngine.configure(). The Tesseract engine
            understands:
                - language: Tesseract language packs (default "jpn+eng")
                - psm: Page segmentation mode (default 6)
                - scale: Upscale factor before recognition (default 2.0)

    Returns:
        Configured engine; the instance itself is a valid ocr_fn

    Raises:
        ValueError: If no engine is registered under engine_type

    Example:
        engine = create_engine("tesseract", language="jpn")
        results = recognize(template, image, tolerant(engine), catalog)
    """
    if engine_type not in _ENGINE_REGISTRY:
        known = ", ".join(sorted(_ENGINE_REGISTRY))
        raise ValueError(f"Unknown OCR engine '{engine_type}'. Registered: {known}")

    engine = _load_engine_class(engine_type)()
    if config:
        engine.configure(**config)
    return engine


def register_engine(name: str, engine_class: type) -> None:
    """
    Make an OCREngine subclass available to create_engine().

    Registering an existing name replaces it.

    Raises:
        TypeError: If engine_class is not an OCREngine subclass
    """
    if not isinstance(engine_class, type) or not issubclass(engine_class, OCREngine):
        raise TypeError(f"{engine_class!r} is not an OCREngine subclass")
    _ENGINE_REGISTRY[name] = engine_class
    _ENGINE_CACHE.pop(name, None)


def available_engines() -> list[str]:
    """Names accepted by create_engine()."""
    return list(_ENGINE_REGISTRY)
