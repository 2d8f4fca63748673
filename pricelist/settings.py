"""
Settings Module for the price-list recognizer

Provides persistent storage for user preferences using JSON.
Settings are stored in config.json in the working directory.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .extraction import DEFAULT_EXCLUDE_CONTAINS, DEFAULT_EXCLUDE_EXACT, ExtractionSettings
from .recognition import RecognitionOptions
from .segmentation import SegmentationRatios

logger = logging.getLogger(__name__)

# Settings file location (working directory)
SETTINGS_FILE = Path("config.json")

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "debug_enabled": False,
    "ocr_engine": "tesseract",
    "ocr_language": "jpn+eng",
    "template_dir": "templates",
    "catalog_path": "catalog.json",
    "match_threshold": 50,
    "max_results": 5,
    "auto_match_threshold": 80,
    "review_threshold": 50,
    "correct_known_errors": True,
    "extraction": {
        "max_lines": 5,
        "min_length": 2,
        "exclude_exact": sorted(DEFAULT_EXCLUDE_EXACT),
        "exclude_contains": sorted(DEFAULT_EXCLUDE_CONTAINS),
    },
    "ratios": {
        "header_ratio": 0,
        "footer_ratio": 0,
        "price_row_ratio": 0,
        "side_padding": 0,
    },
}


def _defaults() -> Dict[str, Any]:
    # Nested sections must not be shared with DEFAULT_SETTINGS
    return json.loads(json.dumps(DEFAULT_SETTINGS))


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from config.json.

    Args:
        path: Settings file (defaults to SETTINGS_FILE)

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    settings_file = Path(path) if path is not None else SETTINGS_FILE

    if not settings_file.exists():
        logger.debug("Settings file not found, using defaults")
        return _defaults()

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            settings = json.load(f)

        # Merge with defaults to handle missing keys (one level deep for sections)
        result = _defaults()
        for key, value in settings.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key].update(value)
            else:
                result[key] = value
        logger.debug(f"Settings loaded: {result}")
        return result

    except (json.JSONDecodeError, IOError, AttributeError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return _defaults()


def save_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Save settings to config.json.

    Args:
        settings: Settings dictionary to save
        path: Settings file (defaults to SETTINGS_FILE)
    """
    settings_file = Path(path) if path is not None else SETTINGS_FILE
    try:
        with open(settings_file, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2, ensure_ascii=False)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")


def extraction_settings(settings: Dict[str, Any]) -> ExtractionSettings:
    """Build ExtractionSettings from the "extraction" section."""
    return ExtractionSettings.from_dict(settings.get("extraction") or {})


def segmentation_ratios(settings: Dict[str, Any]) -> SegmentationRatios:
    """Build SegmentationRatios from the "ratios" section."""
    section = settings.get("ratios") or {}
    return SegmentationRatios(
        header_ratio=float(section.get("header_ratio", 0)),
        footer_ratio=float(section.get("footer_ratio", 0)),
        price_row_ratio=float(section.get("price_row_ratio", 0)),
        side_padding=float(section.get("side_padding", 0)),
    )


def recognition_options(settings: Dict[str, Any]) -> RecognitionOptions:
    """Build RecognitionOptions from the top-level matching keys and ratios."""
    return RecognitionOptions(
        threshold=int(settings.get("match_threshold", DEFAULT_SETTINGS["match_threshold"])),
        max_results=int(settings.get("max_results", DEFAULT_SETTINGS["max_results"])),
        auto_match_threshold=int(settings.get("auto_match_threshold", DEFAULT_SETTINGS["auto_match_threshold"])),
        review_threshold=int(settings.get("review_threshold", DEFAULT_SETTINGS["review_threshold"])),
        correct_known_errors=bool(settings.get("correct_known_errors", True)),
        ratios=segmentation_ratios(settings),
    )
