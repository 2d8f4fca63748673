"""
Price-List Recognizer

Turns a photographed shop price list into identified card records.

Pipeline:
    Template -> segment() -> OCR per crop -> extract_name() -> match() -> results

Usage:
    from pricelist import Template, CellType, recognize, tolerant
    from pricelist.ocr import create_engine

    template = Template.create("Shop A", columns=4, rows=2).set_row(0, CellType.CARD)
    engine = create_engine("tesseract")
    results = recognize(template, image, tolerant(engine), catalog)

    for result in results:
        print(result.extracted_text, result.price, result.candidates[:1])
"""

# Template model
from .template import Axis, CellType, GridLine, Template

# Segmentation
from .segmentation import CropSpec, SegmentationRatios, segment

# Extraction
from .extraction import (
    ExtractionSettings,
    extract_name,
    extract_price,
    correct_known_errors,
)

# Matching
from .matching import CatalogEntry, MatchCandidate, match, normalize, similarity

# Orchestration
from .recognition import (
    RecognitionOptions,
    RecognitionResult,
    RecognitionSummary,
    assemble,
    plan,
    read_regions,
    recognize,
    summarize,
    tolerant,
)

# Collaborator adapters
from .store import FileCatalogSource, TemplateNotFoundError, TemplateStore

__all__ = [
    # Template
    "Axis",
    "CellType",
    "GridLine",
    "Template",
    # Segmentation
    "CropSpec",
    "SegmentationRatios",
    "segment",
    # Extraction
    "ExtractionSettings",
    "extract_name",
    "extract_price",
    "correct_known_errors",
    # Matching
    "CatalogEntry",
    "MatchCandidate",
    "match",
    "normalize",
    "similarity",
    # Orchestration
    "RecognitionOptions",
    "RecognitionResult",
    "RecognitionSummary",
    "assemble",
    "plan",
    "read_regions",
    "recognize",
    "summarize",
    "tolerant",
    # Adapters
    "FileCatalogSource",
    "TemplateNotFoundError",
    "TemplateStore",
]
