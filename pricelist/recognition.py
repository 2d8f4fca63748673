"""
Recognition Orchestrator

Composes the pipeline for one price-list image:

    segment -> OCR per crop -> extract name -> match against catalog
            -> parse prices -> one RecognitionResult per card cell

The orchestrator holds no state. Callers who want to issue OCR calls
concurrently can use plan() / read_regions() / assemble() separately;
OCR text is always re-associated by crop, never by completion order.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

from PIL import Image

from .extraction import ExtractionSettings, correct_known_errors, extract_name, extract_price
from .matching import CatalogEntry, MatchCandidate, match
from .segmentation import CropSpec, SegmentationRatios, segment
from .template import CellType, Template

logger = logging.getLogger(__name__)


OCRFunction = Callable[[Image.Image], str]
CatalogRecord = Union[CatalogEntry, Mapping[str, Any]]


class CatalogSource(Protocol):
    """Anything that can list the catalog, e.g. store.FileCatalogSource."""

    def list_cards(self) -> Iterable[CatalogRecord]:
        ...


CatalogLike = Union[CatalogSource, Iterable[CatalogRecord]]


@dataclass(frozen=True)
class RecognitionOptions:
    """
    Matching and classification settings for one run.

    Attributes:
        threshold: Minimum similarity for a candidate to be listed
        max_results: Candidates kept per card
        auto_match_threshold: Top candidate at or above this is accepted
        review_threshold: Top candidate at or above this (but not auto) needs review
        correct_known_errors: Fix known OCR misreadings before matching
        ratios: Segmentation trimming
    """
    threshold: int = 50
    max_results: int = 5
    auto_match_threshold: int = 80
    review_threshold: int = 50
    correct_known_errors: bool = True
    ratios: SegmentationRatios = field(default_factory=SegmentationRatios)

    def __post_init__(self):
        for name in ("threshold", "auto_match_threshold", "review_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        if self.max_results < 1:
            raise ValueError(f"max_results must be >= 1, got {self.max_results}")


@dataclass
class RecognitionResult:
    """
    Recognition outcome for one card cell.

    Attributes:
        row: Template row of the card cell
        col: Template column of the card cell
        crop_region: Crop the card name was read from
        price: Parsed price, or None
        extracted_text: Name candidate, or None if OCR returned nothing
        full_text: Raw OCR text of the card crop
        candidates: Ranked catalog matches
        matched: Top candidate when it reached the auto-match threshold
        needs_review: True when candidates exist but none auto-matched
        price_text: Raw OCR text of the paired price crop
    """
    row: int
    col: int
    crop_region: CropSpec
    price: Optional[int]
    extracted_text: Optional[str]
    full_text: str
    candidates: List[MatchCandidate] = field(default_factory=list)
    matched: Optional[MatchCandidate] = None
    needs_review: bool = False
    price_text: Optional[str] = None

    @property
    def top_candidate(self) -> Optional[MatchCandidate]:
        return self.candidates[0] if self.candidates else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "col": self.col,
            "crop_region": self.crop_region.to_dict(),
            "price": self.price,
            "extracted_text": self.extracted_text,
            "full_text": self.full_text,
            "candidates": [c.to_dict() for c in self.candidates],
            "matched": self.matched.to_dict() if self.matched else None,
            "needs_review": self.needs_review,
            "price_text": self.price_text,
        }


@dataclass
class RecognitionSummary:
    """Batch statistics."""
    total: int = 0
    auto_matched: int = 0
    needs_review: int = 0
    no_match: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "auto_matched": self.auto_matched,
            "needs_review": self.needs_review,
            "no_match": self.no_match,
        }


def load_catalog(catalog: CatalogLike) -> List[CatalogEntry]:
    """
    Snapshot a catalog for one run.

    Accepts a catalog source (anything with list_cards()) or an iterable of
    CatalogEntry / {id, name} records.
    """
    if hasattr(catalog, "list_cards"):
        catalog = catalog.list_cards()
    return [CatalogEntry.coerce(entry) for entry in catalog]


def tolerant(ocr_fn: OCRFunction) -> OCRFunction:
    """
    Wrap an OCR callable so a failure on one cell yields empty text.

    The exception is logged; the rest of the batch continues.
    """
    def _read(image: Image.Image) -> str:
        try:
            return ocr_fn(image) or ""
        except Exception:
            logger.exception("OCR call failed, treating cell as empty")
            return ""
    return _read


def plan(
    template: Template,
    image_size: Tuple[int, int],
    ratios: SegmentationRatios = SegmentationRatios()
) -> List[CropSpec]:
    """
    Compute the crops for an image of the given (width, height).
    """
    width, height = image_size
    return segment(template, width, height, ratios)


def read_regions(image: Image.Image, crops: Iterable[CropSpec], ocr_fn: OCRFunction) -> Dict[CropSpec, str]:
    """
    Run OCR on every crop, sequentially.

    Returns:
        Mapping crop -> raw text (None results become "")
    """
    texts: Dict[CropSpec, str] = {}
    for crop in crops:
        texts[crop] = ocr_fn(image.crop(crop.box)) or ""
    return texts


def classify(candidates: List[MatchCandidate], options: RecognitionOptions) -> Tuple[Optional[MatchCandidate], bool]:
    """
    Decide whether the top candidate is accepted or needs a human.

    Returns:
        (matched candidate or None, needs_review)
    """
    if not candidates:
        return None, False
    top = candidates[0]
    if top.similarity >= options.auto_match_threshold:
        return top, False
    return None, top.similarity >= options.review_threshold


def _price_crops(crops: List[CropSpec]) -> Callable[[CropSpec], Optional[CropSpec]]:
    """
    Build the card -> price crop pairing.

    For a card at (r, c), first hit wins:
    1. the price strip derived from the card itself
    2. an explicit price cell directly below, at (r+1, c)
    3. the k-th explicit price cell in row r, for the k-th card in row r
    """
    derived: Dict[Tuple[int, int], CropSpec] = {}
    explicit: Dict[Tuple[int, int], CropSpec] = {}
    row_prices: Dict[int, List[CropSpec]] = defaultdict(list)
    row_cards: Dict[int, List[CropSpec]] = defaultdict(list)

    for crop in crops:
        key = (crop.row, crop.col)
        if crop.cell_type is CellType.PRICE:
            if crop.derived:
                derived[key] = crop
            else:
                explicit[key] = crop
                row_prices[crop.row].append(crop)
        elif crop.cell_type is CellType.CARD:
            row_cards[crop.row].append(crop)

    def _lookup(card: CropSpec) -> Optional[CropSpec]:
        key = (card.row, card.col)
        if key in derived:
            return derived[key]
        below = (card.row + 1, card.col)
        if below in explicit:
            return explicit[below]
        prices = sorted(row_prices.get(card.row, []), key=lambda c: c.col)
        cards = sorted(row_cards[card.row], key=lambda c: c.col)
        position = cards.index(card)
        if position < len(prices):
            return prices[position]
        return None

    return _lookup


def assemble(
    crops: List[CropSpec],
    texts: Mapping[CropSpec, str],
    catalog: CatalogLike,
    settings: ExtractionSettings = ExtractionSettings(),
    options: RecognitionOptions = RecognitionOptions()
) -> List[RecognitionResult]:
    """
    Build results from OCR texts keyed by crop.

    Crops missing from texts are treated as empty OCR output.

    Args:
        crops: Output of segment()/plan()
        texts: Raw OCR text per crop
        catalog: Catalog snapshot or source
        settings: Name extraction settings
        options: Matching and classification options

    Returns:
        One RecognitionResult per card crop, in crop order
    """
    entries = load_catalog(catalog)
    price_for = _price_crops(crops)
    results: List[RecognitionResult] = []

    for crop in crops:
        if crop.cell_type is not CellType.CARD:
            continue

        full_text = texts.get(crop) or ""
        extracted = extract_name(full_text, settings)

        candidates: List[MatchCandidate] = []
        if extracted:
            query = correct_known_errors(extracted) if options.correct_known_errors else extracted
            candidates = match(query, entries, options.threshold, options.max_results)

        price_crop = price_for(crop)
        price_text = (texts.get(price_crop) or "") if price_crop else None
        price = extract_price(price_text)

        matched, needs_review = classify(candidates, options)

        logger.debug(
            f"Card [{crop.row},{crop.col}]: text='{extracted}' price={price} "
            f"top={candidates[0].name if candidates else None} "
            f"({candidates[0].similarity if candidates else 0})"
        )

        results.append(RecognitionResult(
            row=crop.row,
            col=crop.col,
            crop_region=crop,
            price=price,
            extracted_text=extracted,
            full_text=full_text,
            candidates=candidates,
            matched=matched,
            needs_review=needs_review,
            price_text=price_text,
        ))

    return results


def recognize(
    template: Template,
    image: Image.Image,
    ocr_fn: OCRFunction,
    catalog: CatalogLike,
    settings: ExtractionSettings = ExtractionSettings(),
    options: RecognitionOptions = RecognitionOptions()
) -> List[RecognitionResult]:
    """
    Recognize every card cell of a price-list image.

    Args:
        template: Template describing the image layout
        image: PIL Image of the whole price list
        ocr_fn: Callable returning raw text for a cropped region. It should
            return "" on failure; wrap it with tolerant() if it may raise.
        catalog: Catalog snapshot or source (read once)
        settings: Name extraction settings
        options: Matching, classification and segmentation options

    Returns:
        One RecognitionResult per card cell, row-major
    """
    start_time = time.perf_counter()

    entries = load_catalog(catalog)
    crops = plan(template, image.size, options.ratios)
    logger.info(f"Template '{template.name}': {len(crops)} regions on {image.size[0]}x{image.size[1]} image, "
                f"{len(entries)} catalog entries")

    texts = read_regions(image, crops, ocr_fn)
    results = assemble(crops, texts, entries, settings, options)

    summary = summarize(results)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"Results: {summary.auto_matched} auto-matched, {summary.needs_review} needs review, "
        f"{summary.no_match} no match ({elapsed_ms:.0f}ms)"
    )
    return results


def summarize(results: Iterable[RecognitionResult]) -> RecognitionSummary:
    """Count auto-matched / needs-review / unmatched results."""
    summary = RecognitionSummary()
    for result in results:
        summary.total += 1
        if result.matched is not None:
            summary.auto_matched += 1
        elif result.needs_review:
            summary.needs_review += 1
        else:
            summary.no_match += 1
    return summary
