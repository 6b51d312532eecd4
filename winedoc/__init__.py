"""Wine label and receipt OCR text parsing.

Classifies OCR text as a wine label or a retail receipt, extracts the
structured fields each document carries, and normalizes the results into
canonical wine records.
"""

from winedoc.classification.classifier import DocumentClassifier, classify
from winedoc.errors import NormalizationError, UnsupportedFormatError, WinedocError
from winedoc.extraction.receipt import ReceiptParser, parse_receipt
from winedoc.extraction.wine_label import WineLabelParser, parse_wine_label
from winedoc.models import (
    CanonicalWineRecord,
    ClassificationResult,
    DocumentType,
    ReceiptItem,
    ReceiptRecord,
    WineLabelRecord,
)
from winedoc.normalization.normalizer import Normalizer, normalize, normalize_receipt
from winedoc.pipeline import DocumentPipeline, ProcessingResult

__all__ = [
    "CanonicalWineRecord",
    "ClassificationResult",
    "DocumentClassifier",
    "DocumentPipeline",
    "DocumentType",
    "NormalizationError",
    "Normalizer",
    "ProcessingResult",
    "ReceiptItem",
    "ReceiptParser",
    "ReceiptRecord",
    "UnsupportedFormatError",
    "WineLabelParser",
    "WineLabelRecord",
    "WinedocError",
    "classify",
    "normalize",
    "normalize_receipt",
    "parse_receipt",
    "parse_wine_label",
]
