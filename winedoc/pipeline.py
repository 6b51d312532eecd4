"""Classify-parse-normalize pipeline.

Runs the classifier, the matching rule-based parser and the normalizer
over one OCR text, honoring a caller-supplied document type. When the
rule-based parser recovers nothing and a :class:`Refiner` is available,
its output is normalized instead.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from winedoc.classification.classifier import DocumentClassifier
from winedoc.extraction.receipt import ReceiptParser
from winedoc.extraction.wine_label import WineLabelParser
from winedoc.interfaces import Refiner
from winedoc.models import (
    CanonicalWineRecord,
    ClassificationResult,
    DocumentType,
    ReceiptRecord,
    WineLabelRecord,
)
from winedoc.normalization.normalizer import Normalizer
from winedoc.utils.config import AppConfig
from winedoc.utils.logger import get_logger
from winedoc.validation.consistency import check_receipt, check_wine_label

logger = get_logger(__name__)


@dataclass
class ProcessingResult:
    """Everything produced for one OCR text."""

    document_type: DocumentType
    classification: ClassificationResult
    record: dict[str, Any] = field(default_factory=dict)
    wines: list[CanonicalWineRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source: str = "none"

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_type": str(self.document_type),
            "classification": self.classification.to_dict(),
            "record": self.record,
            "wines": [w.to_dict() for w in self.wines],
            "warnings": list(self.warnings),
            "source": self.source,
        }


def _coerce_type(document_type: DocumentType | str | None) -> DocumentType | None:
    if document_type is None or isinstance(document_type, DocumentType):
        return document_type
    try:
        return DocumentType(document_type)
    except ValueError:
        valid = ", ".join(t.value for t in DocumentType)
        raise ValueError(
            f"Unknown document type '{document_type}' (expected one of: {valid})"
        ) from None


class DocumentPipeline:
    """Turns OCR text into canonical wine records.

    Args:
        config: Application configuration.
        refiner: Optional collaborator consulted when rule parsing yields
            nothing.
    """

    def __init__(
        self, config: AppConfig | None = None, refiner: Refiner | None = None
    ) -> None:
        self.config = config or AppConfig()
        self.classifier = DocumentClassifier(self.config.classifier)
        self.wine_parser = WineLabelParser(self.config.parsing)
        self.receipt_parser = ReceiptParser(self.config.parsing)
        self.normalizer = Normalizer(self.config.parsing)
        self.refiner = refiner

    def process(
        self, text: str, document_type: DocumentType | str | None = None
    ) -> ProcessingResult:
        """Classify, parse and normalize one OCR text.

        Args:
            text: Raw OCR text.
            document_type: Type chosen by the user. Overrides the classifier.

        Returns:
            The classification, parsed record and canonical wine records.

        Raises:
            ValueError: If ``document_type`` is not a known type.
        """
        override = _coerce_type(document_type)
        classification = self.classifier.classify(text)
        chosen = override or classification.type
        if override is not None:
            logger.info(
                "Using caller-selected type %s (classifier said %s)",
                override,
                classification.type,
            )

        result = ProcessingResult(document_type=chosen, classification=classification)

        if chosen is DocumentType.WINE_LABEL:
            label = self.wine_parser.parse(text)
            if not label.is_empty():
                self._accept_label(result, label)
        elif chosen is DocumentType.RECEIPT:
            receipt = self.receipt_parser.parse(text)
            if not receipt.is_empty():
                self._accept_receipt(result, receipt)

        if result.source == "none" and self.refiner is not None and text.strip():
            self._refine(result, text)

        logger.info(
            "Processed %s document: %d wine records (source=%s)",
            result.document_type,
            len(result.wines),
            result.source,
        )
        return result

    def _accept_label(self, result: ProcessingResult, label: WineLabelRecord) -> None:
        result.record = label.to_dict()
        result.wines = [self.normalizer.normalize(result.record)]
        result.warnings.extend(check_wine_label(label).warnings)
        result.source = "rule"

    def _accept_receipt(self, result: ProcessingResult, receipt: ReceiptRecord) -> None:
        result.record = receipt.to_dict()
        result.wines = self.normalizer.normalize_receipt(receipt)
        result.warnings.extend(check_receipt(receipt).warnings)
        result.source = "rule"

    def _refine(self, result: ProcessingResult, text: str) -> None:
        try:
            refined = self.refiner.refine(text)
        except Exception:
            logger.warning("Refinement failed, keeping rule-based result")
            return

        if not isinstance(refined, Mapping):
            logger.warning("Refiner returned %s, ignoring", type(refined).__name__)
            return

        items = refined.get("items")
        if isinstance(items, list) and items:
            shared = {k: v for k, v in refined.items() if k != "items"}
            wines = [
                self.normalizer.normalize({**shared, **item})
                for item in items
                if isinstance(item, Mapping)
            ]
        else:
            wines = [self.normalizer.normalize(refined)]

        wines = [w for w in wines if w.to_dict()]
        if wines:
            result.record = dict(refined)
            result.wines = wines
            result.source = "refiner"
