"""Indicator-based document type classification.

Decides whether OCR text came from a wine label or a receipt by scoring
it against two indicator vocabularies. Each score is the density of
distinct indicators found (scaled by ``density_weight``) plus the weights
of any strong cues that fire, clamped to 1.0.
"""

import re
from pathlib import Path

from winedoc.models import ClassificationResult, DocumentType
from winedoc.utils.config import ClassifierConfig
from winedoc.utils.logger import get_logger

from .vocabulary import BOOSTS, Boost, indicator_pattern, load_vocabulary

logger = get_logger(__name__)


class DocumentClassifier:
    """Scores OCR text against the wine-label and receipt vocabularies.

    A type wins only when its score is above ``config.floor`` and ahead of
    the other type by at least ``config.tie_band``; otherwise the result
    is ``unknown`` so the caller can ask the user. Confidence reported for
    ``unknown`` never exceeds the floor.

    Args:
        config: Classifier thresholds. Defaults are used when ``None``.
        vocabularies: Indicator tuples per document type. Loaded from
            ``config.vocabulary_path`` (plus the built-in tables) when ``None``.
    """

    def __init__(
        self,
        config: ClassifierConfig | None = None,
        vocabularies: dict[DocumentType, tuple[str, ...]] | None = None,
    ) -> None:
        self.config = config or ClassifierConfig()
        if vocabularies is None:
            path = (
                Path(self.config.vocabulary_path)
                if self.config.vocabulary_path
                else None
            )
            vocabularies = load_vocabulary(path)
        self.vocabularies = vocabularies
        self._patterns: dict[DocumentType, list[tuple[str, re.Pattern[str]]]] = {
            doc_type: [(term, indicator_pattern(term)) for term in terms]
            for doc_type, terms in vocabularies.items()
        }

    def classify(self, text: str) -> ClassificationResult:
        """Classify OCR text as a wine label, a receipt, or unknown.

        Args:
            text: Raw OCR text, possibly empty.

        Returns:
            The document type, its confidence and the matched indicators.
        """
        if not text or not text.strip():
            return ClassificationResult(DocumentType.UNKNOWN, 0.0, [])

        normalized = text.lower().strip()
        wine_score, wine_found = self.score(normalized, DocumentType.WINE_LABEL)
        receipt_score, receipt_found = self.score(normalized, DocumentType.RECEIPT)

        logger.debug(
            "Scores: wine_label=%.3f (%d indicators), receipt=%.3f (%d indicators)",
            wine_score,
            len(wine_found),
            receipt_score,
            len(receipt_found),
        )

        floor = self.config.floor
        best = max(wine_score, receipt_score)
        gap = abs(wine_score - receipt_score)

        if best > floor and gap >= self.config.tie_band:
            if wine_score > receipt_score:
                doc_type, found = DocumentType.WINE_LABEL, wine_found
            else:
                doc_type, found = DocumentType.RECEIPT, receipt_found
            confidence = round(min(best, self.config.max_confidence), 4)
            logger.info("Classified as %s (confidence=%.2f)", doc_type, confidence)
            return ClassificationResult(doc_type, confidence, found)

        if best > floor:
            logger.info(
                "Ambiguous document: wine_label=%.2f receipt=%.2f", wine_score, receipt_score
            )
        indicators = wine_found + [i for i in receipt_found if i not in wine_found]
        return ClassificationResult(
            DocumentType.UNKNOWN, round(min(best, floor), 4), indicators
        )

    def score(self, text: str, doc_type: DocumentType) -> tuple[float, list[str]]:
        """Score lowercased text against one document type.

        Args:
            text: Lowercased OCR text.
            doc_type: Vocabulary to score against.

        Returns:
            Score in [0, 1] and the distinct indicators found, in
            vocabulary order.
        """
        patterns = self._patterns.get(doc_type, [])
        if not patterns:
            return 0.0, []

        found = [term for term, pattern in patterns if pattern.search(text)]
        density = len(found) / len(patterns)
        score = density * self.config.density_weight
        score += sum(b.weight for b in self._boosts(doc_type) if b.matches(text))
        return min(score, 1.0), found

    def _boosts(self, doc_type: DocumentType) -> tuple[Boost, ...]:
        return BOOSTS.get(doc_type, ())


def classify(text: str, config: ClassifierConfig | None = None) -> ClassificationResult:
    """Classify OCR text with the built-in vocabularies.

    Args:
        text: Raw OCR text.
        config: Optional classifier thresholds.

    Returns:
        Classification result.
    """
    return DocumentClassifier(config).classify(text)
