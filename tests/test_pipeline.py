"""Tests for the classify-parse-normalize pipeline."""

from collections.abc import Mapping
from typing import Any
from unittest.mock import MagicMock

import pytest

from winedoc.interfaces import Refiner, TextSource
from winedoc.models import DocumentType
from winedoc.pipeline import DocumentPipeline, ProcessingResult


class _StaticRefiner:
    """Refiner returning a fixed payload."""

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.calls: list[str] = []

    def refine(self, text: str) -> Mapping[str, Any]:
        self.calls.append(text)
        return self.payload


class _FailingRefiner:
    def refine(self, text: str) -> Mapping[str, Any]:
        raise RuntimeError("service unavailable")


class _StaticSource:
    def extract_text(self, image) -> str:
        return ""


class TestDocumentPipeline:
    """Tests for DocumentPipeline.process."""

    def setup_method(self) -> None:
        self.pipeline = DocumentPipeline()

    def test_wine_label(self, margaux_label: str) -> None:
        result = self.pipeline.process(margaux_label)
        assert isinstance(result, ProcessingResult)
        assert result.document_type is DocumentType.WINE_LABEL
        assert result.source == "rule"
        assert result.record["appellation"] == "Margaux"
        assert len(result.wines) == 1
        assert result.wines[0].name == "Château Margaux"
        assert result.wines[0].region == "Bordeaux"
        assert result.warnings == []

    def test_receipt(self, korean_receipt: str) -> None:
        result = self.pipeline.process(korean_receipt)
        assert result.document_type is DocumentType.RECEIPT
        assert result.record["paymentMethod"] == "신용카드"
        assert [w.vintage for w in result.wines] == [2015, 2012]
        assert all(w.store == "와인앤모어 강남점" for w in result.wines)
        assert result.warnings == []

    def test_receipt_inconsistency_reported(self) -> None:
        result = self.pipeline.process(
            "Wine Shop\n2024/07/20 15:30\nMerlot 2019 $10.00\nTotal: $50.00"
        )
        assert result.document_type is DocumentType.RECEIPT
        assert len(result.wines) == 1
        assert any("Line items sum" in w for w in result.warnings)

    def test_override_type(self, margaux_label: str) -> None:
        result = self.pipeline.process(margaux_label, "receipt")
        assert result.document_type is DocumentType.RECEIPT
        assert result.classification.type is DocumentType.WINE_LABEL
        assert result.wines == []
        assert result.source == "none"

    def test_override_with_enum(self, korean_receipt: str) -> None:
        result = self.pipeline.process(korean_receipt, DocumentType.RECEIPT)
        assert len(result.wines) == 2

    def test_invalid_override(self, margaux_label: str) -> None:
        with pytest.raises(ValueError, match="invoice"):
            self.pipeline.process(margaux_label, "invoice")

    def test_empty_text(self) -> None:
        result = self.pipeline.process("")
        assert result.document_type is DocumentType.UNKNOWN
        assert result.wines == []
        assert result.record == {}

    def test_to_dict(self, margaux_label: str) -> None:
        data = self.pipeline.process(margaux_label).to_dict()
        assert data["document_type"] == "wine_label"
        assert data["classification"]["type"] == "wine_label"
        assert data["wines"][0]["vintage"] == 2015


class TestRefinerFallback:
    """The refiner is consulted only when rule parsing yields nothing."""

    def test_refiner_used_for_unrecognized_text(self) -> None:
        refiner = _StaticRefiner({"Name": "Opus One", "Vintage": "2018"})
        result = DocumentPipeline(refiner=refiner).process("blurry text")
        assert result.source == "refiner"
        assert result.wines[0].name == "Opus One"
        assert result.wines[0].vintage == 2018
        assert refiner.calls == ["blurry text"]

    def test_refiner_items_share_receipt_fields(self) -> None:
        refiner = _StaticRefiner(
            {"store": "Shop", "items": [{"name": "A", "price": "$10"}, {"name": "B"}]}
        )
        result = DocumentPipeline(refiner=refiner).process("???")
        assert [w.name for w in result.wines] == ["A", "B"]
        assert all(w.store == "Shop" for w in result.wines)
        assert result.wines[0].price == 10

    def test_refiner_not_called_when_rules_succeed(self, margaux_label: str) -> None:
        refiner = MagicMock()
        DocumentPipeline(refiner=refiner).process(margaux_label)
        refiner.refine.assert_not_called()

    def test_refiner_failure_keeps_empty_result(self) -> None:
        result = DocumentPipeline(refiner=_FailingRefiner()).process("???")
        assert result.source == "none"
        assert result.wines == []

    def test_refiner_non_mapping_ignored(self) -> None:
        result = DocumentPipeline(refiner=_StaticRefiner(["Opus One"])).process("???")
        assert result.wines == []

    def test_refiner_empty_payload_ignored(self) -> None:
        result = DocumentPipeline(refiner=_StaticRefiner({"junk": 1})).process("???")
        assert result.source == "none"

    def test_refiner_skipped_for_blank_text(self) -> None:
        refiner = _StaticRefiner({"Name": "Opus One"})
        DocumentPipeline(refiner=refiner).process("   ")
        assert refiner.calls == []


class TestInterfaces:
    """Collaborators are matched structurally."""

    def test_refiner_protocol(self) -> None:
        assert isinstance(_StaticRefiner({}), Refiner)
        assert not isinstance(object(), Refiner)

    def test_text_source_protocol(self) -> None:
        assert isinstance(_StaticSource(), TextSource)
