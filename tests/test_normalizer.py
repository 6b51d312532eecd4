"""Tests for canonical record normalization."""

import pytest

from winedoc.errors import NormalizationError, WinedocError
from winedoc.extraction.receipt import parse_receipt
from winedoc.models import CanonicalWineRecord
from winedoc.normalization.normalizer import (
    FIELD_SYNONYMS,
    Normalizer,
    normalize,
    normalize_receipt,
)
from winedoc.utils.config import ParsingConfig


class TestFieldResolution:
    """Synonym resolution at the normalizer boundary."""

    def test_notion_style_keys(self) -> None:
        record = normalize(
            {
                "Name": "Château Margaux",
                "Vintage": "2015",
                "Region/Producer": "Château Margaux",
                "Varietal(품종)": ["Cabernet Sauvignon", "Merlot"],
                "Price": "₩150,000",
            }
        )
        assert record.to_dict() == {
            "name": "Château Margaux",
            "vintage": 2015,
            "producer": "Château Margaux",
            "variety": "Cabernet Sauvignon, Merlot",
            "price": 150000,
        }

    def test_canonical_key_wins(self) -> None:
        assert normalize({"name": "A", "Name": "B", "wine_name": "C"}).name == "A"

    def test_blank_canonical_falls_through(self) -> None:
        assert normalize({"name": "  ", "wine_name": "Opus One"}).name == "Opus One"

    def test_unknown_keys_dropped(self) -> None:
        assert normalize({"foo": 1, "name": "X"}).to_dict() == {"name": "X"}

    def test_every_canonical_field_listed_first(self) -> None:
        for canonical, keys in FIELD_SYNONYMS.items():
            assert keys[0] == canonical

    def test_whitespace_collapsed(self) -> None:
        assert normalize({"name": "  Opus\n One "}).name == "Opus One"


class TestCoercion:
    """Type coercion and range checks."""

    @pytest.mark.parametrize(
        "raw, field, expected",
        [
            ({"vintage": "2018"}, "vintage", 2018),
            ({"vintage": 2018.0}, "vintage", 2018),
            ({"vintage": 1700}, "vintage", None),
            ({"vintage": "abc"}, "vintage", None),
            ({"vintage": float("nan")}, "vintage", None),
            ({"vintage": True}, "vintage", None),
            ({"price": "$45.00"}, "price", 45),
            ({"price": -5}, "price", None),
            ({"quantity": "3"}, "quantity", 3),
            ({"quantity": 0}, "quantity", None),
            ({"quantity": 1.5}, "quantity", None),
            ({"alcohol": "13.5%"}, "alcohol", 13.5),
            ({"alcohol": "14,5"}, "alcohol", 14.5),
            ({"alcohol": 40}, "alcohol", None),
            ({"alcohol": "strong"}, "alcohol", None),
        ],
    )
    def test_coercion(self, raw: dict, field: str, expected: object) -> None:
        assert getattr(normalize(raw), field) == expected

    def test_variety_list_joined(self) -> None:
        record = normalize({"variety": ["Syrah", "", "Grenache"]})
        assert record.variety == "Syrah, Grenache"

    def test_max_alcohol_configurable(self) -> None:
        normalizer = Normalizer(ParsingConfig(max_alcohol=15.0))
        assert normalizer.normalize({"alcohol": 16}).alcohol is None


class TestIdempotence:
    """Normalizing a normalized record changes nothing."""

    @pytest.mark.parametrize(
        "raw",
        [
            {"Name": "Tignanello", "Vintage": "2019", "Price": "€89,50"},
            {"wine_name": "Opus One", "grapes": ["Cabernet Sauvignon", "Merlot"]},
            {"name": "Sassicaia", "alcohol": "14% vol", "quantity": "2"},
            {},
        ],
    )
    def test_idempotent(self, raw: dict) -> None:
        once = normalize(raw)
        assert normalize(once) == once
        assert normalize(once.to_dict()) == once


class TestContract:
    """Contract violations raise a typed error."""

    @pytest.mark.parametrize("raw", [None, "name=Opus One", 42, ["name"]])
    def test_non_mapping_raises(self, raw: object) -> None:
        with pytest.raises(NormalizationError):
            normalize(raw)

    def test_error_hierarchy(self) -> None:
        assert issubclass(NormalizationError, WinedocError)
        assert issubclass(NormalizationError, TypeError)


class TestNormalizeReceipt:
    """Receipt items become canonical wine records."""

    def test_items_carry_receipt_context(self, korean_receipt: str) -> None:
        records = normalize_receipt(parse_receipt(korean_receipt))
        assert len(records) == 2
        assert records[0] == CanonicalWineRecord(
            name="샤또 마고 2015",
            vintage=2015,
            price=150000,
            quantity=1,
            store="와인앤모어 강남점",
            purchase_date="2024-07-20",
        )
        assert records[1].vintage == 2012

    def test_empty_receipt(self) -> None:
        assert normalize_receipt(parse_receipt("")) == []
