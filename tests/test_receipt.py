"""Tests for receipt parsing."""

import pytest

from winedoc.extraction.receipt import ReceiptParser, parse_receipt


class TestParseReceipt:
    """End-to-end receipt parsing."""

    def test_korean_receipt(self, korean_receipt: str) -> None:
        assert parse_receipt(korean_receipt).to_dict() == {
            "store": "와인앤모어 강남점",
            "date": "2024-07-20",
            "time": "15:30:25",
            "items": [
                {"name": "샤또 마고 2015", "price": 150000, "quantity": 1, "vintage": 2015},
                {"name": "돔 페리뇽 2012", "price": 280000, "quantity": 1, "vintage": 2012},
            ],
            "subtotal": 430000,
            "tax": 43000,
            "total": 473000,
            "paymentMethod": "신용카드",
        }

    def test_english_receipt(self, english_receipt: str) -> None:
        record = parse_receipt(english_receipt)
        assert record.store == "Wine Cellar NYC"
        assert record.date == "2024-07-20"
        assert record.time == "15:30"
        assert len(record.items) == 2
        assert record.items[0].price == 200
        assert record.subtotal == 550
        assert record.tax == 55
        assert record.total == 605
        assert record.payment_method == "Credit Card"

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_input(self, text: str) -> None:
        assert parse_receipt(text).to_dict() == {"items": []}

    def test_non_receipt_text(self) -> None:
        assert parse_receipt("Hello world\nNothing to see").to_dict() == {"items": []}

    def test_single_item_won_suffix(self) -> None:
        record = parse_receipt("이마트 와인코너\n2024.07.20\n까베르네 소비뇽 2020    15,000원\n결제완료")
        assert len(record.items) == 1
        assert "까베르네 소비뇽" in record.items[0].name
        assert record.items[0].vintage == 2020
        assert record.items[0].price == 15000

    def test_multiple_quantities(self) -> None:
        record = parse_receipt(
            "Wine Store\n2024/07/20\n\n"
            "Red Wine 2020           $25.00\nQty: 3\n\n"
            "White Wine 2021         $30.00\nQty: 2\n\n"
            "Total: $135.00"
        )
        assert [item.quantity for item in record.items] == [3, 2]
        assert record.total == 135

    def test_default_quantity_is_one(self) -> None:
        record = parse_receipt("Wine Shop\nMerlot 2019 $25.00\nSyrah 2020 $30.00")
        assert [item.quantity for item in record.items] == [1, 1]

    @pytest.mark.parametrize(
        "date_text", ["2024/07/20", "2024-07-20", "2024.07.20", "07/20/2024"]
    )
    def test_date_formats(self, date_text: str) -> None:
        assert parse_receipt(f"Store Name\n{date_text}\nWine $10").date == "2024-07-20"

    @pytest.mark.parametrize(
        "price_text, expected",
        [("₩150,000", 150000), ("$150.00", 150), ("€150,50", 150.5), ("15,000원", 15000)],
    )
    def test_price_formats(self, price_text: str, expected: float) -> None:
        record = parse_receipt(f"Store\n2024/07/20\nWine {price_text}")
        assert record.items[0].price == expected

    def test_euro_receipt(self) -> None:
        record = parse_receipt(
            "Cave du Marché\n20.07.2024\nChablis 2019 €18,50\nSancerre 2020 €24,00\n"
            "Total: €42,50"
        )
        assert record.store == "Cave du Marché"
        assert record.date == "2024-07-20"
        assert [item.price for item in record.items] == [18.5, 24]
        assert record.total == 42.5

    def test_item_vintages_kept_in_names(self) -> None:
        record = parse_receipt(
            "Wine Shop\n2024/07/20\n\n"
            "Bordeaux Rouge 2018     $45.00\n"
            "Champagne Brut 2015     $120.00\n"
            "Chianti Classico 2019   $35.00"
        )
        assert [item.vintage for item in record.items] == [2018, 2015, 2019]
        assert record.items[0].name == "Bordeaux Rouge 2018"


class TestReceiptParser:
    """Header and segmentation heuristics."""

    def setup_method(self) -> None:
        self.parser = ReceiptParser()

    def test_store_skips_leading_date_line(self) -> None:
        lines = ["2024/07/20 15:30", "Wine Shop", "Red Wine 2020 $25.00"]
        assert self.parser.extract_store(lines) == "Wine Shop"

    def test_store_joins_branch_line(self) -> None:
        lines = ["와인앤모어", "강남점", "2024/07/20"]
        assert self.parser.extract_store(lines) == "와인앤모어 강남점"

    def test_segment(self) -> None:
        lines = ["Shop", "2024/07/20", "Merlot $10.00", "Qty: 2", "Total: $20.00", "Cash"]
        sections = self.parser.segment(lines)
        assert sections.header == ["Shop", "2024/07/20"]
        assert sections.items == ["Merlot $10.00", "Qty: 2"]
        assert sections.totals == ["Total: $20.00", "Cash"]

    def test_time_near_date_line(self) -> None:
        lines = ["Shop", "2024/07/20", "오후 3:30", "Merlot $10.00"]
        assert self.parser.extract_time(lines, 1) == "15:30"

    def test_payment_ignores_card_number_lines(self) -> None:
        lines = ["현금", "카드번호: 1234-****", "승인번호: 5678"]
        assert self.parser.extract_payment_method(lines) == "현금"

    def test_first_total_wins(self) -> None:
        record = parse_receipt("Shop\nMerlot $10.00\nTotal: $10.00\nTotal: $99.00")
        assert record.total == 10


class TestTotalsAnchors:
    """Totals keywords only anchor a line that carries an amount."""

    def test_store_name_starting_with_total(self) -> None:
        record = parse_receipt(
            "Total Wine & More\n07/20/2024 3:30 PM\n"
            "Opus One 2018 $380.00\nQty: 1\n"
            "Subtotal: $380.00\nTax: $38.00\nTotal: $418.00\nCash"
        )
        assert record.store == "Total Wine & More"
        assert [item.name for item in record.items] == ["Opus One 2018"]
        assert record.subtotal == 380
        assert record.tax == 38
        assert record.total == 418
        assert record.payment_method == "Cash"

    def test_tax_invoice_header_keeps_items(self) -> None:
        record = parse_receipt(
            "Vintage Cellars\nTAX INVOICE\n2024/07/20 15:30\n"
            "Penfolds Bin 389 2019 $89.00\nTotal: $89.00"
        )
        assert record.store == "Vintage Cellars"
        assert len(record.items) == 1
        assert record.items[0].vintage == 2019
        assert record.total == 89

    def test_item_count_line_is_not_total(self) -> None:
        record = parse_receipt(
            "Wine Shop\n2024/07/20\nMerlot 2019 $25.00\nSyrah 2020 $30.00\n"
            "Total items: 2\nTotal: $55.00"
        )
        assert record.total == 55
        assert len(record.items) == 2

    def test_marked_amount_beats_earlier_bare_number(self) -> None:
        record = parse_receipt("Wine Shop\nMerlot $25.00\nTotal 2\nTotal: $25.00")
        assert record.total == 25

    def test_bare_number_used_without_marked_alternative(self) -> None:
        record = parse_receipt("Wine Shop\nMerlot $25.00\nTotal 25.00")
        assert record.total == 25

    def test_keyword_only_lines_are_not_totals(self) -> None:
        parser = ReceiptParser()
        sections = parser.segment(["Total Wine & More", "Merlot $10.00", "Total: $10.00"])
        assert sections.header == ["Total Wine & More"]
        assert sections.items == ["Merlot $10.00"]
        assert sections.totals == ["Total: $10.00"]
