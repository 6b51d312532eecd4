"""Receipt parsing.

Segments receipt OCR text into a header (store, date, time), an item
block and a totals block, then fills a :class:`ReceiptRecord`. Amounts
are read with the currency-aware parser from :mod:`.primitives`, using
the first currency marker in the document for unmarked numbers.
"""

import re
from dataclasses import dataclass, field

from winedoc.models import ReceiptItem, ReceiptRecord
from winedoc.utils.config import ParsingConfig
from winedoc.utils.logger import get_logger

from .primitives import (
    detect_currency,
    extract_amount,
    extract_date,
    extract_payment_method,
    extract_quantity,
    extract_time,
    extract_year,
    find_amount_token,
    parse_amount,
    split_trailing_amount,
)

logger = get_logger(__name__)

_SUBTOTAL_RE = re.compile(r"^\s*(?:sub\s*-?\s*total\b|소\s*계|공급가액)", re.IGNORECASE)
_TAX_RE = re.compile(
    r"^\s*(?:sales\s+tax\b|tax\b|vat\b|부가세|부가가치세|세\s*액)", re.IGNORECASE
)
_TOTAL_RE = re.compile(
    r"^\s*(?:grand\s+total\b|total\b|amount\s+due\b|"
    r"총\s*액|합\s*계|총\s*금액|결제\s*금액|받을\s*금액)",
    re.IGNORECASE,
)

# An anchor counts only when an amount follows it, so headers such as
# "Total Wine & More" or "TAX INVOICE" stay in the header.
_ANCHOR_AMOUNT_RE = re.compile(r"^\s*[:：.]?\s*[₩$€£]?\s*-?\d")

_COUNT_ANCHOR_RE = re.compile(
    r"^\s*(?:total\s+(?:items?|qty|quantity|count|pieces|pcs)\b|총\s*수량|품목\s*수)",
    re.IGNORECASE,
)

_QUANTITY_HINT_RE = re.compile(r"^\s*(?:수량|qty|q'ty|quantity)\b", re.IGNORECASE)

_EXCLUDED_LINE_PATTERNS: list[str] = [
    r"^\s*[-=*_.~]+\s*$",
    r"^\s*(?:매장|점포|상점)",
    r"^\s*(?:tel|phone|전화)",
    r"^\s*(?:address|주소)",
    r"^\s*(?:receipt|영수증)",
    r"^\s*thank\s*you",
    r"^\s*감사합니다",
    r"^\s*(?:승인\s*번호|approval)",
    r"^\s*(?:카드\s*번호|card\s*no)",
    r"^\s*(?:결제|payment\b|cash\b|card\b|credit\s+card\b|현금|카드|신용카드|change\b|거스름)",
]

_EXCLUDED_LINE_RULES = [re.compile(p, re.IGNORECASE) for p in _EXCLUDED_LINE_PATTERNS]

_PAYMENT_SKIP_RE = re.compile(
    r"카드\s*번호|card\s*(?:no|number)|승인|approval|거스름|\bchange\b", re.IGNORECASE
)

_BRANCH_QUALIFIER_RE = re.compile(
    r"^\(?\s*([\w\s]{1,20}?(?:점|지점)|[\w\s]{1,30}?\bbranch)\s*\)?$", re.IGNORECASE
)

_STORE_HINT_RE = re.compile(
    r"\b(?:store|shop|mart|wine|cellar)\b|마트|상점|[가-힣]점(?:\s|$)", re.IGNORECASE
)


@dataclass
class ReceiptSections:
    """Receipt lines split into header, item and totals regions."""

    header: list[str] = field(default_factory=list)
    items: list[str] = field(default_factory=list)
    totals: list[str] = field(default_factory=list)


def _is_excluded(line: str) -> bool:
    return any(rule.search(line) for rule in _EXCLUDED_LINE_RULES)


def _anchor_remainder(line: str, pattern: re.Pattern[str]) -> str | None:
    """Return the text after a totals anchor, or None if no amount follows."""
    if _COUNT_ANCHOR_RE.search(line):
        return None
    match = pattern.search(line)
    if not match:
        return None
    rest = line[match.end():]
    if _ANCHOR_AMOUNT_RE.search(rest) or find_amount_token(rest):
        return rest
    return None


def _is_totals_line(line: str) -> bool:
    return any(
        _anchor_remainder(line, pattern) is not None
        for pattern in (_SUBTOTAL_RE, _TAX_RE, _TOTAL_RE)
    )


def _is_datetime_line(line: str) -> bool:
    return extract_date(line) is not None or extract_time(line) is not None


def _split_item(line: str) -> tuple[str, str] | None:
    """Return (name, amount token) when the line is an item header."""
    if _is_excluded(line) or _is_totals_line(line) or extract_date(line):
        return None
    split = split_trailing_amount(line)
    if split is None:
        return None
    name, token = split
    name = name.rstrip(" :-")
    if len(name) < 2 or not re.search(r"[^\W\d_]", name):
        return None
    return name, token


class ReceiptParser:
    """Extracts a :class:`ReceiptRecord` from receipt OCR text.

    Args:
        config: Range limits for item vintages. Defaults when ``None``.
    """

    def __init__(self, config: ParsingConfig | None = None) -> None:
        self.config = config or ParsingConfig()

    def parse(self, text: str) -> ReceiptRecord:
        """Parse receipt text. Returns ``{items: []}`` for non-receipt input.

        Args:
            text: Raw OCR text from a receipt.

        Returns:
            Header fields, ordered items and totals that could be recognized.
        """
        if not text or not text.strip():
            return ReceiptRecord()

        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not self._looks_like_receipt(lines):
            logger.debug("No receipt structure found in %d lines", len(lines))
            return ReceiptRecord()

        currency = detect_currency(text)
        sections = self.segment(lines)

        record = ReceiptRecord()
        record.store = self.extract_store(lines)
        date_index = self._find_date_index(lines)
        if date_index is not None:
            record.date = extract_date(lines[date_index])
        record.time = self.extract_time(lines, date_index)
        record.items = self.extract_items(sections.items, currency)
        self._fill_totals(record, sections.totals, currency)
        record.payment_method = self.extract_payment_method(lines)

        logger.info(
            "Parsed receipt: %d items, total=%s", len(record.items), record.total
        )
        return record

    def segment(self, lines: list[str]) -> ReceiptSections:
        """Split lines at the first item header and the first totals anchor."""
        totals_start = next(
            (i for i, line in enumerate(lines) if _is_totals_line(line)), len(lines)
        )
        header_end = next(
            (i for i in range(totals_start) if _split_item(lines[i])), totals_start
        )
        return ReceiptSections(
            header=lines[:header_end],
            items=lines[header_end:totals_start],
            totals=lines[totals_start:],
        )

    def extract_store(self, lines: list[str]) -> str | None:
        """Take the first line as the store, skipping a leading date/time line.

        A branch qualifier on the following line ("강남점", "Gangnam Branch")
        is appended to the store name.
        """
        if not lines:
            return None

        index = 1 if _is_datetime_line(lines[0]) else 0
        store: str | None = None
        if index < len(lines) and self._is_store_like(lines[index]):
            store = lines[index]
        else:
            for i, line in enumerate(lines):
                if _STORE_HINT_RE.search(line) and self._is_store_like(line):
                    index, store = i, line
                    break

        if store is None:
            return None

        if index + 1 < len(lines):
            qualifier = _BRANCH_QUALIFIER_RE.match(lines[index + 1])
            if qualifier and not self._is_qualifier_excluded(lines[index + 1]):
                store = f"{store} {qualifier.group(1).strip()}"
        return store

    def extract_time(self, lines: list[str], date_index: int | None) -> str | None:
        """Find a time on the date line or a line adjacent to it."""
        if date_index is None:
            candidates = range(len(lines))
        else:
            candidates = [
                i
                for i in (date_index, date_index - 1, date_index + 1)
                if 0 <= i < len(lines)
            ]
        for i in candidates:
            found = extract_time(lines[i])
            if found:
                return found
        return None

    def extract_items(
        self, lines: list[str], currency: str | None = None
    ) -> list[ReceiptItem]:
        """Read item headers and the quantity lines that follow them."""
        items: list[ReceiptItem] = []
        for line in lines:
            if _QUANTITY_HINT_RE.search(line) or re.fullmatch(
                r"\d+\s*(?:개|병|ea|pcs?|btls?)|[x×]\s*\d+", line, re.IGNORECASE
            ):
                quantity = extract_quantity(line)
                if quantity is not None and items:
                    items[-1].quantity = quantity
                continue

            split = _split_item(line)
            if split is None:
                continue
            name, token = split
            price = parse_amount(token, currency)
            if price is None:
                logger.debug("Skipping item with unreadable price: %r", line)
                continue
            items.append(
                ReceiptItem(
                    name=name,
                    price=price,
                    quantity=1,
                    vintage=extract_year(
                        name,
                        self.config.min_vintage,
                        self.config.vintage_upper_bound(),
                    ),
                )
            )
        return items

    def extract_payment_method(self, lines: list[str]) -> str | None:
        """Return the label of the last line naming a payment method."""
        for line in reversed(lines):
            if _PAYMENT_SKIP_RE.search(line) or _split_item(line):
                continue
            method = extract_payment_method(line)
            if method:
                return method
        return None

    def _fill_totals(
        self, record: ReceiptRecord, lines: list[str], currency: str | None
    ) -> None:
        """Fill subtotal, tax and total from their anchor lines.

        The first anchor line wins, except that a currency-marked amount
        replaces an earlier unmarked number for the same field.
        """
        anchors = (
            ("subtotal", _SUBTOTAL_RE),
            ("tax", _TAX_RE),
            ("total", _TOTAL_RE),
        )
        found: dict[str, tuple[bool, float]] = {}
        for line in lines:
            for attr, pattern in anchors:
                rest = _anchor_remainder(line, pattern)
                if rest is None:
                    continue
                amount = extract_amount(rest, currency)
                if amount is not None:
                    marked = find_amount_token(rest) is not None
                    if attr not in found or (marked and not found[attr][0]):
                        found[attr] = (marked, amount)
                break
        for attr, (_, amount) in found.items():
            setattr(record, attr, amount)

    def _find_date_index(self, lines: list[str]) -> int | None:
        for i, line in enumerate(lines):
            if extract_date(line):
                return i
        return None

    def _looks_like_receipt(self, lines: list[str]) -> bool:
        for line in lines:
            if (
                extract_date(line)
                or find_amount_token(line)
                or _is_totals_line(line)
                or _QUANTITY_HINT_RE.search(line)
            ):
                return True
        return False

    def _is_store_like(self, line: str) -> bool:
        return (
            len(line) > 2
            and not _is_datetime_line(line)
            and find_amount_token(line) is None
            and not _is_totals_line(line)
            and not _is_excluded(line)
            and extract_quantity(line) is None
        )

    def _is_qualifier_excluded(self, line: str) -> bool:
        return (
            _is_datetime_line(line)
            or find_amount_token(line) is not None
            or _is_excluded(line)
        )


def parse_receipt(text: str, config: ParsingConfig | None = None) -> ReceiptRecord:
    """Parse receipt OCR text into a :class:`ReceiptRecord`."""
    return ReceiptParser(config).parse(text)
