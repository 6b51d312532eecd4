"""Indicator vocabularies and boost tables used by the classifier.

Indicators are counted once each, however often they occur. Boosts are
strong single-signal cues with an explicit weight; each boost fires at
most once per document.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from winedoc.models import DocumentType
from winedoc.utils.logger import get_logger

logger = get_logger(__name__)

WINE_LABEL_INDICATORS: tuple[str, ...] = (
    "appellation", "château", "chateau", "domaine", "vintage", "estate",
    "wine", "rouge", "blanc", "rosé", "sec", "demi-sec", "brut",
    "cabernet", "merlot", "chardonnay", "pinot", "sauvignon", "syrah",
    "bordeaux", "burgundy", "champagne", "contrôlée", "controlee",
    "vol", "ml", "cl", "alcohol", "alc", "도", "년산", "와인", "winery",
    "harvest", "récolte", "reserve", "grand", "cru", "premier",
    "doc", "docg", "denominazione", "origine", "controllata",
    "imbottigliato", "italia", "product of", "mis en bouteille",
)

RECEIPT_INDICATORS: tuple[str, ...] = (
    "total", "subtotal", "tax", "vat", "receipt", "qty", "quantity",
    "payment", "card", "cash", "change", "amount",
    "₩", "$", "€", "£", "원", "수량", "소계", "총액", "합계",
    "부가세", "결제", "신용카드", "카드", "현금", "승인번호",
    "영수증", "매장", "store", "shop", "mart",
)


@dataclass(frozen=True)
class Boost:
    """A weighted cue whose presence strongly implies one document type."""

    name: str
    pattern: str
    weight: float
    flags: int = re.IGNORECASE

    def matches(self, text: str) -> bool:
        return re.search(self.pattern, text, self.flags) is not None


_LATIN = r"a-zà-öø-ÿ"

WINE_LABEL_BOOSTS: tuple[Boost, ...] = (
    Boost("chateau", rf"(?<![{_LATIN}])ch[âa]teau(?![{_LATIN}])", 0.3),
    Boost("appellation", rf"(?<![{_LATIN}])appellation(?![{_LATIN}])", 0.3),
    Boost("controlee", r"contr[ôo]l[ée]e|controllata|protégée", 0.3),
    Boost("italian_denomination", r"\bdocg?\b|denominazione\s+di\s+origine", 0.3),
    Boost("bordeaux", r"\bbordeaux\b|보르도", 0.2),
    Boost("vintage_marker", r"vintage|년산|mill[ée]sime|r[ée]colte|vendemmia", 0.2),
    Boost("year", r"(?<!\d)(?:1[89]|20)\d{2}(?!\d)", 0.2),
    Boost("alcohol", r"\d+(?:[.,]\d+)?\s*%?\s*(?:vol\b|도)|\d+(?:[.,]\d+)?\s*%\s*alc", 0.2),
    Boost("volume", r"(?<![\d.,])\d+(?:[.,]\d+)?\s*(?:ml|cl|l)(?![a-z])", 0.1),
)

RECEIPT_BOOSTS: tuple[Boost, ...] = (
    Boost("total_line", r"(?:^|\n)\s*(?:grand\s+)?total\b|총액|합계", 0.3),
    Boost("subtotal_line", r"sub\s*total|소계", 0.2),
    Boost("quantity_line", r"\bqty\b|\bquantity\b|수량", 0.2),
    Boost("payment", r"\bpayment\b|결제", 0.2),
    Boost("currency", r"[₩$€£]|\d\s*원", 0.3),
    Boost("date", r"(?<!\d)\d{4}\s*[/\-.]\s*\d{1,2}\s*[/\-.]\s*\d{1,2}(?!\d)|(?<!\d)\d{1,2}/\d{1,2}/\d{4}", 0.2),
    Boost("time", r"(?<![\d:])\d{1,2}:\d{2}(?::\d{2})?(?![\d:])", 0.1),
    Boost(
        "date_time",
        r"\d{4}\s*[/\-.]\s*\d{1,2}\s*[/\-.]\s*\d{1,2}[ \t]+(?:오전|오후)?\s*\d{1,2}:\d{2}"
        r"|\d{1,2}/\d{1,2}/\d{4}[ \t]+\d{1,2}:\d{2}",
        0.1,
    ),
    Boost("priced_line", r"[₩$€£]\s*\d{1,3}(?:[,.]\d{3})*|\d{1,3}(?:,\d{3})+\s*원", 0.3),
    Boost("store_line", r"\bstore\b|\bshop\b|마트|[가-힣]점(?:\s|$)", 0.2),
)

VOCABULARIES: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.WINE_LABEL: WINE_LABEL_INDICATORS,
    DocumentType.RECEIPT: RECEIPT_INDICATORS,
}

BOOSTS: dict[DocumentType, tuple[Boost, ...]] = {
    DocumentType.WINE_LABEL: WINE_LABEL_BOOSTS,
    DocumentType.RECEIPT: RECEIPT_BOOSTS,
}


def indicator_pattern(indicator: str) -> re.Pattern[str]:
    """Compile the matcher for one indicator.

    Latin-script words must stand alone (``doc`` does not match
    ``document``); Hangul terms and currency symbols match anywhere.
    """
    escaped = re.escape(indicator)
    if re.search(rf"[{_LATIN}]", indicator):
        return re.compile(rf"(?<![{_LATIN}]){escaped}(?![{_LATIN}])")
    return re.compile(escaped)


def load_vocabulary(
    path: Path | None,
) -> dict[DocumentType, tuple[str, ...]]:
    """Return the built-in vocabularies extended with indicators from YAML.

    The YAML file maps a document type value to a list of extra indicator
    strings::

        wine_label: [riserva, weingut]
        receipt: [kassenbon]

    Args:
        path: YAML file with extra indicators, or ``None``.

    Returns:
        Mapping of document type to its indicator tuple.
    """
    vocabularies = dict(VOCABULARIES)
    if path is None or not path.exists():
        if path is not None:
            logger.debug("No vocabulary file at %s, using built-in indicators", path)
        return vocabularies

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    for key, extra in data.items():
        try:
            doc_type = DocumentType(key)
        except ValueError:
            logger.warning("Ignoring indicators for unknown document type '%s'", key)
            continue
        if doc_type not in vocabularies:
            continue
        merged = list(vocabularies[doc_type])
        for term in extra or []:
            term = str(term).lower().strip()
            if term and term not in merged:
                merged.append(term)
        vocabularies[doc_type] = tuple(merged)

    logger.info("Loaded extra indicators from %s", path)
    return vocabularies
