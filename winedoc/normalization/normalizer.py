"""Normalization of wine records into the canonical shape.

Records reach the normalizer from the rule-based parsers (canonical
snake_case keys) or from an AI refinement collaborator that uses
Notion-style names such as ``Name``, ``Region/Producer`` or
``Varietal(품종)``. :data:`FIELD_SYNONYMS` is the single table that maps
every accepted key onto a canonical field; keys not listed there are
dropped so alternate names never leave this module.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import fields
from typing import Any

from winedoc.errors import NormalizationError
from winedoc.extraction.primitives import extract_alcohol, parse_amount
from winedoc.models import CanonicalWineRecord, ReceiptRecord
from winedoc.utils.config import ParsingConfig
from winedoc.utils.logger import get_logger

logger = get_logger(__name__)

# Resolution order per canonical field: the canonical key first, then the
# synonyms in priority order. The first key holding a usable value wins.
FIELD_SYNONYMS: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name", "wine_name", "wineName", "title"),
    "vintage": ("vintage", "Vintage", "year"),
    "producer": ("producer", "Producer", "winery", "Region/Producer"),
    "region": ("region", "Region"),
    "country": ("country", "Country", "Country(국가)"),
    "appellation": ("appellation", "Appellation", "Appellation(원산지명칭)"),
    "variety": (
        "variety",
        "Variety",
        "Varietal(품종)",
        "varietal",
        "grape_variety",
        "grapes",
    ),
    "classification": ("classification", "Classification", "wine_type"),
    "alcohol": ("alcohol", "Alcohol", "alcohol_content"),
    "volume": ("volume", "Volume"),
    "price": ("price", "Price"),
    "quantity": ("quantity", "Quantity", "qty"),
    "store": ("store", "Store", "store_name"),
    "purchase_date": ("purchase_date", "Purchase date", "purchaseDate", "date"),
    "notes": ("notes", "Notes", "Notes(메모)"),
}

_KNOWN_KEYS = {key for keys in FIELD_SYNONYMS.values() for key in keys}


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, (list, tuple)) and not value:
        return False
    return True


def _resolve(raw: Mapping[str, Any], canonical: str) -> Any:
    for key in FIELD_SYNONYMS[canonical]:
        if key in raw and _is_present(raw[key]):
            return raw[key]
    return None


def _as_text(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        return None
    text = re.sub(r"\s+", " ", str(value)).strip()
    return text or None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        number = parse_amount(value)
    else:
        return None
    if number is None or not math.isfinite(number):
        return None
    return number


def _as_int(value: Any) -> int | None:
    number = _as_number(value)
    if number is None or number != int(number):
        return None
    return int(number)


class Normalizer:
    """Maps loosely keyed wine records onto :class:`CanonicalWineRecord`.

    Coercion rules:

    * ``vintage``: integer within the configured vintage range.
    * ``price``: non-negative number; currency strings are parsed.
    * ``quantity``: positive integer.
    * ``alcohol``: percentage in (0, ``max_alcohol``]; ``"13.5%"`` is read.
    * ``variety``: lists are joined with ``", "``. This loses the list
      structure and is meant for display only.

    Values that fail coercion are dropped, never stored as NaN.

    Args:
        config: Range limits shared with the parsers.
    """

    def __init__(self, config: ParsingConfig | None = None) -> None:
        self.config = config or ParsingConfig()

    def normalize(self, raw: Mapping[str, Any] | CanonicalWineRecord) -> CanonicalWineRecord:
        """Return the canonical record for ``raw``.

        Args:
            raw: A mapping with canonical or synonym keys, or a record that
                is already canonical.

        Returns:
            A new canonical record. Normalizing it again yields an equal record.

        Raises:
            NormalizationError: If ``raw`` is not a mapping.
        """
        if isinstance(raw, CanonicalWineRecord):
            raw = raw.to_dict()
        if not isinstance(raw, Mapping):
            raise NormalizationError(
                f"Expected a mapping of wine fields, got {type(raw).__name__}"
            )

        unknown = [key for key in raw if key not in _KNOWN_KEYS]
        if unknown:
            logger.debug("Dropping unrecognized keys: %s", ", ".join(map(str, unknown)))

        values: dict[str, Any] = {}
        for f in fields(CanonicalWineRecord):
            value = _resolve(raw, f.name)
            if value is None:
                continue
            coerced = self._coerce(f.name, value)
            if coerced is None:
                logger.debug("Dropping invalid %s value: %r", f.name, value)
                continue
            values[f.name] = coerced

        return CanonicalWineRecord(**values)

    def normalize_receipt(self, receipt: ReceiptRecord) -> list[CanonicalWineRecord]:
        """Turn each receipt item into a canonical wine record.

        The store and date of the receipt are copied onto every item.
        """
        records: list[CanonicalWineRecord] = []
        for item in receipt.items:
            raw: dict[str, Any] = {
                "name": item.name,
                "vintage": item.vintage,
                "price": item.price,
                "quantity": item.quantity,
                "store": receipt.store,
                "purchase_date": receipt.date,
            }
            records.append(self.normalize(raw))
        return records

    def _coerce(self, name: str, value: Any) -> Any:
        if name == "vintage":
            year = _as_int(value)
            upper = self.config.vintage_upper_bound()
            if year is None or not self.config.min_vintage <= year <= upper:
                return None
            return year
        if name == "price":
            price = _as_number(value)
            return price if price is not None and price >= 0 else None
        if name == "quantity":
            quantity = _as_int(value)
            return quantity if quantity is not None and quantity > 0 else None
        if name == "alcohol":
            return self._coerce_alcohol(value)
        if name == "variety":
            return self._coerce_variety(value)
        return _as_text(value)

    def _coerce_alcohol(self, value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = extract_alcohol(value, self.config.max_alcohol)
            if number is None:
                try:
                    number = float(value.strip().replace(",", "."))
                except ValueError:
                    return None
        else:
            return None
        if not math.isfinite(number) or not 0 < number <= self.config.max_alcohol:
            return None
        return number

    def _coerce_variety(self, value: Any) -> str | None:
        if isinstance(value, (list, tuple)):
            parts = [_as_text(v) for v in value if _is_present(v)]
            joined = ", ".join(p for p in parts if p)
            return joined or None
        return _as_text(value)


def normalize(
    raw: Mapping[str, Any] | CanonicalWineRecord, config: ParsingConfig | None = None
) -> CanonicalWineRecord:
    """Normalize a loosely keyed wine record into a :class:`CanonicalWineRecord`."""
    return Normalizer(config).normalize(raw)


def normalize_receipt(
    receipt: ReceiptRecord, config: ParsingConfig | None = None
) -> list[CanonicalWineRecord]:
    """Convert receipt items into canonical wine records."""
    return Normalizer(config).normalize_receipt(receipt)
