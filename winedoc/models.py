"""Record types produced by the classifier, parsers and normalizer.

All records are plain dataclasses created per call. ``to_dict`` emits
only the populated fields so a record with nothing extracted serializes
to ``{}`` (or ``{"items": []}`` for receipts).
"""

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any


class DocumentType(StrEnum):
    """Kinds of photographed documents the classifier distinguishes."""

    WINE_LABEL = "wine_label"
    RECEIPT = "receipt"
    UNKNOWN = "unknown"


def _populated(record: Any, renames: dict[str, str] | None = None) -> dict[str, Any]:
    renames = renames or {}
    out: dict[str, Any] = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue
        out[renames.get(f.name, f.name)] = value
    return out


@dataclass
class ClassificationResult:
    """Outcome of scoring OCR text against the indicator vocabularies."""

    type: DocumentType
    confidence: float
    indicators: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "confidence": self.confidence,
            "indicators": list(self.indicators),
        }


@dataclass
class WineLabelRecord:
    """Fields read off a wine bottle label. Every field is optional."""

    name: str | None = None
    vintage: int | None = None
    producer: str | None = None
    region: str | None = None
    appellation: str | None = None
    variety: str | None = None
    alcohol: float | None = None
    volume: str | None = None
    classification: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _populated(self)

    def is_empty(self) -> bool:
        return not self.to_dict()


@dataclass
class ReceiptItem:
    """One purchased line on a receipt."""

    name: str
    price: float
    quantity: int = 1
    vintage: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _populated(self)


@dataclass
class ReceiptRecord:
    """Fields read off a retail receipt.

    ``items`` is always present. ``payment_method`` is emitted as
    ``paymentMethod`` by :meth:`to_dict`.
    """

    store: str | None = None
    date: str | None = None
    time: str | None = None
    items: list[ReceiptItem] = field(default_factory=list)
    subtotal: float | None = None
    tax: float | None = None
    total: float | None = None
    payment_method: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = _populated(self, {"payment_method": "paymentMethod"})
        out["items"] = [item.to_dict() for item in self.items]
        return out

    def is_empty(self) -> bool:
        return self.to_dict() == {"items": []}


@dataclass
class CanonicalWineRecord:
    """The fixed-key wine record handed to persistence collaborators."""

    name: str | None = None
    vintage: int | None = None
    producer: str | None = None
    region: str | None = None
    country: str | None = None
    appellation: str | None = None
    variety: str | None = None
    classification: str | None = None
    alcohol: float | None = None
    volume: str | None = None
    price: float | None = None
    quantity: int | None = None
    store: str | None = None
    purchase_date: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _populated(self)
