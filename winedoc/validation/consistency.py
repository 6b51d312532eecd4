"""Consistency checks for parsed records.

Checks compare fields that should agree with each other (item prices
against the subtotal, subtotal plus tax against the total) and flag
implausible label values. They only produce warnings; a record that
fails a check is still returned to the caller unchanged.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from winedoc.models import ReceiptRecord, WineLabelRecord
from winedoc.utils.logger import get_logger

logger = get_logger(__name__)

_TOLERANCE = Decimal("0.05")


@dataclass
class ConsistencyReport:
    """Warnings raised while cross-checking one record."""

    warnings: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.warnings


def _within_tolerance(actual: Decimal, expected: Decimal) -> bool:
    return abs(actual - expected) <= abs(expected) * _TOLERANCE


def check_receipt(record: ReceiptRecord) -> ConsistencyReport:
    """Cross-check receipt items and totals.

    Args:
        record: Parsed receipt.

    Returns:
        Report listing every disagreement found.
    """
    report = ConsistencyReport()

    if record.items:
        items_sum = sum(
            (Decimal(str(item.price)) * item.quantity for item in record.items),
            Decimal(0),
        )
        reference = record.subtotal
        if reference is None and record.tax is None:
            reference = record.total
        if reference is not None and not _within_tolerance(
            items_sum, Decimal(str(reference))
        ):
            report.warnings.append(
                f"Line items sum ({items_sum}) doesn't match {reference}"
            )

    if record.subtotal is not None and record.tax is not None and record.total is not None:
        expected = Decimal(str(record.subtotal)) + Decimal(str(record.tax))
        if not _within_tolerance(expected, Decimal(str(record.total))):
            report.warnings.append(
                f"Subtotal plus tax ({expected}) doesn't match total ({record.total})"
            )

    if report.warnings:
        logger.warning("Receipt consistency: %s", "; ".join(report.warnings))
    return report


def check_wine_label(record: WineLabelRecord) -> ConsistencyReport:
    """Flag label values that are parseable but unlikely."""
    report = ConsistencyReport()
    if record.alcohol is not None and not 5.0 <= record.alcohol <= 22.0:
        report.warnings.append(f"Unusual alcohol content: {record.alcohol}%")
    if record.vintage is not None and record.vintage < 1900:
        report.warnings.append(f"Unusually old vintage: {record.vintage}")
    if report.warnings:
        logger.warning("Wine label consistency: %s", "; ".join(report.warnings))
    return report
