"""Shared test fixtures for the winedoc test suite."""

from pathlib import Path

import pytest

MARGAUX_LABEL = (
    "Château Margaux\n"
    "2015\n"
    "Appellation Margaux Contrôlée\n"
    "Bordeaux\n"
    "75cl\n"
    "13.5% vol"
)

KOREAN_RECEIPT = """
    와인앤모어 강남점
    2024/07/20 15:30:25

    샤또 마고 2015         ₩150,000
    수량: 1개

    돔 페리뇽 2012         ₩280,000
    수량: 1개

    소계: ₩430,000
    부가세: ₩43,000
    총액: ₩473,000

    신용카드 결제
    승인번호: 12345678
"""

ENGLISH_RECEIPT = """
    Wine Cellar NYC
    07/20/2024 3:30 PM

    Château Margaux 2015    $200.00
    Qty: 1

    Dom Pérignon 2012       $350.00
    Qty: 1

    Subtotal: $550.00
    Tax: $55.00
    Total: $605.00

    Credit Card Payment
"""


@pytest.fixture
def margaux_label() -> str:
    """OCR text of a classic Bordeaux label."""
    return MARGAUX_LABEL


@pytest.fixture
def korean_receipt() -> str:
    """OCR text of a Korean wine shop receipt with two items."""
    return KOREAN_RECEIPT


@pytest.fixture
def english_receipt() -> str:
    """OCR text of a US wine shop receipt with two items."""
    return ENGLISH_RECEIPT


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
