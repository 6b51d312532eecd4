"""Protocols for the collaborators that surround the parsing core.

OCR and AI refinement run outside this package; only their call shapes
are fixed here so the pipeline can accept any implementation.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TextSource(Protocol):
    """Produces OCR text for an image.

    Implementations raise :class:`winedoc.errors.UnsupportedFormatError`
    for unreadable formats and :class:`FileNotFoundError` for missing
    files. An image with no readable text yields ``""``.
    """

    def extract_text(self, image: Path | str) -> str: ...


@runtime_checkable
class Refiner(Protocol):
    """Re-derives structured wine data from OCR text.

    Returns a mapping that may use Notion-style keys (``Name``,
    ``Vintage``, ``Region/Producer``, ``Varietal(품종)``); the normalizer
    maps them onto canonical fields.
    """

    def refine(self, text: str) -> Mapping[str, Any]: ...
