"""Exception types raised by winedoc.

Data-quality problems in OCR text are never raised; they show up as
missing fields or an ``unknown`` classification. These exceptions signal
programming errors at the package boundary.
"""


class WinedocError(Exception):
    """Base class for winedoc errors."""


class NormalizationError(WinedocError, TypeError):
    """The normalizer was handed something that is not a record mapping."""


class UnsupportedFormatError(WinedocError):
    """An OCR text source was given an image format it cannot read."""
