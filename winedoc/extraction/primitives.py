"""Single-field recognizers for wine label and receipt OCR text.

Each field is recognized by an ordered list of independent regex rules
covering Korean, English, French and Italian conventions. Rules are tried
in list order and the first one producing an in-range value wins. Every
function here is pure and returns ``None`` when nothing usable is found.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

# Vintage rules: (regex, flags). Marked forms come before bare years.
_VINTAGE_PATTERNS: list[tuple[str, int]] = [
    (
        r"(?:vintage|mill[ée]sime|r[ée]colte|harvest|vendemmia|cosecha)"
        r"\s*[:.]?\s*(\d{4})(?!\d)",
        re.IGNORECASE,
    ),
    (r"(?<!\d)(\d{4})\s*년산", 0),
    (r"(?<!\d)(\d{4})\s*(?:vintage|harvest)\b", re.IGNORECASE),
    (r"(?<![\d.,])(\d{4})(?![\d]|[.,]\d)", 0),
]

_BARE_YEAR_PATTERN = _VINTAGE_PATTERNS[-1]

_ALCOHOL_PATTERNS: list[tuple[str, int]] = [
    (
        r"(?<![\d.,])(\d{1,2}(?:[.,]\d{1,2})?)\s*%\s*"
        r"(?:vol\b|alc\b|alcohol|abv\b)",
        re.IGNORECASE,
    ),
    (r"\b(?:alc|vol)\.?\s*(\d{1,2}(?:[.,]\d{1,2})?)\s*%", re.IGNORECASE),
    (r"(?<![\d.,])(\d{1,2}(?:\.\d{1,2})?)\s*도", 0),
    (r"(?<![\d.,])(\d{1,2}(?:[.,]\d{1,2})?)\s*%", 0),
    (
        r"(?<![\d.,])(\d{1,2}(?:[.,]\d{1,2})?)\s*(?:vol|alc|abv)\b",
        re.IGNORECASE,
    ),
    (
        r"\b(?:alc|vol|abv)\.?\s*:?\s*(\d{1,2}(?:[.,]\d{1,2})?)(?![\d]|[.,]\d)",
        re.IGNORECASE,
    ),
]

_VOLUME_PATTERNS: list[tuple[str, int]] = [
    (r"(?<![\d.,])\d+(?:[.,]\d+)?\s*ml(?![a-z])", re.IGNORECASE),
    (r"(?<![\d.,])\d+(?:[.,]\d+)?\s*cl(?![a-z])", re.IGNORECASE),
    (r"(?<![\d.,])\d{1,2}(?:[.,]\d{1,3})?\s*l(?![a-z'’])", re.IGNORECASE),
]

# Date rules: (regex, group order) where order names the (year, month, day)
# positions of the capture groups.
_DATE_PATTERNS: list[tuple[str, tuple[int, int, int]]] = [
    (r"(?<!\d)(\d{4})\s*[/\-.]\s*(\d{1,2})\s*[/\-.]\s*(\d{1,2})(?!\d)", (1, 2, 3)),
    (r"(?<!\d)(\d{4})\s*년\s*(\d{1,2})\s*월\s*(\d{1,2})\s*일", (1, 2, 3)),
    (r"(?<!\d)(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})(?!\d)", (3, 1, 2)),
]

_TIME_PATTERNS: list[tuple[str, int]] = [
    (
        r"(?P<prefix>오전|오후)\s*(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2}))?(?![\d:])",
        0,
    ),
    (
        r"(?<![\d:])(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2}))?\s*"
        r"(?P<suffix>[ap]\.?\s?m\.?)(?![a-z])",
        re.IGNORECASE,
    ),
    (r"(?<![\d:])(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2}))?(?![\d:])", 0),
]

# Amount tokens: a currency symbol before the digits, or a currency unit
# after them.
_AMOUNT_PATTERNS: list[tuple[str, int]] = [
    (r"[₩$€£]\s*-?\d[\d,.]*", 0),
    (
        r"(?<![\d,.])-?\d[\d,.]*\s*(?:원|won\b|krw\b|usd\b|eur\b|gbp\b|[₩$€£])",
        re.IGNORECASE,
    ),
]

_BARE_NUMBER_PATTERN = r"(?<![\d,.])-?\d[\d,.]*"

_CURRENCY_MARKERS: list[tuple[str, str]] = [
    ("₩", "KRW"),
    ("원", "KRW"),
    ("krw", "KRW"),
    ("won", "KRW"),
    ("€", "EUR"),
    ("eur", "EUR"),
    ("£", "GBP"),
    ("gbp", "GBP"),
    ("$", "USD"),
    ("usd", "USD"),
]

# Currencies whose amounts use a comma as the decimal separator.
_COMMA_DECIMAL_CURRENCIES = {"EUR"}

_PAYMENT_PATTERNS: list[tuple[str, str]] = [
    (r"신용\s*카드", "신용카드"),
    (r"체크\s*카드", "체크카드"),
    (r"현금", "현금"),
    (r"카카오\s*페이", "카카오페이"),
    (r"네이버\s*페이", "네이버페이"),
    (r"카드", "카드"),
    (r"\bcredit\s*card\b", "Credit Card"),
    (r"\bdebit\s*card\b", "Debit Card"),
    (r"\bcash\b", "Cash"),
    (r"\bapple\s*pay\b", "Apple Pay"),
    (r"\bcard\b", "Card"),
]

_QUANTITY_PATTERNS: list[tuple[str, int]] = [
    (r"^(?:수량|qty|q'ty|quantity)\s*[:：.]?\s*(\d+)", re.IGNORECASE),
    (r"^(\d+)\s*(?:개|병|ea\b|pcs?\b|btls?\b)", re.IGNORECASE),
    (r"^[x×]\s*(\d+)\s*$", re.IGNORECASE),
]


def _compile(rules: list[tuple[str, int]]) -> list[re.Pattern[str]]:
    return [re.compile(pattern, flags) for pattern, flags in rules]


_VINTAGE_RULES = _compile(_VINTAGE_PATTERNS)
_BARE_YEAR_RULE = re.compile(*_BARE_YEAR_PATTERN)
_ALCOHOL_RULES = _compile(_ALCOHOL_PATTERNS)
_VOLUME_RULES = _compile(_VOLUME_PATTERNS)
_DATE_RULES = [(re.compile(p), order) for p, order in _DATE_PATTERNS]
_TIME_RULES = _compile(_TIME_PATTERNS)
_AMOUNT_RULES = _compile(_AMOUNT_PATTERNS)
_TRAILING_AMOUNT_RULES = [
    re.compile(rf"(?P<amount>{pattern})\s*$", flags)
    for pattern, flags in _AMOUNT_PATTERNS
]
_BARE_NUMBER_RULE = re.compile(_BARE_NUMBER_PATTERN)
_PAYMENT_RULES = [(re.compile(p, re.IGNORECASE), label) for p, label in _PAYMENT_PATTERNS]
_QUANTITY_RULES = _compile(_QUANTITY_PATTERNS)


def _default_max_year() -> int:
    return date.today().year + 1


def extract_vintage(
    text: str, min_year: int = 1800, max_year: int | None = None
) -> int | None:
    """Return the first plausible vintage year in ``text``.

    Marked forms ("Vintage 2015", "2015년산", "Récolte 2015") are
    preferred over bare four-digit tokens.
    """
    upper = max_year if max_year is not None else _default_max_year()
    for rule in _VINTAGE_RULES:
        for match in rule.finditer(text):
            year = int(match.group(1))
            if min_year <= year <= upper:
                return year
    return None


def extract_year(
    text: str, min_year: int = 1800, max_year: int | None = None
) -> int | None:
    """Return the first bare four-digit year in range, ignoring markers."""
    upper = max_year if max_year is not None else _default_max_year()
    for match in _BARE_YEAR_RULE.finditer(text):
        year = int(match.group(1))
        if min_year <= year <= upper:
            return year
    return None


def extract_alcohol(text: str, max_alcohol: float = 25.0) -> float | None:
    """Return the alcohol percentage as a float (``13,5 % vol`` -> 13.5)."""
    for rule in _ALCOHOL_RULES:
        for match in rule.finditer(text):
            try:
                value = float(match.group(1).replace(",", "."))
            except ValueError:
                continue
            if 0 < value <= max_alcohol:
                return value
    return None


def extract_volume(text: str) -> str | None:
    """Return the bottle volume with internal whitespace removed."""
    for rule in _VOLUME_RULES:
        match = rule.search(text)
        if match:
            return re.sub(r"\s+", "", match.group(0))
    return None


def extract_date(text: str) -> str | None:
    """Return the first valid calendar date normalized to ``YYYY-MM-DD``.

    Day-first dates are accepted in the month-first slot when the first
    number cannot be a month (``20/07/2024``).
    """
    for rule, (yi, mi, di) in _DATE_RULES:
        for match in rule.finditer(text):
            year = int(match.group(yi))
            month = int(match.group(mi))
            day = int(match.group(di))
            if month > 12 and day <= 12:
                month, day = day, month
            try:
                parsed = date(year, month, day)
            except ValueError:
                continue
            return parsed.isoformat()
    return None


def extract_time(text: str) -> str | None:
    """Return a 24-hour ``HH:MM`` or ``HH:MM:SS`` time.

    12-hour times with AM/PM (or 오전/오후) are converted; seconds are kept
    only when present in the source.
    """
    for rule in _TIME_RULES:
        for match in rule.finditer(text):
            groups = match.groupdict()
            hour = int(groups["h"])
            minute = int(groups["m"])
            second = groups.get("s")
            meridiem = (groups.get("prefix") or groups.get("suffix") or "").lower()
            meridiem = meridiem.replace(".", "").replace(" ", "")

            if meridiem:
                if not 1 <= hour <= 12:
                    continue
                if meridiem in ("pm", "오후") and hour != 12:
                    hour += 12
                elif meridiem in ("am", "오전") and hour == 12:
                    hour = 0
            if hour > 23 or minute > 59 or (second and int(second) > 59):
                continue

            result = f"{hour:02d}:{minute:02d}"
            return f"{result}:{second}" if second else result
    return None


def detect_currency(text: str) -> str | None:
    """Return the ISO code of the first currency marker found in ``text``."""
    lowered = text.lower()
    best: tuple[int, str] | None = None
    for marker, code in _CURRENCY_MARKERS:
        if marker.isalpha() and marker.isascii():
            match = re.search(rf"(?<![a-z]){marker}(?![a-z])", lowered)
            pos = match.start() if match else -1
        else:
            pos = lowered.find(marker)
        if pos >= 0 and (best is None or pos < best[0]):
            best = (pos, code)
    return best[1] if best else None


def parse_amount(token: str, currency: str | None = None) -> float | None:
    """Parse a currency amount into a plain number.

    Symbols (₩, $, €, £) and unit suffixes (원, KRW, ...) are stripped.
    A comma is a thousands separator for won and dollar amounts and a
    decimal separator for euro amounts. Integral amounts come back as
    ``int``.

    Args:
        token: Text holding one amount, e.g. ``"₩150,000"`` or ``"€150,50"``.
        currency: ISO code to assume when ``token`` carries no marker.

    Returns:
        The numeric value, or ``None`` if the token does not parse.
    """
    code = detect_currency(token) or currency
    raw = re.sub(r"[^\d,.\-]", "", token)
    if not re.search(r"\d", raw):
        return None

    negative = raw.startswith("-")
    digits = raw.replace("-", "")

    if code in _COMMA_DECIMAL_CURRENCIES:
        if "," in digits:
            digits = digits.replace(".", "").replace(",", ".")
        elif re.fullmatch(r"\d{1,3}(?:\.\d{3})+", digits):
            digits = digits.replace(".", "")
    else:
        digits = digits.replace(",", "")
        if code == "KRW" and re.fullmatch(r"\d{1,3}(?:\.\d{3})+", digits):
            digits = digits.replace(".", "")

    try:
        value = Decimal(digits)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    if negative:
        value = -value
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def find_amount_token(text: str) -> str | None:
    """Return the last currency-marked amount token in ``text``."""
    found: tuple[int, str] | None = None
    for rule in _AMOUNT_RULES:
        for match in rule.finditer(text):
            if found is None or match.start() > found[0]:
                found = (match.start(), match.group(0))
    return found[1] if found else None


def split_trailing_amount(line: str) -> tuple[str, str] | None:
    """Split ``"Château Margaux 2015  $200.00"`` into name and amount token.

    Only currency-marked amounts at the end of the line count.
    """
    for rule in _TRAILING_AMOUNT_RULES:
        match = rule.search(line)
        if match:
            prefix = line[: match.start("amount")].strip()
            return prefix, match.group("amount").strip()
    return None


def extract_amount(text: str, currency: str | None = None) -> float | None:
    """Parse the amount on a labelled line such as ``"총액: ₩473,000"``.

    Falls back to the last bare number when no currency marker is present.
    """
    token = find_amount_token(text)
    if token is None:
        numbers = _BARE_NUMBER_RULE.findall(text)
        if not numbers:
            return None
        token = numbers[-1]
    return parse_amount(token, currency)


def extract_payment_method(text: str) -> str | None:
    """Return the short payment label for a fragment, e.g. ``"신용카드"``."""
    for rule, label in _PAYMENT_RULES:
        if rule.search(text):
            return label
    return None


def extract_quantity(line: str) -> int | None:
    """Return the count from a quantity line (``"Qty: 3"``, ``"수량: 1개"``)."""
    stripped = line.strip()
    for rule in _QUANTITY_RULES:
        match = rule.search(stripped)
        if match:
            quantity = int(match.group(1))
            return quantity if quantity > 0 else None
    return None
