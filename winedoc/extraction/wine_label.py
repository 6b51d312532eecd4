"""Wine label parsing.

Splits label OCR text into lines and fills a :class:`WineLabelRecord`
from the primitive extractors plus keyword lists (regions, countries,
grape varieties, quality classifications) and positional heuristics for
the name and producer lines.
"""

import re

from winedoc.models import WineLabelRecord
from winedoc.utils.config import ParsingConfig
from winedoc.utils.logger import get_logger

from .primitives import extract_alcohol, extract_vintage, extract_volume

logger = get_logger(__name__)

_L = r"a-zà-öø-ÿ"

REGIONS: tuple[str, ...] = (
    "bordeaux", "burgundy", "bourgogne", "champagne", "loire", "rhône",
    "rhone", "alsace", "provence", "languedoc", "beaujolais", "tuscany",
    "toscana", "piedmont", "piemonte", "veneto", "sicily", "sicilia",
    "puglia", "napa valley", "sonoma", "paso robles", "willamette valley",
    "rioja", "ribera del duero", "priorat", "mosel", "rheingau", "douro",
    "barossa valley", "barossa", "hunter valley", "marlborough", "mendoza",
    "maipo valley",
    "보르도", "부르고뉴", "샴페인", "토스카나", "나파 밸리",
)

COUNTRIES: tuple[str, ...] = (
    "france", "italy", "italia", "spain", "españa", "portugal", "germany",
    "deutschland", "austria", "usa", "united states", "chile", "argentina",
    "australia", "new zealand", "south africa",
    "프랑스", "이탈리아", "스페인", "칠레", "미국", "호주", "아르헨티나",
    "독일", "뉴질랜드",
)

# Korean grape names are reported under their English names.
VARIETIES: dict[str, str | None] = {
    "cabernet sauvignon": None,
    "cabernet franc": None,
    "sauvignon blanc": None,
    "pinot noir": None,
    "pinot grigio": None,
    "pinot gris": None,
    "pinot blanc": None,
    "chenin blanc": None,
    "petit verdot": None,
    "touriga nacional": None,
    "gewürztraminer": None,
    "chardonnay": None,
    "merlot": None,
    "syrah": None,
    "shiraz": None,
    "grenache": None,
    "garnacha": None,
    "mourvèdre": None,
    "mourvedre": None,
    "tempranillo": None,
    "sangiovese": None,
    "nebbiolo": None,
    "barbera": None,
    "riesling": None,
    "garganega": None,
    "malbec": None,
    "zinfandel": None,
    "primitivo": None,
    "carménère": None,
    "viognier": None,
    "sémillon": None,
    "muscat": None,
    "moscato": None,
    "glera": None,
    "corvina": None,
    "aglianico": None,
    "gamay": None,
    "까베르네 소비뇽": "Cabernet Sauvignon",
    "소비뇽 블랑": "Sauvignon Blanc",
    "피노 누아": "Pinot Noir",
    "샤르도네": "Chardonnay",
    "메를로": "Merlot",
    "쉬라즈": "Shiraz",
    "시라": "Syrah",
    "리슬링": "Riesling",
    "말벡": "Malbec",
    "템프라니요": "Tempranillo",
    "산지오베제": "Sangiovese",
    "네비올로": "Nebbiolo",
}

CLASSIFICATIONS: tuple[str, ...] = (
    "premier grand cru classé", "grand cru classé", "grand cru",
    "premier cru", "1er cru", "cru classé", "cru bourgeois",
    "gran reserva", "riserva", "reserva", "réserve", "reserve",
    "supérieur", "superieur", "superiore", "classico", "villages",
    "docg", "doc", "igt", "aoc", "aop", "ava",
)

_PRODUCER_TOKENS = (
    r"ch[âa]teau|domaine|winery|tenuta|bodegas?|cantina|weingut|castello|"
    r"clos|샤또|도멘"
)

_PRESTIGE_RE = re.compile(
    rf"(?<![{_L}])(?:{_PRODUCER_TOKENS})(?![{_L}]).*", re.IGNORECASE
)

_PRODUCED_BY_RE = re.compile(
    r"(?:produced\s+(?:and\s+bottled\s+)?by|imbottigliato\s+(?:all'origine\s+)?da|"
    r"mis\s+en\s+bouteille\s+par|bottled\s+by)\s*:?\s*(.+)",
    re.IGNORECASE,
)

# Appellation rules, tried in order on each line.
_APPELLATION_PATTERNS: list[tuple[str, int]] = [
    (
        r"appellation\s+(.+?)\s+(?:contr[ôo]l[ée]e|prot[ée]g[ée]e)",
        re.IGNORECASE,
    ),
    (r"^appellation\s+(.+)$", re.IGNORECASE),
    (
        r"^(.+?)\s+(?:denominazione\s+di\s+origine\s+controllata(?:\s+e\s+garantita)?"
        r"|d\.?o\.?c\.?g?\.?)$",
        re.IGNORECASE,
    ),
]

_APPELLATION_RULES = [re.compile(p, f) for p, f in _APPELLATION_PATTERNS]

_APPELLATION_LINE_RE = re.compile(
    r"appellation|contr[ôo]l[ée]e|denominazione|controllata|\bd\.?o\.?c\.?g?\b",
    re.IGNORECASE,
)

_VINTAGE_LINE_RE = re.compile(
    r"(?:vintage|mill[ée]sime|r[ée]colte|harvest|vendemmia|cosecha)?\s*"
    r"\d{4}\s*(?:년산|vintage)?",
    re.IGNORECASE,
)

_GENERIC_LINE_RE = re.compile(
    r"(?<![a-z])(?:product|produce|produit|prodotto|contains|contient|"
    r"sulfites?|bottled|wine|vin|vino|vinho|grand vin)(?![a-z])",
    re.IGNORECASE,
)

_PARTICLES = {"de", "la", "le", "les", "du", "des", "di", "del", "della", "da",
              "von", "van", "y", "et", "e", "&", "and"}

_STRONG_TERMS_RE = re.compile(
    rf"(?<![{_L}])(?:{_PRODUCER_TOKENS}|contr[ôo]l[ée]e|denominazione)(?![{_L}])|와인|년산",
    re.IGNORECASE,
)


def _term_regex(term: str) -> str:
    escaped = re.escape(term)
    if re.search(rf"[{_L}]", term):
        return rf"(?<![{_L}]){escaped}(?![{_L}])"
    return escaped


def _alternation(terms) -> re.Pattern[str]:
    ordered = sorted(terms, key=len, reverse=True)
    return re.compile("|".join(_term_regex(t) for t in ordered), re.IGNORECASE)


_REGION_RE = _alternation(REGIONS)
_COUNTRY_RE = _alternation(COUNTRIES)
_VARIETY_RE = _alternation(VARIETIES)
_CLASSIFICATION_RULES = [re.compile(_term_regex(c), re.IGNORECASE) for c in CLASSIFICATIONS]


def _clean_name(value: str) -> str:
    value = re.sub(r"(?<!\d)\d{4}(?!\d)", "", value)
    value = re.sub(r"\s+", " ", value)
    return value.strip(" ,;:-")


class WineLabelParser:
    """Extracts a :class:`WineLabelRecord` from wine label OCR text.

    Args:
        config: Range limits for vintage and alcohol. Defaults when ``None``.
    """

    def __init__(self, config: ParsingConfig | None = None) -> None:
        self.config = config or ParsingConfig()

    def parse(self, text: str) -> WineLabelRecord:
        """Parse label text. Returns an empty record for non-wine input.

        Args:
            text: Raw OCR text from a wine label.

        Returns:
            The fields that could be recognized.
        """
        if not text or not text.strip():
            return WineLabelRecord()

        lines = [line.strip() for line in text.splitlines() if line.strip()]

        record = WineLabelRecord(
            vintage=extract_vintage(
                text, self.config.min_vintage, self.config.vintage_upper_bound()
            ),
            region=self.extract_region(text),
            appellation=self.extract_appellation(lines),
            variety=self.extract_variety(text),
            alcohol=extract_alcohol(text, self.config.max_alcohol),
            volume=extract_volume(text),
            classification=self.extract_classification(text),
        )

        if record.is_empty() and not _STRONG_TERMS_RE.search(text):
            logger.debug("No wine indicators found in %d lines", len(lines))
            return WineLabelRecord()

        record.name = self.extract_name(lines)
        record.producer = self.extract_producer(lines, record.name)

        logger.info(
            "Parsed wine label with %d fields", len(record.to_dict())
        )
        return record

    def extract_name(self, lines: list[str]) -> str | None:
        """Pick the primary identifier: a winery-style line, else the first
        line not claimed by another field."""
        for line in lines:
            match = _PRESTIGE_RE.search(line)
            if match:
                name = _clean_name(match.group(0))
                if len(name) > 3:
                    return name

        for line in lines:
            if not self._is_claimed(line):
                return line
        return None

    def extract_producer(self, lines: list[str], name: str | None) -> str | None:
        """Find the producer from winery tokens, "produced by" phrases, or a
        proper-noun line other than the name line."""
        for line in lines:
            match = _PRODUCED_BY_RE.search(line)
            if match:
                producer = _clean_name(match.group(1))
                if producer:
                    return producer

        for line in lines:
            if _PRESTIGE_RE.search(line):
                producer = _clean_name(line)
                if len(producer) > 3:
                    return producer

        for line in lines:
            if line == name or self._is_claimed(line):
                continue
            if _looks_like_proper_noun(line):
                return line
        return None

    def extract_region(self, text: str) -> str | None:
        """Return the earliest wine region in the text, else a country."""
        for pattern in (_REGION_RE, _COUNTRY_RE):
            match = pattern.search(text)
            if match:
                return match.group(0)
        return None

    def extract_appellation(self, lines: list[str]) -> str | None:
        for rule in _APPELLATION_RULES:
            for line in lines:
                match = rule.search(line)
                if not match:
                    continue
                value = match.group(1).strip(" ,;:-")
                if re.fullmatch(r"d'\s*origine|contr[ôo]l[ée]e", value, re.IGNORECASE):
                    continue
                if re.search(rf"[{_L}]", value, re.IGNORECASE):
                    return value
        return None

    def extract_variety(self, text: str) -> str | None:
        """Return every grape variety named, in order of appearance."""
        found: list[str] = []
        for match in _VARIETY_RE.finditer(text):
            raw = match.group(0)
            english = VARIETIES.get(raw.lower()) or VARIETIES.get(raw)
            value = english or raw
            if value.lower() not in (f.lower() for f in found):
                found.append(value)
        return ", ".join(found) if found else None

    def extract_classification(self, text: str) -> str | None:
        for rule in _CLASSIFICATION_RULES:
            match = rule.search(text)
            if match:
                return match.group(0)
        return None

    def _is_claimed(self, line: str) -> bool:
        """True for lines that belong to a non-name field or are too short."""
        if len(line) < 3:
            return True
        if _VINTAGE_LINE_RE.fullmatch(line):
            return True
        if _APPELLATION_LINE_RE.search(line):
            return True
        if extract_volume(line) or extract_alcohol(line, self.config.max_alcohol):
            return True
        remainder = line
        for pattern in (_REGION_RE, _COUNTRY_RE, _VARIETY_RE):
            remainder = pattern.sub(" ", remainder)
        for rule in _CLASSIFICATION_RULES:
            remainder = rule.sub(" ", remainder)
        remainder = re.sub(r"\b(?:and|et|e|y)\b|[,&/\-]", " ", remainder)
        return not re.search(r"[^\W\d_]", remainder)


def _looks_like_proper_noun(line: str) -> bool:
    if re.search(r"\d", line) or _GENERIC_LINE_RE.search(line):
        return False
    words = line.split()
    if not 2 <= len(words) <= 5:
        return False
    for word in words:
        if word.lower() in _PARTICLES:
            continue
        if not word[0].isalpha() or not word[0].isupper():
            return False
    return True


def parse_wine_label(text: str, config: ParsingConfig | None = None) -> WineLabelRecord:
    """Parse wine label OCR text into a :class:`WineLabelRecord`."""
    return WineLabelParser(config).parse(text)
