"""Common extraction utilities.

Pure regex/heuristic primitives shared by the document-specific extractors.
Each function scans a text and returns typed matches carrying the character
offset of the match and a fixed confidence for its pattern family.
"""

import re
from datetime import date
from typing import Dict, Iterable, List, Optional, TypeVar

from grantflow.schemas.extraction import (
    AddressMatch,
    DateMatch,
    EmailMatch,
    NameMatch,
    PhoneMatch,
    StateMatch,
    ZipMatch,
)
from grantflow.services.parser.constants import (
    ADDRESS_CONFIDENCE,
    DATE_CONFIDENCE,
    EMAIL_CONFIDENCE,
    NAME_CONFIDENCE,
    PHONE_CONFIDENCE,
    STATE_CONFIDENCE,
    US_STATES,
    ZIP_CONFIDENCE,
)

MatchT = TypeVar("MatchT")

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sept", "Sep", "Oct", "Nov", "Dec",
)

# Full month names and their abbreviations only
MONTH_NUMBERS: Dict[str, int] = {name.lower(): i for i, name in enumerate(_MONTHS, start=1)}
MONTH_NUMBERS.update({name[:3].lower(): i for i, name in enumerate(_MONTHS, start=1)})
MONTH_NUMBERS["sept"] = 9

DATE_PATTERNS: Dict[str, re.Pattern] = {
    # MM/DD/YYYY or MM-DD-YYYY
    "slash_or_dash": re.compile(r"\b(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})\b"),
    # YYYY-MM-DD
    "iso": re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b"),
    # January 5, 2024
    "month_day_year": re.compile(
        r"\b(" + "|".join(_MONTHS) + r")\s+(\d{1,2}),?\s+(\d{4})\b",
        re.IGNORECASE,
    ),
    # Jan. 5 2024 / Sept 5, 2024
    "abbreviated_month": re.compile(
        r"\b(" + "|".join(_MONTH_ABBREVIATIONS) + r")\b\.?\s+(\d{1,2}),?\s+(\d{4})\b",
        re.IGNORECASE,
    ),
}

PHONE_PATTERNS: Dict[str, re.Pattern] = {
    "standard": re.compile(r"\b(\d{3})[-.\s]?(\d{3})[-.\s]?(\d{4})\b"),
    "with_parens": re.compile(r"\((\d{3})\)\s*(\d{3})[-.\s]?(\d{4})\b"),
}

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

ZIP_PATTERN = re.compile(r"\b\d{5}(?:-\d{4})?\b")

STATE_PATTERN = re.compile(r"\b(" + "|".join(US_STATES) + r")\b")

# number + street ending in a US suffix + optional ", city" + state + zip, on one line
ADDRESS_PATTERN = re.compile(
    r"\b(\d+)[ \t]+"
    r"([A-Za-z0-9 \t]+(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Court|Ct|Boulevard|Blvd|Way|Place|Pl)\.?)"
    r"[ \t]*(?:,[ \t]*([A-Za-z \t]+))?"
    r"[ \t]*,?[ \t]*([A-Z]{2})[ \t]+(\d{5}(?:-\d{4})?)\b",
    re.IGNORECASE,
)

NAME_PATTERN = re.compile(r"\b([A-Z][a-z]+)(?:\s+([A-Z])\.?)?\s+([A-Z][a-z]+)\b")

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_SLASH_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
_MONTH_NAME_DATE = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})$")

_WHITESPACE = re.compile(r"\s+")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E]")


def _iso_or_none(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_date(date_str: Optional[str]) -> Optional[str]:
    """Parse a date string to ISO format (YYYY-MM-DD).

    Tries an ISO match, then MM/DD/YYYY (or dashes), then a month-name form.
    Calendar-invalid dates (e.g. 02/30/2024) are rejected.

    Args:
        date_str: Raw date text

    Returns:
        ISO date string, or None if the text cannot be parsed
    """
    if not date_str:
        return None
    date_str = date_str.strip()

    match = _ISO_DATE.match(date_str)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _iso_or_none(year, month, day)

    match = _SLASH_DATE.match(date_str)
    if match:
        month, day, year = (int(part) for part in match.groups())
        return _iso_or_none(year, month, day)

    match = _MONTH_NAME_DATE.match(date_str)
    if match:
        month_name, day, year = match.groups()
        month = MONTH_NUMBERS.get(month_name.lower())
        if month is None:
            return None
        return _iso_or_none(int(year), month, int(day))

    return None


def _unique_by_offset(matches: Iterable[MatchT]) -> List[MatchT]:
    """Drop matches that start where an earlier one did, then order by offset."""
    seen = set()
    unique = []
    for match in matches:
        if match.start in seen:
            continue
        seen.add(match.start)
        unique.append(match)
    return sorted(unique, key=lambda m: m.start)


def extract_dates(text: str) -> List[DateMatch]:
    """Extract all parseable dates from text.

    Args:
        text: Text to scan

    Returns:
        Date matches in document order, each with its ISO form
    """
    dates = []
    for pattern_name, pattern in DATE_PATTERNS.items():
        for match in pattern.finditer(text):
            parsed = parse_date(match.group(0))
            if parsed:
                dates.append(
                    DateMatch(
                        raw=match.group(0),
                        iso=parsed,
                        pattern=pattern_name,
                        start=match.start(),
                        confidence=DATE_CONFIDENCE,
                    )
                )
    return _unique_by_offset(dates)


def extract_phones(text: str) -> List[PhoneMatch]:
    """Extract 10-digit US phone numbers formatted as DDD-DDD-DDDD."""
    phones = []
    for pattern_name, pattern in PHONE_PATTERNS.items():
        for match in pattern.finditer(text):
            digits = re.sub(r"\D", "", match.group(0))
            if len(digits) != 10:
                continue
            phones.append(
                PhoneMatch(
                    raw=match.group(0),
                    formatted=f"{digits[:3]}-{digits[3:6]}-{digits[6:]}",
                    pattern=pattern_name,
                    start=match.start(),
                    confidence=PHONE_CONFIDENCE,
                )
            )
    return _unique_by_offset(phones)


def extract_emails(text: str) -> List[EmailMatch]:
    return [
        EmailMatch(
            raw=match.group(0),
            normalized=match.group(0).lower(),
            start=match.start(),
            confidence=EMAIL_CONFIDENCE,
        )
        for match in EMAIL_PATTERN.finditer(text)
    ]


def extract_zip_codes(text: str) -> List[ZipMatch]:
    return [
        ZipMatch(raw=match.group(0), start=match.start(), confidence=ZIP_CONFIDENCE)
        for match in ZIP_PATTERN.finditer(text)
    ]


def extract_states(text: str) -> List[StateMatch]:
    """Extract standalone two-letter USPS state codes.

    Common words that collide with codes ("OR", "IN", "ME") are not
    disambiguated.
    """
    return [
        StateMatch(raw=match.group(0), start=match.start(), confidence=STATE_CONFIDENCE)
        for match in STATE_PATTERN.finditer(text)
    ]


def extract_addresses(text: str) -> List[AddressMatch]:
    """Extract US street addresses like "123 Main St, Springfield, IL 62701".

    Only the suffixes in ``ADDRESS_PATTERN`` are recognized; addresses using
    other street vocabularies are not matched.
    """
    addresses = []
    for match in ADDRESS_PATTERN.finditer(text):
        number, street, city, state, zip_code = match.groups()
        addresses.append(
            AddressMatch(
                raw=match.group(0),
                number=number,
                street=_WHITESPACE.sub(" ", street).strip(),
                city=_WHITESPACE.sub(" ", city).strip() if city else "",
                state=state.upper(),
                zip=zip_code,
                start=match.start(),
                confidence=ADDRESS_CONFIDENCE,
            )
        )
    return addresses


def extract_name_patterns(text: str) -> List[NameMatch]:
    """Extract "First [M.] Last" capitalization patterns.

    This is pure capitalization matching, hence the lowest confidence bucket.
    """
    names = []
    for match in NAME_PATTERN.finditer(text):
        first, middle, last = match.groups()
        names.append(
            NameMatch(
                raw=match.group(0),
                first=first,
                middle=middle or "",
                last=last,
                start=match.start(),
                confidence=NAME_CONFIDENCE,
            )
        )
    return names


def calculate_confidence(
    text: str,
    keywords: Dict[str, float],
    weights: Optional[Dict[str, float]] = None,
) -> float:
    """Score text by the weighted share of keywords it contains.

    Matching is a case-insensitive substring test. The score is the sum of
    weights of present keywords over the sum of all weights.

    Args:
        text: Text to score
        keywords: Keyword to weight mapping
        weights: Optional per-keyword weight overrides

    Returns:
        Score in [0, 1]; 0 for an empty keyword map
    """
    weights = weights or {}
    normalized_text = text.lower()
    score = 0.0
    max_score = 0.0

    for keyword, weight in keywords.items():
        keyword_weight = weights.get(keyword) or weight
        max_score += keyword_weight
        if keyword.lower() in normalized_text:
            score += keyword_weight

    return min(score / max_score, 1.0) if max_score > 0 else 0.0


def normalize_text(text: str) -> str:
    """Collapse whitespace, drop non-printable characters and trim."""
    text = _WHITESPACE.sub(" ", text)
    text = _NON_PRINTABLE.sub("", text)
    return text.strip()


def split_lines(text: str) -> List[str]:
    """Split raw text into normalized, non-empty lines."""
    lines = (normalize_text(line) for line in text.splitlines())
    return [line for line in lines if line]
