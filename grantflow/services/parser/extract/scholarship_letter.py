"""Scholarship / award letter field extraction."""

import re
from typing import List, Optional

from grantflow.schemas.extraction import (
    AddressField,
    AddressParts,
    AmountField,
    ExtractedField,
    ScholarshipLetterExtraction,
)
from grantflow.services.parser.constants import (
    AWARD_AMOUNT_CONFIDENCE,
    ORG_KEYWORDS,
    ORG_NAME_CONFIDENCE,
    ORG_NAME_FALLBACK_CONFIDENCE,
    ORG_NAME_FALLBACK_LINES,
    ORG_NAME_SCAN_LINES,
)
from grantflow.services.parser.extract.common import (
    extract_addresses,
    extract_emails,
    extract_phones,
    split_lines,
)

# $5,000 / $5000.00 / $ 1,250.50
AMOUNT_PATTERN = re.compile(r"\$\s*((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?)")

_STATE_CODE_LINE = re.compile(r"^[A-Z]{2}$")


def _looks_like_org_name(line: str) -> bool:
    if len(line) <= 10:
        return False
    if line.lower().startswith("dear"):
        return False
    if line.isdigit() or _STATE_CODE_LINE.match(line):
        return False
    lowered = line.lower()
    return any(keyword in lowered for keyword in ORG_KEYWORDS)


def _funding_source_name(lines: List[str]) -> Optional[ExtractedField]:
    for line in lines[:ORG_NAME_SCAN_LINES]:
        if _looks_like_org_name(line):
            return ExtractedField(value=line, confidence=ORG_NAME_CONFIDENCE)

    # Letterheads without an organization keyword
    for line in lines[:ORG_NAME_FALLBACK_LINES]:
        if 15 < len(line) < 100:
            return ExtractedField(value=line, confidence=ORG_NAME_FALLBACK_CONFIDENCE)

    return None


def _award_amount(text: str) -> Optional[AmountField]:
    """Largest positive dollar amount in the letter."""
    best_value = 0.0
    best_raw = None
    for match in AMOUNT_PATTERN.finditer(text):
        value = float(match.group(1).replace(",", ""))
        if value > best_value:
            best_value = value
            best_raw = match.group(0)

    if best_raw is None:
        return None
    return AmountField(value=best_value, confidence=AWARD_AMOUNT_CONFIDENCE, formatted=best_raw)


def extract_scholarship_letter(text: str) -> ScholarshipLetterExtraction:
    """Extract funding source details from an award letter.

    Args:
        text: Raw document text

    Returns:
        ScholarshipLetterExtraction with the fields that were found
    """
    lines = split_lines(text)
    extracted = ScholarshipLetterExtraction(funding_source_name=_funding_source_name(lines))

    emails = extract_emails(text)
    if emails:
        extracted.contact_email = ExtractedField(
            value=emails[0].normalized, confidence=emails[0].confidence
        )

    phones = extract_phones(text)
    if phones:
        extracted.contact_phone = ExtractedField(
            value=phones[0].formatted, confidence=phones[0].confidence
        )

    addresses = extract_addresses(text)
    if addresses:
        address = addresses[0]
        extracted.address = AddressField(
            value=address.raw,
            confidence=address.confidence,
            structured=AddressParts(
                line1=address.line1,
                city=address.city,
                state=address.state,
                zip=address.zip,
            ),
        )

    extracted.award_amount = _award_amount(text)

    return extracted
