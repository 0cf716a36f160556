"""Driver's license field extraction.

The license number itself is never read or stored.
"""

from typing import List, Optional, Sequence

from grantflow.schemas.extraction import DateMatch, DriversLicenseExtraction, ExtractedField
from grantflow.services.parser.constants import (
    DATE_CONTEXT_WINDOW,
    DOB_FALLBACK_CONFIDENCE,
    DOB_LABELED_CONFIDENCE,
    DOB_LABELS,
    EXPIRATION_CONFIDENCE,
    EXPIRATION_LABELS,
    NAME_FALLBACK_CONFIDENCE,
    NAME_HEADER_CONFIDENCE,
    NAME_HEADER_LINES,
)
from grantflow.services.parser.extract.common import (
    extract_addresses,
    extract_dates,
    extract_name_patterns,
    extract_states,
    extract_zip_codes,
    split_lines,
)


def _date_context(text: str, date: DateMatch) -> str:
    start = max(0, date.start - DATE_CONTEXT_WINDOW)
    return text[start:date.start + DATE_CONTEXT_WINDOW].lower()


def _first_labeled(text: str, dates: List[DateMatch], labels: Sequence[str]) -> Optional[DateMatch]:
    for date in dates:
        context = _date_context(text, date)
        if any(label in context for label in labels):
            return date
    return None


def extract_drivers_license(text: str) -> DriversLicenseExtraction:
    """Extract identity fields from driver's license text.

    Args:
        text: Raw document text

    Returns:
        DriversLicenseExtraction with the fields that were found
    """
    lines = split_lines(text)
    extracted = DriversLicenseExtraction()

    # Dates are tagged by the labels printed near them
    dates = extract_dates(text)
    if dates:
        dob = _first_labeled(text, dates, DOB_LABELS)
        if dob:
            extracted.dob = ExtractedField(value=dob.iso, confidence=DOB_LABELED_CONFIDENCE)

        expiration = _first_labeled(text, dates, EXPIRATION_LABELS)
        if expiration:
            extracted.expiration_date = ExtractedField(
                value=expiration.iso, confidence=EXPIRATION_CONFIDENCE
            )

        if extracted.dob is None:
            extracted.dob = ExtractedField(value=dates[0].iso, confidence=DOB_FALLBACK_CONFIDENCE)

    # Names printed in the header block are more trustworthy
    names = extract_name_patterns(text)
    if names:
        top_names = extract_name_patterns(" ".join(lines[:NAME_HEADER_LINES]))
        if top_names:
            extracted.full_name = ExtractedField(
                value=top_names[0].raw, confidence=NAME_HEADER_CONFIDENCE
            )
        else:
            extracted.full_name = ExtractedField(
                value=names[0].raw, confidence=NAME_FALLBACK_CONFIDENCE
            )

    addresses = extract_addresses(text)
    if addresses:
        address = addresses[0]
        extracted.address_line1 = ExtractedField(value=address.line1, confidence=address.confidence)
        if address.city:
            extracted.city = ExtractedField(value=address.city, confidence=address.confidence)
        extracted.state = ExtractedField(value=address.state, confidence=address.confidence)
        extracted.zip = ExtractedField(value=address.zip, confidence=address.confidence)
    else:
        states = extract_states(text)
        if states:
            extracted.state = ExtractedField(value=states[0].raw, confidence=states[0].confidence)

        zip_codes = extract_zip_codes(text)
        if zip_codes:
            extracted.zip = ExtractedField(value=zip_codes[0].raw, confidence=zip_codes[0].confidence)

    return extracted
