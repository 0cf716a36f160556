"""Generic extraction for documents of unknown type."""

from grantflow.schemas.extraction import ExtractedField, GeneralExtraction
from grantflow.services.parser.constants import SUMMARY_CONFIDENCE, TEXT_PREVIEW_LENGTH
from grantflow.services.parser.extract.common import (
    extract_addresses,
    extract_dates,
    extract_emails,
    extract_name_patterns,
    extract_phones,
    normalize_text,
)


def extract_general(text: str) -> GeneralExtraction:
    """Run every common extractor and summarize what was found."""
    dates = extract_dates(text)
    emails = extract_emails(text)
    phones = extract_phones(text)
    addresses = extract_addresses(text)
    names = extract_name_patterns(text)

    counts = [
        (len(dates), "date(s)"),
        (len(emails), "email(s)"),
        (len(phones), "phone(s)"),
        (len(addresses), "address(es)"),
        (len(names), "name(s)"),
    ]
    found = [f"{count} {label}" for count, label in counts if count]
    summary = (
        f"Document contains: {', '.join(found)}" if found else "Document parsed successfully"
    )

    normalized = normalize_text(text)
    preview = normalized[:TEXT_PREVIEW_LENGTH]
    if len(normalized) > TEXT_PREVIEW_LENGTH:
        preview += "..."

    return GeneralExtraction(
        summary=ExtractedField(value=summary, confidence=SUMMARY_CONFIDENCE),
        dates=dates,
        emails=emails,
        phones=phones,
        addresses=addresses,
        names=names,
        text_preview=ExtractedField(value=preview, confidence=SUMMARY_CONFIDENCE),
    )
