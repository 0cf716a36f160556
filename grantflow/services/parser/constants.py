"""Parser constants and configuration.

Keyword weights, thresholds and fixed confidences used by the classifier and
the field extractors. Confidences are hand-tuned per pattern family, not
learned, so every score in a parse result traces back to a value here.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

DRIVERS_LICENSE = "drivers_license"
SCHOLARSHIP_LETTER = "scholarship_letter"

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class DocumentTypeConfig:
    """Keyword dictionary and acceptance threshold for one document type."""

    type_id: str
    keywords: Dict[str, float] = field(default_factory=dict)
    min_confidence: float = 0.0


# Priority order: on equal scores the earlier entry wins
DOCUMENT_TYPES: Tuple[DocumentTypeConfig, ...] = (
    DocumentTypeConfig(
        type_id=DRIVERS_LICENSE,
        keywords={
            "driver": 3,
            "license": 3,
            "licence": 3,
            "dl": 2,
            "dob": 2,
            "date of birth": 2,
            "exp": 2,
            "expires": 2,
            "iss": 1,
            "issued": 1,
            "class": 1,
            "restrictions": 1,
            "endorsements": 1,
        },
        min_confidence=0.4,
    ),
    DocumentTypeConfig(
        type_id=SCHOLARSHIP_LETTER,
        keywords={
            "scholarship": 4,
            "award": 3,
            "recipient": 3,
            "congratulations": 2,
            "pleased to inform": 2,
            "grant": 2,
            "financial aid": 2,
            "tuition": 2,
            "academic": 1,
            "university": 1,
            "college": 1,
            "foundation": 1,
        },
        # Scholarship vocabulary varies more between senders
        min_confidence=0.3,
    ),
)

US_STATES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

# Fixed confidences of the common extractors
DATE_CONFIDENCE = 0.85
PHONE_CONFIDENCE = 0.9
EMAIL_CONFIDENCE = 0.95
ZIP_CONFIDENCE = 0.85
STATE_CONFIDENCE = 0.8
ADDRESS_CONFIDENCE = 0.75
NAME_CONFIDENCE = 0.6

# Driver's license
DOB_LABELED_CONFIDENCE = 0.9
DOB_FALLBACK_CONFIDENCE = 0.7
EXPIRATION_CONFIDENCE = 0.85
NAME_HEADER_CONFIDENCE = 0.85
NAME_FALLBACK_CONFIDENCE = 0.7
DATE_CONTEXT_WINDOW = 50
NAME_HEADER_LINES = 10
DOB_LABELS = ("dob", "birth")
EXPIRATION_LABELS = ("exp", "expires")

# Scholarship letter
ORG_NAME_CONFIDENCE = 0.85
ORG_NAME_FALLBACK_CONFIDENCE = 0.6
ORG_NAME_SCAN_LINES = 5
ORG_NAME_FALLBACK_LINES = 3
AWARD_AMOUNT_CONFIDENCE = 0.75
ORG_KEYWORDS = (
    "foundation",
    "scholarship",
    "fund",
    "trust",
    "society",
    "association",
    "university",
    "college",
)

# Generic extraction
TEXT_PREVIEW_LENGTH = 500
SUMMARY_CONFIDENCE = 1.0
