"""Pydantic schemas for text extraction, classification and field extraction.

Every extracted datum is wrapped in an ``ExtractedField`` carrying a fixed,
hand-tuned confidence. Absent data is ``None``, never a zero-confidence value.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_DOCUMENT_TYPE = "unknown"


class TextExtractionResult(BaseModel):
    """Output of a text extractor: plain text or an error."""

    text: str = ""
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


class ExtractedField(BaseModel):
    """A single extracted value with its confidence."""

    model_config = ConfigDict(extra="allow")

    value: Any = Field(..., description="Extracted value")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Pattern confidence")


class AddressParts(BaseModel):
    line1: str
    city: str = ""
    state: str
    zip: str


class AddressField(ExtractedField):
    """Address value with its structured components."""

    structured: AddressParts


class AmountField(ExtractedField):
    """Dollar amount with the raw text it was read from."""

    formatted: str


# ---------------------------------------------------------------------------
# Raw matches produced by the common extractors
# ---------------------------------------------------------------------------


class DateMatch(BaseModel):
    raw: str
    iso: str
    pattern: str
    start: int = Field(..., description="Character offset of the match")
    confidence: float


class PhoneMatch(BaseModel):
    raw: str
    formatted: str
    pattern: str
    start: int
    confidence: float


class EmailMatch(BaseModel):
    raw: str
    normalized: str
    start: int
    confidence: float


class ZipMatch(BaseModel):
    raw: str
    start: int
    confidence: float


class StateMatch(BaseModel):
    raw: str
    start: int
    confidence: float


class AddressMatch(BaseModel):
    raw: str
    number: str
    street: str
    city: str = ""
    state: str
    zip: str
    start: int
    confidence: float

    @property
    def line1(self) -> str:
        return f"{self.number} {self.street}"


class NameMatch(BaseModel):
    raw: str
    first: str
    middle: str = ""
    last: str
    start: int
    confidence: float


# ---------------------------------------------------------------------------
# Classification and per-type extraction results
# ---------------------------------------------------------------------------


class ClassificationResult(BaseModel):
    """Best document type for a text and the scores that qualified."""

    type: str = Field(default=UNKNOWN_DOCUMENT_TYPE, description="Document type id or 'unknown'")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Scores of the types that cleared their minimum confidence",
    )


class DriversLicenseExtraction(BaseModel):
    """Fields read from a driver's license. The license number is never captured."""

    full_name: Optional[ExtractedField] = None
    dob: Optional[ExtractedField] = None
    address_line1: Optional[ExtractedField] = None
    city: Optional[ExtractedField] = None
    state: Optional[ExtractedField] = None
    zip: Optional[ExtractedField] = None
    expiration_date: Optional[ExtractedField] = None


class ScholarshipLetterExtraction(BaseModel):
    """Funding source details read from a scholarship award letter."""

    funding_source_name: Optional[ExtractedField] = None
    contact_email: Optional[ExtractedField] = None
    contact_phone: Optional[ExtractedField] = None
    address: Optional[AddressField] = None
    award_amount: Optional[AmountField] = None


class GeneralExtraction(BaseModel):
    """Everything the common extractors found in an unclassified document."""

    summary: ExtractedField
    dates: List[DateMatch] = Field(default_factory=list)
    emails: List[EmailMatch] = Field(default_factory=list)
    phones: List[PhoneMatch] = Field(default_factory=list)
    addresses: List[AddressMatch] = Field(default_factory=list)
    names: List[NameMatch] = Field(default_factory=list)
    text_preview: ExtractedField


ExtractionResult = Union[DriversLicenseExtraction, ScholarshipLetterExtraction, GeneralExtraction]
