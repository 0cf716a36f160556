"""Document parsing pipeline.

bytes -> text -> classification -> typed extraction -> patch document.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from grantflow.schemas.extraction import (
    UNKNOWN_DOCUMENT_TYPE,
    ClassificationResult,
    ExtractionResult,
)
from grantflow.schemas.patches import PatchDocument
from grantflow.services.parser.classifier import classify_document
from grantflow.services.parser.constants import DRIVERS_LICENSE, SCHOLARSHIP_LETTER
from grantflow.services.parser.extract import (
    extract_drivers_license,
    extract_general,
    extract_scholarship_letter,
)
from grantflow.services.parser.patch_builder import build_patches
from grantflow.services.parser.text import extract_text
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

EXTRACTORS = {
    DRIVERS_LICENSE: extract_drivers_license,
    SCHOLARSHIP_LETTER: extract_scholarship_letter,
}


class ParseResult(BaseModel):
    """Outcome of one parse cycle. ``error`` is set when the pipeline halted."""

    text: str = ""
    doc_type: str = UNKNOWN_DOCUMENT_TYPE
    classification: Optional[ClassificationResult] = None
    extracted: Optional[ExtractionResult] = None
    patches: PatchDocument = Field(default_factory=PatchDocument)
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_fields(text: str, doc_type: str) -> ExtractionResult:
    """Run the extractor registered for a document type, or the generic one."""
    extractor = EXTRACTORS.get(doc_type, extract_general)
    return extractor(text)


async def parse_document(
    content: bytes,
    mime_type: str,
    filename: Optional[str] = None,
) -> ParseResult:
    """Parse raw document bytes into an extraction and a suggested patch.

    Never raises. Unsupported formats, extractor failures and unexpected
    errors are reported through ``ParseResult.error``.

    Args:
        content: Raw file bytes
        mime_type: MIME type of the file
        filename: Original filename, used for logging only

    Returns:
        ParseResult for the document
    """
    log_extra = {"document_filename": filename, "mime_type": mime_type}

    try:
        text_result = await extract_text(content, mime_type)
        if not text_result.ok:
            return ParseResult(error=text_result.error, metadata=text_result.metadata)

        text = text_result.text
        classification = classify_document(text)
        extracted = extract_fields(text, classification.type)
        patches = build_patches(extracted, classification.type)

        LOGGER.info(
            "Document parsed",
            extra={
                **log_extra,
                "doc_type": classification.type,
                "confidence": classification.confidence,
                "profile_fields": len(patches.profile.set),
                "funding_sources": len(patches.funding_sources),
            },
        )

        return ParseResult(
            text=text,
            doc_type=classification.type,
            classification=classification,
            extracted=extracted,
            patches=patches,
            metadata=text_result.metadata,
        )

    except Exception as e:
        LOGGER.error(
            f"Document parsing failed: {e}",
            exc_info=True,
            extra={**log_extra, "error_type": type(e).__name__},
        )
        return ParseResult(error=f"Parsing failed: {e}")
