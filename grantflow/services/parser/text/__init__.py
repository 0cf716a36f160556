"""Per-format text extractors.

``extract_text`` dispatches raw bytes to the extractor registered for the
MIME type. Individual extractors raise ``PipelineError`` subclasses;
``extract_text`` turns those into ``TextExtractionResult.error`` with empty
text so callers never see an exception.
"""

from typing import Awaitable, Callable, Dict

from grantflow.core.exceptions import PipelineError, UnsupportedFormatError
from grantflow.schemas.extraction import TextExtractionResult
from grantflow.services.parser.constants import DOCX_MIME_TYPE, PDF_MIME_TYPE, TEXT_MIME_TYPE
from grantflow.services.parser.text.ocr import extract_image_text
from grantflow.services.parser.text.pdf import extract_pdf_text
from grantflow.services.parser.text.plain import extract_plain_text
from grantflow.services.parser.text.word import extract_docx_text
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

TextExtractor = Callable[[bytes], Awaitable[TextExtractionResult]]

TEXT_EXTRACTORS: Dict[str, TextExtractor] = {
    PDF_MIME_TYPE: extract_pdf_text,
    DOCX_MIME_TYPE: extract_docx_text,
    TEXT_MIME_TYPE: extract_plain_text,
}


def get_text_extractor(mime_type: str) -> TextExtractor:
    """Return the extractor for a MIME type.

    Raises:
        UnsupportedFormatError: If no extractor handles the type
    """
    base_type = (mime_type or "").split(";")[0].strip().lower()
    if base_type in TEXT_EXTRACTORS:
        return TEXT_EXTRACTORS[base_type]
    if base_type.startswith("image/"):
        return extract_image_text
    raise UnsupportedFormatError(f"Unsupported file type: {mime_type}")


async def extract_text(content: bytes, mime_type: str) -> TextExtractionResult:
    """Convert raw bytes to plain text.

    Args:
        content: Raw file bytes
        mime_type: MIME type reported for the file

    Returns:
        TextExtractionResult; ``error`` is set for unsupported types and
        extractor failures
    """
    try:
        extractor = get_text_extractor(mime_type)
        result = await extractor(content)
    except PipelineError as e:
        LOGGER.warning(
            f"Text extraction failed: {e}",
            extra={"mime_type": mime_type, "error_type": type(e).__name__},
        )
        return TextExtractionResult(error=str(e))

    LOGGER.info(
        "Text extracted",
        extra={"mime_type": mime_type, "characters": len(result.text)},
    )
    return result


__all__ = ["TEXT_EXTRACTORS", "extract_text", "get_text_extractor"]
