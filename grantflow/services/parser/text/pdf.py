"""PDF text extraction with pdfplumber."""

import asyncio
from io import BytesIO

import pdfplumber

from grantflow.core.exceptions import TextExtractionError
from grantflow.schemas.extraction import TextExtractionResult
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _read_pdf(content: bytes) -> TextExtractionResult:
    with pdfplumber.open(BytesIO(content)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return TextExtractionResult(text="\n".join(pages), metadata={"pages": len(pages)})


async def extract_pdf_text(content: bytes) -> TextExtractionResult:
    """Extract the text of every page, joined by newlines.

    Raises:
        TextExtractionError: If the PDF cannot be read
    """
    try:
        return await asyncio.to_thread(_read_pdf, content)
    except Exception as e:
        LOGGER.error(
            "PDF text extraction failed",
            exc_info=True,
            extra={"size_bytes": len(content), "error_type": type(e).__name__},
        )
        raise TextExtractionError(f"PDF extraction failed: {e}", original_error=e)
