"""DOCX text extraction with python-docx."""

import asyncio
from io import BytesIO

from docx import Document

from grantflow.core.exceptions import TextExtractionError
from grantflow.schemas.extraction import TextExtractionResult
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _read_docx(content: bytes) -> TextExtractionResult:
    document = Document(BytesIO(content))
    paragraphs = [paragraph.text for paragraph in document.paragraphs]
    return TextExtractionResult(
        text="\n".join(paragraphs),
        metadata={"paragraphs": len(paragraphs)},
    )


async def extract_docx_text(content: bytes) -> TextExtractionResult:
    """Extract paragraph text, one paragraph per line."""
    try:
        return await asyncio.to_thread(_read_docx, content)
    except Exception as e:
        LOGGER.error(
            "DOCX text extraction failed",
            exc_info=True,
            extra={"size_bytes": len(content), "error_type": type(e).__name__},
        )
        raise TextExtractionError(f"DOCX extraction failed: {e}", original_error=e)
