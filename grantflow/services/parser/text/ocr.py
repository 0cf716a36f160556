"""Image OCR with pytesseract and Pillow."""

import asyncio
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from grantflow.core.config import settings
from grantflow.core.exceptions import TextExtractionError
from grantflow.schemas.extraction import TextExtractionResult
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _run_ocr(content: bytes, language: str) -> TextExtractionResult:
    """Run tesseract and rebuild line breaks from its word boxes."""
    with Image.open(BytesIO(content)) as image:
        data = pytesseract.image_to_data(
            image,
            lang=language,
            output_type=pytesseract.Output.DICT,
        )

    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confidences = []
    for i, word in enumerate(data["text"]):
        word = word.strip()
        conf = float(data["conf"][i])
        # -1 marks layout boxes without text
        if not word or conf < 0:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(words) for words in lines.values())
    avg_confidence = sum(confidences) / len(confidences) if confidences else 0.0

    return TextExtractionResult(
        text=text,
        # tesseract reports 0-100
        metadata={"confidence": round(avg_confidence / 100.0, 4), "words": len(confidences)},
    )


async def extract_image_text(
    content: bytes,
    language: Optional[str] = None,
    timeout: Optional[float] = None,
) -> TextExtractionResult:
    """OCR an image.

    Args:
        content: Raw image bytes (JPEG or PNG)
        language: Tesseract language code, defaults to the configured one
        timeout: Seconds before giving up, defaults to the configured one

    Returns:
        TextExtractionResult with the recognized text and an average
        word confidence in ``metadata["confidence"]``

    Raises:
        TextExtractionError: If OCR fails or exceeds the timeout
    """
    language = language or settings.parser.ocr_language
    timeout = timeout or settings.parser.ocr_timeout

    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_run_ocr, content, language),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        LOGGER.error(
            "OCR timed out",
            extra={"timeout_seconds": timeout, "size_bytes": len(content)},
        )
        raise TextExtractionError(f"OCR timed out after {timeout} seconds", original_error=e)
    except Exception as e:
        LOGGER.error(
            "OCR failed",
            exc_info=True,
            extra={"size_bytes": len(content), "error_type": type(e).__name__},
        )
        raise TextExtractionError(f"OCR failed: {e}", original_error=e)
