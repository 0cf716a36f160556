"""Tests for per-format text extraction."""

import time
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
from docx import Document
from PIL import Image

from grantflow.core.exceptions import TextExtractionError, UnsupportedFormatError
from grantflow.services.parser.text import extract_text, get_text_extractor
from grantflow.services.parser.text.ocr import extract_image_text

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (20, 20), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


def _tesseract_data(words):
    """Shape of pytesseract.image_to_data(..., output_type=DICT)."""
    return {
        "text": [word for word, _, _ in words],
        "conf": [conf for _, conf, _ in words],
        "block_num": [1] * len(words),
        "par_num": [1] * len(words),
        "line_num": [line for _, _, line in words],
    }


@pytest.mark.asyncio
async def test_plain_text_replaces_invalid_bytes():
    result = await extract_text(b"Award letter \xff\xfe", "text/plain")

    assert result.ok
    assert result.text.startswith("Award letter ")
    assert "�" in result.text


@pytest.mark.asyncio
async def test_unsupported_mime_type():
    result = await extract_text(b"data", "application/zip")

    assert result.error == "Unsupported file type: application/zip"
    assert result.text == ""


def test_image_types_share_the_ocr_extractor():
    assert get_text_extractor("image/png") is extract_image_text
    assert get_text_extractor("image/jpeg") is extract_image_text
    assert get_text_extractor("text/plain; charset=utf-8") is not None

    with pytest.raises(UnsupportedFormatError):
        get_text_extractor("application/zip")


@pytest.mark.asyncio
async def test_docx_paragraphs_become_lines():
    document = Document()
    document.add_paragraph("Example Scholarship Foundation")
    document.add_paragraph("Dear Jane,")
    buffer = BytesIO()
    document.save(buffer)

    result = await extract_text(buffer.getvalue(), DOCX)

    assert result.ok
    assert result.text.splitlines() == ["Example Scholarship Foundation", "Dear Jane,"]
    assert result.metadata["paragraphs"] == 2


@pytest.mark.asyncio
async def test_corrupt_docx_returns_error():
    result = await extract_text(b"not a zip archive", DOCX)

    assert not result.ok
    assert result.text == ""
    assert result.error.startswith("DOCX extraction failed")


@pytest.mark.asyncio
async def test_pdf_pages_joined_by_newlines():
    pages = [MagicMock(), MagicMock()]
    pages[0].extract_text.return_value = "DRIVER LICENSE"
    pages[1].extract_text.return_value = None
    pdf = MagicMock()
    pdf.pages = pages
    pdf.__enter__.return_value = pdf

    with patch("grantflow.services.parser.text.pdf.pdfplumber.open", return_value=pdf):
        result = await extract_text(b"%PDF-1.4", "application/pdf")

    assert result.ok
    assert result.text == "DRIVER LICENSE\n"
    assert result.metadata["pages"] == 2


@pytest.mark.asyncio
async def test_corrupt_pdf_returns_error():
    result = await extract_text(b"definitely not a pdf", "application/pdf")

    assert not result.ok
    assert result.error.startswith("PDF extraction failed")


@pytest.mark.asyncio
async def test_ocr_rebuilds_lines_and_confidence():
    data = _tesseract_data(
        [
            ("", -1, 0),
            ("DRIVER", 90, 1),
            ("LICENSE", 80, 1),
            ("DOB", 70, 2),
        ]
    )

    with patch("grantflow.services.parser.text.ocr.pytesseract.image_to_data", return_value=data):
        result = await extract_text(_png_bytes(), "image/png")

    assert result.ok
    assert result.text == "DRIVER LICENSE\nDOB"
    assert result.metadata["confidence"] == pytest.approx(0.8)
    assert result.metadata["words"] == 3


@pytest.mark.asyncio
async def test_ocr_timeout_is_an_error():
    def slow_ocr(content, language):
        time.sleep(0.5)

    with patch("grantflow.services.parser.text.ocr._run_ocr", side_effect=slow_ocr):
        with pytest.raises(TextExtractionError, match="timed out"):
            await extract_image_text(_png_bytes(), timeout=0.05)


@pytest.mark.asyncio
async def test_ocr_failure_is_an_error():
    with patch(
        "grantflow.services.parser.text.ocr.pytesseract.image_to_data",
        side_effect=RuntimeError("tesseract is not installed"),
    ):
        result = await extract_text(_png_bytes(), "image/jpeg")

    assert not result.ok
    assert result.text == ""
    assert "tesseract is not installed" in result.error
