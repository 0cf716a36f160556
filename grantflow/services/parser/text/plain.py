"""Plain text passthrough."""

from grantflow.schemas.extraction import TextExtractionResult


async def extract_plain_text(content: bytes) -> TextExtractionResult:
    return TextExtractionResult(
        text=content.decode("utf-8", errors="replace"),
        metadata={"encoding": "utf-8"},
    )
