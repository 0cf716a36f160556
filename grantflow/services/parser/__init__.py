"""Document parsing: text extraction, classification, field extraction and patch building."""

from grantflow.services.parser.classifier import classify_document
from grantflow.services.parser.document_parser import ParseResult, parse_document
from grantflow.services.parser.patch_builder import build_patches
from grantflow.services.parser.text import extract_text

__all__ = [
    "ParseResult",
    "build_patches",
    "classify_document",
    "extract_text",
    "parse_document",
]
