"""Field extractors: common regex primitives and per-document-type extractors."""

from grantflow.services.parser.extract.drivers_license import extract_drivers_license
from grantflow.services.parser.extract.general import extract_general
from grantflow.services.parser.extract.scholarship_letter import extract_scholarship_letter

__all__ = [
    "extract_drivers_license",
    "extract_general",
    "extract_scholarship_letter",
]
