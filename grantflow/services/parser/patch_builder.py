"""Map type-specific extraction results onto patch documents."""

from typing import Dict, Optional

from pydantic import BaseModel

from grantflow.schemas.extraction import ExtractedField
from grantflow.schemas.patches import FundingSourcePatch, PatchDocument, ProfilePatch, UpsertKey
from grantflow.services.parser.constants import DRIVERS_LICENSE, SCHOLARSHIP_LETTER

PROFILE_FIELDS = ("full_name", "dob", "address_line1", "city", "state", "zip")
FUNDING_SOURCE_FIELDS = ("contact_email", "contact_phone", "address", "award_amount")


def _present_fields(extracted: BaseModel, names) -> Dict[str, ExtractedField]:
    fields = {}
    for name in names:
        field = getattr(extracted, name, None)
        if field is None:
            continue
        # Re-validate as a plain field so subclass attributes survive as extras
        fields[name] = ExtractedField.model_validate(field.model_dump())
    return fields


def build_patches(extracted: Optional[BaseModel], doc_type: str) -> PatchDocument:
    """Build the patch document proposed by one extraction.

    Args:
        extracted: Extraction result for the document
        doc_type: Classified document type

    Returns:
        PatchDocument; empty for unknown types or missing data
    """
    if extracted is None:
        return PatchDocument()

    if doc_type == DRIVERS_LICENSE:
        return PatchDocument(profile=ProfilePatch(set=_present_fields(extracted, PROFILE_FIELDS)))

    if doc_type == SCHOLARSHIP_LETTER:
        name_field = getattr(extracted, "funding_source_name", None)
        name = str(name_field.value).strip() if name_field and name_field.value else ""
        if not name:
            return PatchDocument()
        return PatchDocument(
            funding_sources=[
                FundingSourcePatch(
                    upsert_by=UpsertKey(name=name),
                    set=_present_fields(extracted, FUNDING_SOURCE_FIELDS),
                )
            ]
        )

    return PatchDocument()
