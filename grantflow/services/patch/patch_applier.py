"""Confidence-gated application of patch documents to stored records."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.core.config import settings
from grantflow.core.exceptions import ConfigurationError, DatabaseError, ProfileNotFoundError
from grantflow.database.models import FundingSource, Profile
from grantflow.repositories.funding_source_repository import FundingSourceRepository
from grantflow.repositories.profile_repository import ProfileRepository
from grantflow.schemas.extraction import ExtractedField
from grantflow.schemas.patches import (
    AuditEntry,
    FieldChange,
    FundingSourcePatch,
    PatchDocument,
    PatchSummary,
)
from grantflow.services.audit.audit_logger import AuditLogger
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

FILL_EMPTY = "fill_empty"
OVERWRITE = "overwrite"

PROFILE_WRITABLE_FIELDS = frozenset(
    {"full_name", "dob", "address_line1", "address_line2", "city", "state", "zip"}
)
FUNDING_SOURCE_WRITABLE_FIELDS = frozenset({"email", "phone", "address", "award_amount", "notes"})

# Extraction field name -> funding_sources column
FUNDING_SOURCE_FIELD_MAP = {
    "contact_email": "email",
    "contact_phone": "phone",
}


def is_empty(value: Any) -> bool:
    """A stored value counts as empty when it is None or a blank string."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class PatchApplier:
    """Writes patch documents into profiles and funding sources.

    Profile fields are only ever filled when empty. Funding source fields
    follow ``funding_source_policy``: ``fill_empty`` behaves like profiles,
    ``overwrite`` replaces any differing stored value. Either way a field is
    written only when its confidence is at least ``min_confidence``.

    Each mutated entity is committed separately and gets exactly one audit
    entry. Entities with nothing to write are left untouched and unaudited,
    which makes re-applying the same patch a no-op.
    """

    def __init__(
        self,
        session: AsyncSession,
        audit_logger: Optional[AuditLogger] = None,
        min_confidence: Optional[float] = None,
        funding_source_policy: Optional[str] = None,
    ):
        self.session = session
        self.profiles = ProfileRepository(session)
        self.funding_sources = FundingSourceRepository(session)
        self.audit_logger = audit_logger or AuditLogger()
        self.min_confidence = (
            settings.patch.min_confidence if min_confidence is None else min_confidence
        )
        self.funding_source_policy = funding_source_policy or settings.patch.funding_source_policy
        if self.funding_source_policy not in (FILL_EMPTY, OVERWRITE):
            raise ConfigurationError(f"Unknown funding source policy: {self.funding_source_policy}")

    def _qualifies(self, field: ExtractedField) -> bool:
        return field.confidence >= self.min_confidence

    async def apply(
        self,
        patches: PatchDocument,
        document_id: Optional[UUID],
        profile_id: UUID,
    ) -> PatchSummary:
        """Apply a patch document on behalf of one source document.

        Args:
            patches: Patch document to apply
            document_id: Document the patch was derived from, for the audit trail
            profile_id: Profile that receives the profile patch

        Returns:
            PatchSummary of the fields actually written

        Raises:
            ProfileNotFoundError: If the profile does not exist; nothing is applied
        """
        profile = await self.profiles.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile {profile_id} not found")

        summary = PatchSummary()
        summary.profile = await self._apply_profile(profile, patches, document_id)

        if patches.funding_sources:
            if await self.funding_sources.table_exists():
                for entry in patches.funding_sources:
                    summary.funding_sources.extend(
                        await self._apply_funding_source(entry, document_id)
                    )
            else:
                LOGGER.warning(
                    "funding_sources table missing, skipping funding source patches",
                    extra={"document_id": str(document_id), "entries": len(patches.funding_sources)},
                )

        LOGGER.info(
            "Patches applied",
            extra={
                "document_id": str(document_id),
                "profile_id": str(profile_id),
                "profile_changes": len(summary.profile),
                "funding_source_changes": len(summary.funding_sources),
            },
        )
        return summary

    async def _apply_profile(
        self,
        profile: Profile,
        patches: PatchDocument,
        document_id: Optional[UUID],
    ) -> List[FieldChange]:
        updates: Dict[str, Any] = {}
        changes: List[FieldChange] = []

        for field, extracted in patches.profile.set.items():
            if field not in PROFILE_WRITABLE_FIELDS:
                LOGGER.warning(
                    "Skipping unknown profile field",
                    extra={"field": field, "document_id": str(document_id)},
                )
                continue
            if not self._qualifies(extracted):
                continue

            current = getattr(profile, field)
            if not is_empty(current):
                continue

            updates[field] = extracted.value
            changes.append(
                FieldChange(
                    field=field,
                    old_value=current,
                    new_value=extracted.value,
                    confidence=extracted.confidence,
                )
            )

        if not updates:
            return []

        before = profile.as_dict()
        updated = await self.profiles.update(profile.id, **updates)
        await self.audit_logger.log(
            AuditEntry(
                document_id=str(document_id) if document_id else None,
                entity="profile",
                record_id=str(profile.id),
                action="update",
                before=before,
                after=updated.as_dict(),
                changes=changes,
            )
        )
        return changes

    def _qualifying_funding_fields(self, entry: FundingSourcePatch) -> Dict[str, ExtractedField]:
        fields = {}
        for field, extracted in entry.set.items():
            column = FUNDING_SOURCE_FIELD_MAP.get(field, field)
            if column not in FUNDING_SOURCE_WRITABLE_FIELDS:
                LOGGER.warning(
                    "Skipping unknown funding source field",
                    extra={"field": field, "funding_source": entry.upsert_by.name},
                )
                continue
            if self._qualifies(extracted):
                fields[column] = extracted
        return fields

    async def _apply_funding_source(
        self,
        entry: FundingSourcePatch,
        document_id: Optional[UUID],
    ) -> List[FieldChange]:
        name = entry.upsert_by.name
        fields = self._qualifying_funding_fields(entry)
        if not fields:
            return []

        existing = await self.funding_sources.get_by_name(name)
        if existing is None:
            return await self._insert_funding_source(name, fields, document_id)
        return await self._update_funding_source(existing, fields, document_id)

    async def _insert_funding_source(
        self,
        name: str,
        fields: Dict[str, ExtractedField],
        document_id: Optional[UUID],
    ) -> List[FieldChange]:
        values = {column: extracted.value for column, extracted in fields.items()}
        try:
            record = await self.funding_sources.create(name=name, **values)
        except DatabaseError as e:
            LOGGER.error(
                f"Failed to insert funding source: {e}",
                exc_info=True,
                extra={"funding_source": name, "document_id": str(document_id)},
            )
            return []

        changes = [
            FieldChange(
                name=name,
                field=column,
                old_value=None,
                new_value=extracted.value,
                confidence=extracted.confidence,
            )
            for column, extracted in fields.items()
        ]
        await self.audit_logger.log(
            AuditEntry(
                document_id=str(document_id) if document_id else None,
                entity="funding_source",
                record_id=str(record.id),
                action="insert",
                before=None,
                after=record.as_dict(),
                changes=changes,
            )
        )
        return changes

    async def _update_funding_source(
        self,
        record: FundingSource,
        fields: Dict[str, ExtractedField],
        document_id: Optional[UUID],
    ) -> List[FieldChange]:
        updates: Dict[str, Any] = {}
        changes: List[FieldChange] = []

        for column, extracted in fields.items():
            current = getattr(record, column)
            if self.funding_source_policy == FILL_EMPTY and not is_empty(current):
                continue
            if current == extracted.value:
                continue

            updates[column] = extracted.value
            changes.append(
                FieldChange(
                    name=record.name,
                    field=column,
                    old_value=current,
                    new_value=extracted.value,
                    confidence=extracted.confidence,
                )
            )

        if not updates:
            return []

        before = record.as_dict()
        updated = await self.funding_sources.update(record.id, **updates)
        await self.audit_logger.log(
            AuditEntry(
                document_id=str(document_id) if document_id else None,
                entity="funding_source",
                record_id=str(record.id),
                action="update",
                before=before,
                after=updated.as_dict(),
                changes=changes,
            )
        )
        return changes
