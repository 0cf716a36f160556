"""Pydantic schemas for patch documents, applied changes and audit entries."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grantflow.schemas.extraction import ExtractedField


class ProfilePatch(BaseModel):
    set: Dict[str, ExtractedField] = Field(default_factory=dict)


class UpsertKey(BaseModel):
    name: str = Field(..., min_length=1)


class FundingSourcePatch(BaseModel):
    upsert_by: UpsertKey
    set: Dict[str, ExtractedField] = Field(default_factory=dict)


class PatchDocument(BaseModel):
    """Proposed field-level writes derived from one parsed document."""

    profile: ProfilePatch = Field(default_factory=ProfilePatch)
    funding_sources: List[FundingSourcePatch] = Field(default_factory=list)

    @field_validator("funding_sources", mode="before")
    @classmethod
    def drop_entries_without_name(cls, value: Any) -> Any:
        """Entries without a non-empty upsert name are never kept."""
        if not isinstance(value, list):
            return value
        kept = []
        for entry in value:
            if isinstance(entry, FundingSourcePatch):
                kept.append(entry)
                continue
            upsert_by = entry.get("upsert_by") if isinstance(entry, dict) else None
            name = upsert_by.get("name") if isinstance(upsert_by, dict) else None
            if isinstance(name, str) and name.strip():
                kept.append(entry)
        return kept

    @property
    def is_empty(self) -> bool:
        return not self.profile.set and not self.funding_sources


class FieldChange(BaseModel):
    """One field actually written during patch application."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, description="Funding source name")
    field: str
    old_value: Any = Field(default=None, alias="oldValue")
    new_value: Any = Field(default=None, alias="newValue")
    confidence: float


class PatchSummary(BaseModel):
    """Everything written by one apply call, grouped by entity."""

    profile: List[FieldChange] = Field(default_factory=list)
    funding_sources: List[FieldChange] = Field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return len(self.profile) + len(self.funding_sources)


class AuditEntry(BaseModel):
    """Append-only record of one mutated entity."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    document_id: Optional[str] = Field(default=None, alias="documentId")
    entity: Literal["profile", "funding_source"]
    record_id: str = Field(..., alias="recordId")
    action: Literal["update", "insert"]
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    changes: List[FieldChange] = Field(default_factory=list)
