"""API schemas for document records."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from grantflow.schemas.patches import FieldChange, PatchSummary


class DocumentResponse(BaseModel):
    """Document record as returned by the API. The stored file path is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    original_filename: str
    mime_type: str
    sha256: str
    size_bytes: int
    status: str = Field(..., description="uploaded | parsing | parsed | failed | applied")
    doc_type: str
    extracted_json: Optional[Dict[str, Any]] = None
    suggested_patches_json: Optional[Dict[str, Any]] = None
    applied_at: Optional[datetime] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse] = Field(default_factory=list)
    total: int = 0


class ApplyPatchResponse(BaseModel):
    """Fields written by an apply request."""

    document_id: UUID
    profile: List[FieldChange] = Field(default_factory=list)
    funding_sources: List[FieldChange] = Field(default_factory=list)
    total_changes: int = 0

    @classmethod
    def from_summary(cls, document_id: UUID, summary: PatchSummary) -> "ApplyPatchResponse":
        return cls(
            document_id=document_id,
            profile=summary.profile,
            funding_sources=summary.funding_sources,
            total_changes=summary.total_changes,
        )
