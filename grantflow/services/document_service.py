"""Document service for document ingestion operations."""

import hashlib
import uuid
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.core.config import settings
from grantflow.core.exceptions import (
    AppError,
    DocumentNotFoundError,
    InvalidDocumentStateError,
    ProfileNotFoundError,
    ValidationError,
)
from grantflow.database.models import Document, utcnow
from grantflow.repositories.document_repository import DocumentRepository
from grantflow.repositories.profile_repository import ProfileRepository
from grantflow.schemas.patches import PatchDocument, PatchSummary
from grantflow.services.audit.audit_logger import AuditLogger
from grantflow.services.base_service import BaseService
from grantflow.services.parser.document_parser import parse_document
from grantflow.services.patch.patch_applier import PatchApplier
from grantflow.services.storage_service import StorageService
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

STATUS_UPLOADED = "uploaded"
STATUS_PARSING = "parsing"
STATUS_PARSED = "parsed"
STATUS_FAILED = "failed"
STATUS_APPLIED = "applied"

PARSEABLE_STATUSES = (STATUS_UPLOADED, STATUS_PARSED, STATUS_FAILED)


class DocumentService(BaseService):
    """Service for the document record lifecycle.

    uploaded -> parsing -> parsed | failed -> applied

    ``applied`` is only reachable from ``parsed``. A failed or parsed
    document may be parsed again; an applied one may not.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """Initialize document service.

        Args:
            session: Database session
            storage_service: File storage, defaults to the configured upload dir
            audit_logger: Audit trail, defaults to the configured log path
        """
        super().__init__(DocumentRepository(session))
        self.session = session
        self.doc_repo = self.repository
        self.profile_repo = ProfileRepository(session)
        self.storage_service = storage_service or StorageService()
        self.audit_logger = audit_logger or AuditLogger()

    def validate(self, *args, **kwargs):
        """Validate upload input before anything is stored."""
        if kwargs.get("action") != "upload_document":
            return

        filename = kwargs.get("filename")
        content = kwargs.get("content")
        mime_type = kwargs.get("mime_type")

        if not filename:
            raise ValidationError("File has no filename")
        if not content:
            raise ValidationError("File is empty")
        if mime_type not in settings.parser.allowed_mime_types:
            raise ValidationError(f"Unsupported file type: {mime_type}")
        if len(content) > settings.parser.max_upload_bytes:
            raise ValidationError(
                f"File too large: {len(content)} bytes "
                f"(limit {settings.parser.max_upload_bytes})"
            )

    async def run(self, *args, **kwargs) -> Any:
        """Route to appropriate handler based on action."""
        action = kwargs.get("action")

        if action == "upload_document":
            return await self._upload_document_logic(
                kwargs["profile_id"],
                kwargs["filename"],
                kwargs["content"],
                kwargs["mime_type"],
            )
        elif action == "parse_document":
            return await self._parse_document_logic(kwargs["document_id"])
        elif action == "apply_document":
            return await self._apply_document_logic(kwargs["document_id"])
        else:
            raise AppError(f"Unknown action: {action}")

    async def upload_document(
        self,
        profile_id: UUID,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> Document:
        """Store an uploaded file and create its document record.

        Raises:
            ProfileNotFoundError: If the profile does not exist
            ValidationError: If the file type or size is not accepted
        """
        return await self.execute(
            action="upload_document",
            profile_id=profile_id,
            filename=filename,
            content=content,
            mime_type=mime_type,
        )

    async def parse_document(self, document_id: UUID) -> Document:
        """Run the parsing pipeline on a stored document.

        Parse failures are recorded on the document (``status=failed``),
        not raised.
        """
        return await self.execute(action="parse_document", document_id=document_id)

    async def apply_document(self, document_id: UUID) -> PatchSummary:
        """Apply a parsed document's suggested patches to its profile.

        Raises:
            InvalidDocumentStateError: If the document is not parsed or has no patches
            ProfileNotFoundError: If the document's profile no longer exists
        """
        return await self.execute(action="apply_document", document_id=document_id)

    async def get_document(self, document_id: UUID) -> Document:
        document = await self.doc_repo.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    async def list_documents(
        self,
        profile_id: UUID,
        skip: int = 0,
        limit: int = 200,
    ) -> List[Document]:
        if await self.profile_repo.get_by_id(profile_id) is None:
            raise ProfileNotFoundError(f"Profile {profile_id} not found")
        return await self.doc_repo.list_by_profile(profile_id, skip=skip, limit=limit)

    async def delete_document(self, document_id: UUID) -> None:
        """Delete the stored file and the document record."""
        document = await self.get_document(document_id)
        storage_path = document.storage_path
        await self.doc_repo.delete(document_id)
        await self.storage_service.delete_file(storage_path)
        LOGGER.info("Document deleted", extra={"document_id": str(document_id)})

    async def _upload_document_logic(
        self,
        profile_id: UUID,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> Document:
        if await self.profile_repo.get_by_id(profile_id) is None:
            raise ProfileNotFoundError(f"Profile {profile_id} not found")

        document_id = uuid.uuid4()
        path = self.storage_service.build_path(profile_id, document_id, filename)
        await self.storage_service.save_file(path, content)

        try:
            document = await self.doc_repo.create(
                id=document_id,
                profile_id=profile_id,
                original_filename=filename,
                mime_type=mime_type,
                storage_path=str(path),
                sha256=hashlib.sha256(content).hexdigest(),
                size_bytes=len(content),
                status=STATUS_UPLOADED,
            )
        except AppError:
            await self.storage_service.delete_file(path)
            raise

        LOGGER.info(
            "Document uploaded",
            extra={
                "document_id": str(document.id),
                "profile_id": str(profile_id),
                "mime_type": mime_type,
                "size_bytes": len(content),
            },
        )
        return document

    async def _parse_document_logic(self, document_id: UUID) -> Document:
        document = await self.get_document(document_id)
        if document.status not in PARSEABLE_STATUSES:
            raise InvalidDocumentStateError(
                f"Document {document_id} cannot be parsed in status '{document.status}'"
            )

        await self.doc_repo.update_status(document_id, STATUS_PARSING)

        try:
            return await self._run_parser(document)
        except Exception as e:
            # Never leave a document stuck in ``parsing``
            LOGGER.error(
                f"Parse step failed: {e}",
                exc_info=True,
                extra={"document_id": str(document_id), "error_type": type(e).__name__},
            )
            await self.doc_repo.update_status(
                document_id, STATUS_FAILED, error=f"Parsing failed: {e}"
            )
            raise

    async def _run_parser(self, document: Document) -> Document:
        document_id = document.id
        try:
            content = await self.storage_service.read_file(document.storage_path)
        except AppError as e:
            return await self.doc_repo.update_status(document_id, STATUS_FAILED, error=str(e))

        result = await parse_document(content, document.mime_type, document.original_filename)

        if not result.ok:
            LOGGER.warning(
                "Document parse failed",
                extra={"document_id": str(document_id), "error": result.error},
            )
            return await self.doc_repo.update_status(
                document_id, STATUS_FAILED, error=result.error
            )

        return await self.doc_repo.update_status(
            document_id,
            STATUS_PARSED,
            doc_type=result.doc_type,
            extracted_json={
                "text": result.text,
                "classification": result.classification.model_dump(mode="json"),
                "extracted": result.extracted.model_dump(mode="json"),
            },
            suggested_patches_json=result.patches.model_dump(mode="json"),
            error=None,
        )

    async def _apply_document_logic(self, document_id: UUID) -> PatchSummary:
        document = await self.get_document(document_id)
        if document.status != STATUS_PARSED:
            raise InvalidDocumentStateError(
                f"Document {document_id} must be parsed before applying "
                f"(status '{document.status}')"
            )
        if document.suggested_patches_json is None:
            raise InvalidDocumentStateError(f"Document {document_id} has no suggested patches")

        patches = PatchDocument.model_validate(document.suggested_patches_json)
        applier = PatchApplier(self.session, audit_logger=self.audit_logger)
        summary = await applier.apply(patches, document_id=document.id, profile_id=document.profile_id)

        await self.doc_repo.update_status(document_id, STATUS_APPLIED, applied_at=utcnow())
        return summary
