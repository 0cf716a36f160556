from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.core.config import settings
from grantflow.core.database import get_async_session as get_session
from grantflow.core.exceptions import (
    AppError,
    InvalidDocumentStateError,
    NotFoundError,
    ValidationError,
)
from grantflow.schemas.common import ApiResponse
from grantflow.schemas.documents import ApplyPatchResponse, DocumentListResponse, DocumentResponse
from grantflow.services.document_service import DocumentService
from grantflow.utils.logging import get_logger
from grantflow.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> DocumentService:
    return DocumentService(db_session)


def to_http_exception(error: AppError, request: Request) -> HTTPException:
    """Map service errors onto RFC 7807 HTTP errors."""
    if isinstance(error, NotFoundError):
        code, title = status.HTTP_404_NOT_FOUND, "Not Found"
    elif isinstance(error, (ValidationError, InvalidDocumentStateError)):
        code, title = status.HTTP_400_BAD_REQUEST, "Bad Request"
    else:
        LOGGER.error(f"Request failed: {error}", extra={"path": request.url.path})
        code, title = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"

    error_detail = create_error_detail(
        title=title,
        status=code,
        detail=str(error),
        request=request,
    )
    return HTTPException(status_code=code, detail=error_detail.model_dump(mode="json"))


@router.post(
    "/profiles/{profile_id}/documents",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload and parse a document",
    operation_id="upload_document",
)
async def upload_document(
    request: Request,
    profile_id: UUID,
    file: UploadFile = File(..., description="PDF, DOCX, JPEG, PNG or plain text file"),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Upload a document for a profile and parse it immediately."""
    # One byte past the limit is enough for validation to reject the file
    content = await file.read(settings.parser.max_upload_bytes + 1)
    try:
        document = await document_service.upload_document(
            profile_id=profile_id,
            filename=file.filename,
            content=content,
            mime_type=file.content_type,
        )
        document = await document_service.parse_document(document.id)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data=DocumentResponse.model_validate(document),
        message=f"Document uploaded ({document.status})",
        request=request,
    )


@router.get(
    "/profiles/{profile_id}/documents",
    response_model=ApiResponse,
    summary="List a profile's documents",
    operation_id="list_documents",
)
async def list_documents(
    request: Request,
    profile_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        documents = await document_service.list_documents(profile_id, skip=offset, limit=limit)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data=DocumentListResponse(
            documents=[DocumentResponse.model_validate(doc) for doc in documents],
            total=len(documents),
        ),
        message="Documents retrieved successfully",
        request=request,
    )


@router.get(
    "/documents/{document_id}",
    response_model=ApiResponse,
    summary="Get document details",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Retrieve a document with its extraction and suggested patches."""
    try:
        document = await document_service.get_document(document_id)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data=DocumentResponse.model_validate(document),
        message="Document details retrieved successfully",
        request=request,
    )


@router.post(
    "/documents/{document_id}/parse",
    response_model=ApiResponse,
    summary="Re-run parsing",
    operation_id="parse_document",
)
async def parse_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        document = await document_service.parse_document(document_id)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data=DocumentResponse.model_validate(document),
        message=f"Document parse finished ({document.status})",
        request=request,
    )


@router.post(
    "/documents/{document_id}/apply",
    response_model=ApiResponse,
    summary="Apply suggested patches",
    operation_id="apply_document",
)
async def apply_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Apply a parsed document's suggested patches to its profile and funding sources."""
    try:
        summary = await document_service.apply_document(document_id)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data=ApplyPatchResponse.from_summary(document_id, summary),
        message=f"Applied {summary.total_changes} change(s)",
        request=request,
    )


@router.delete(
    "/documents/{document_id}",
    response_model=ApiResponse,
    summary="Delete document",
    operation_id="delete_document",
)
async def delete_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Delete a document record and its stored file."""
    try:
        await document_service.delete_document(document_id)
    except AppError as e:
        raise to_http_exception(e, request)

    return create_api_response(
        data={"document_id": str(document_id)},
        message="Document deleted successfully",
        request=request,
    )
