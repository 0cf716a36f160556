"""Audit trail endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from grantflow.schemas.common import ApiResponse
from grantflow.services.audit.audit_logger import AuditLogger
from grantflow.utils.responses import create_api_response

router = APIRouter()


def get_audit_logger() -> AuditLogger:
    return AuditLogger()


@router.get(
    "",
    response_model=ApiResponse,
    summary="Recent audit entries",
    operation_id="list_audit_entries",
)
async def list_audit_entries(
    request: Request,
    limit: int = Query(100, ge=1, le=1000),
    audit_logger: Annotated[AuditLogger, Depends(get_audit_logger)] = None,
) -> ApiResponse:
    """Most recent patch audit entries, newest first."""
    entries = await audit_logger.get_recent(limit=limit)
    return create_api_response(
        data={
            "entries": [entry.model_dump(mode="json", by_alias=True) for entry in entries],
            "total": len(entries),
        },
        message="Audit entries retrieved successfully",
        request=request,
    )
