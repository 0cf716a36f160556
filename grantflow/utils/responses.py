from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request

from grantflow.schemas.common import ApiResponse, ErrorDetail, ResponseMeta


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Returns a dict to be compatible with FastAPI's response_model=dict.
    """
    request_id = str(uuid4())
    if request and hasattr(request.state, "request_id"):
        request_id = request.state.request_id

    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=request_id,
        api_version=api_version
    )

    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data_dict = {
            "items": [
                item.model_dump(mode="json", by_alias=True) if hasattr(item, "model_dump") else item
                for item in data
            ]
        }
    elif data is None:
        data_dict = {}
    else:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    request_id = str(uuid4())
    if request and hasattr(request.state, "request_id"):
        request_id = request.state.request_id

    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=request_id,
        timestamp=datetime.now(timezone.utc)
    )
