from fastapi import APIRouter

from grantflow.api.v1.endpoints import audit, documents

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(documents.router, tags=["Documents"])
api_router.include_router(audit.router, prefix="/audit", tags=["Audit"])

__all__ = ["api_router"]
