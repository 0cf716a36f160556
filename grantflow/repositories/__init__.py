from grantflow.repositories.base_repository import BaseRepository
from grantflow.repositories.document_repository import DocumentRepository
from grantflow.repositories.funding_source_repository import FundingSourceRepository
from grantflow.repositories.profile_repository import ProfileRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "FundingSourceRepository",
    "ProfileRepository",
]
