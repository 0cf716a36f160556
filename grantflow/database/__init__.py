"""Database models."""

from grantflow.database.models import Document, FundingSource, Profile

__all__ = ["Document", "FundingSource", "Profile"]
