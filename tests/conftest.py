"""Pytest configuration and shared fixtures."""

import os
import tempfile
from datetime import datetime, timezone
from uuid import uuid4

import pytest
import pytest_asyncio

# Point settings at throwaway locations BEFORE importing the app
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="grantflow-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUDIT_LOG_PATH", os.path.join(_TEST_DATA_DIR, "audit.log"))
os.environ.setdefault("STORAGE_UPLOAD_DIR", os.path.join(_TEST_DATA_DIR, "uploads"))

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from grantflow.core.database import Base
from grantflow.database.models import Document, Profile
from grantflow.main import app
from grantflow.services.audit.audit_logger import AuditLogger
from grantflow.services.storage_service import StorageService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncSession:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def profile(db_session) -> Profile:
    """An individual profile with no identity fields filled in."""
    profile = Profile(profile_type="individual", display_name="Jane Doe")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
def audit_logger(tmp_path) -> AuditLogger:
    return AuditLogger(tmp_path / "audit" / "document_ingestion.log")


@pytest.fixture
def storage_service(tmp_path) -> StorageService:
    return StorageService(tmp_path / "uploads")


@pytest.fixture
def make_document():
    """Build a transient Document record with every column populated."""

    def _make(**overrides) -> Document:
        now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        values = {
            "id": uuid4(),
            "profile_id": uuid4(),
            "original_filename": "license.txt",
            "mime_type": "text/plain",
            "storage_path": "/tmp/uploads/license.txt",
            "sha256": "0" * 64,
            "size_bytes": 120,
            "status": "uploaded",
            "doc_type": "unknown",
            "extracted_json": None,
            "suggested_patches_json": None,
            "applied_at": None,
            "error": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Document(**values)

    return _make


@pytest.fixture
def drivers_license_text() -> str:
    return (
        "CALIFORNIA DRIVER LICENSE\n"
        "DL D1234567\n"
        "CLASS C\n"
        "DOB: 02/14/2006\n"
        "SEX: F\n"
        "123 MAIN STREET, LOS ANGELES, CA 90001\n"
        "RESTRICTIONS NONE\n"
        "EXPIRES: 02/14/2030\n"
    )


@pytest.fixture
def scholarship_letter_text() -> str:
    return (
        "Example Scholarship Foundation\n"
        "Office of Awards\n"
        "\n"
        "Dear Jane Doe,\n"
        "\n"
        "Congratulations! We are pleased to inform you that you have been selected as the "
        "recipient of the Example Scholarship award for the upcoming academic year.\n"
        "\n"
        "The award amount is $5,000.00 and will be applied toward tuition at your university.\n"
        "\n"
        "If you have any questions, please contact us at awards@examplescholarship.org "
        "or call 555-123-4567.\n"
        "\n"
        "Sincerely,\n"
        "The Scholarship Committee\n"
    )


@pytest.fixture
def meeting_notes_text() -> str:
    return (
        "Team Meeting Notes\n"
        "Attendees: project team\n"
        "Discussion points:\n"
        "- Budget review for next quarter\n"
        "- Follow up with john@example.com about the venue\n"
        "- Call vendor at 555-987-6543\n"
    )
