"""Application configuration."""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def find_env_file() -> Optional[Path]:
    """Find .env file in multiple possible locations."""
    current_dir = os.path.dirname(os.path.abspath(__file__))

    possible_paths = [
        os.path.join(current_dir, ".env"),
        os.path.join(os.path.dirname(current_dir), ".env"),
        os.path.join(os.path.dirname(os.path.dirname(current_dir)), ".env"),
    ]

    for path_str in possible_paths:
        if os.path.exists(path_str):
            path = Path(path_str)
            LOGGER.info(f"Found .env file at: {path}")
            return path

    LOGGER.debug("No .env file found in expected locations")
    return None


ENV_FILE = find_env_file()


def _settings_config() -> SettingsConfigDict:
    return SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class DatabaseSettings(BaseSettings):
    """Database connection settings."""
    url: str = Field(
        default="sqlite+aiosqlite:///./data/grantflow.db",
        validation_alias="DATABASE_URL",
    )
    echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")

    model_config = _settings_config()

    @property
    def sqlite_path(self) -> Optional[Path]:
        """Filesystem path of a file-backed SQLite database, if any."""
        if not self.url.startswith("sqlite") or ":memory:" in self.url:
            return None
        _, _, path = self.url.partition(":///")
        return Path(path) if path else None


class ParserSettings(BaseSettings):
    """Text extraction and upload limits."""
    ocr_timeout: int = Field(default=60, validation_alias="PARSER_OCR_TIMEOUT")
    ocr_language: str = Field(default="eng", validation_alias="PARSER_OCR_LANGUAGE")
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, validation_alias="PARSER_MAX_UPLOAD_BYTES"
    )
    allowed_mime_types: list[str] = Field(
        default=[
            "application/pdf",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "image/jpeg",
            "image/jpg",
            "image/png",
            "text/plain",
        ],
        validation_alias="PARSER_ALLOWED_MIME_TYPES",
    )

    model_config = _settings_config()


class PatchSettings(BaseSettings):
    """Patch application policy."""
    min_confidence: float = Field(
        default=0.7, ge=0.0, le=1.0, validation_alias="PATCH_MIN_CONFIDENCE"
    )
    # fill_empty: only backfill empty columns; overwrite: replace when confident
    funding_source_policy: Literal["fill_empty", "overwrite"] = Field(
        default="fill_empty", validation_alias="PATCH_FUNDING_SOURCE_POLICY"
    )

    model_config = _settings_config()


class AuditSettings(BaseSettings):
    """Audit trail settings."""
    log_path: Path = Field(
        default=Path("data/document_ingestion.log"), validation_alias="AUDIT_LOG_PATH"
    )

    model_config = _settings_config()


class StorageSettings(BaseSettings):
    """Uploaded file storage settings."""
    upload_dir: Path = Field(default=Path("data/uploads"), validation_alias="STORAGE_UPLOAD_DIR")

    model_config = _settings_config()


class Settings(BaseSettings):
    """Unified application settings with nested models."""

    app_name: str = Field(default="GrantFlow", validation_alias="APP_NAME")
    app_version: str = "0.1.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    api_v1_prefix: str = Field(default="/api/v1", validation_alias="API_V1_PREFIX")

    db_init_timeout: int = 30

    db: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    parser: ParserSettings = Field(default_factory=lambda: ParserSettings())
    patch: PatchSettings = Field(default_factory=lambda: PatchSettings())
    audit: AuditSettings = Field(default_factory=lambda: AuditSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())

    model_config = _settings_config()

    @property
    def database_url(self) -> str:
        return self.db.url

    @property
    def database_echo(self) -> bool:
        return self.db.echo


settings = Settings()

LOGGER.info(f"Settings initialized with environment: {settings.environment}")
LOGGER.info(
    f"Patch policy: min_confidence={settings.patch.min_confidence}, "
    f"funding_sources={settings.patch.funding_source_policy}"
)
