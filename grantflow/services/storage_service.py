"""Local filesystem storage for uploaded documents."""

import asyncio
import shutil
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from grantflow.core.config import settings
from grantflow.core.exceptions import AppError
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Stores uploads under ``<upload_dir>/<profile_id>/<document_id>/<filename>``."""

    def __init__(self, upload_dir: Optional[Union[str, Path]] = None):
        self.upload_dir = Path(upload_dir) if upload_dir else settings.storage.upload_dir

    def build_path(self, profile_id: UUID, document_id: UUID, filename: str) -> Path:
        # Only the final path component of the client-supplied name is kept
        safe_name = Path(filename).name or "upload"
        return self.upload_dir / str(profile_id) / str(document_id) / safe_name

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def save_file(self, path: Path, content: bytes) -> Path:
        """Write bytes to ``path``.

        Raises:
            AppError: If the file cannot be written
        """
        try:
            await asyncio.to_thread(self._write, path, content)
        except OSError as e:
            LOGGER.error(
                f"Error saving uploaded file: {str(e)}",
                exc_info=True,
                extra={"path": str(path)},
            )
            raise AppError(f"Storage write error: {str(e)}", original_error=e)
        return path

    async def read_file(self, path: Union[str, Path]) -> bytes:
        try:
            return await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            LOGGER.error(
                f"Error reading stored file: {str(e)}",
                exc_info=True,
                extra={"path": str(path)},
            )
            raise AppError(f"Storage read error: {str(e)}", original_error=e)

    async def delete_file(self, path: Union[str, Path]) -> None:
        """Remove a stored file and its per-document directory. Missing files are ignored."""
        target = Path(path)
        await asyncio.to_thread(shutil.rmtree, target.parent, ignore_errors=True)
        LOGGER.info("Stored file removed", extra={"path": str(target)})
