"""Append-only JSON-lines audit trail for applied patches."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional, Union

from grantflow.core.config import settings
from grantflow.schemas.patches import AuditEntry
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AuditLogger:
    """Writes one JSON object per line to the audit log file.

    Entries are only ever appended. A failed write is logged and dropped so
    that an unwritable log never undoes or blocks an applied patch.
    """

    def __init__(self, log_path: Optional[Union[str, Path]] = None):
        self.log_path = Path(log_path) if log_path else settings.audit.log_path

    def _append(self, line: str) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def log(self, entry: AuditEntry) -> None:
        """Append one audit entry."""
        line = entry.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(self._append, line)
        except OSError as e:
            LOGGER.error(
                f"Failed to write audit log: {e}",
                exc_info=True,
                extra={
                    "log_path": str(self.log_path),
                    "entity": entry.entity,
                    "record_id": entry.record_id,
                },
            )

    async def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """Return up to ``limit`` entries, newest first."""
        if limit <= 0 or not self.log_path.exists():
            return []

        content = await asyncio.to_thread(self.log_path.read_text, encoding="utf-8")
        entries = []
        for line in reversed(content.splitlines()):
            if not line.strip():
                continue
            try:
                entries.append(AuditEntry.model_validate(json.loads(line)))
            except ValueError:
                LOGGER.warning("Skipping malformed audit log line", extra={"log_path": str(self.log_path)})
                continue
            if len(entries) >= limit:
                break
        return entries
