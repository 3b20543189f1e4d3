"""Private scratch directories for uploads awaiting transfer."""

from __future__ import annotations

import logging
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Protocol

from ..exceptions import InternalError, SeverityLevel
from .media_models import DEFAULT_CONTENT_NAME, DEFAULT_THUMBNAIL_NAME

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,10}$")


class UploadStream(Protocol):
    """Subset of ``fastapi.UploadFile`` the staging area relies on."""

    filename: str | None

    async def read(self, size: int = -1) -> bytes: ...

    async def seek(self, offset: int) -> None: ...


@dataclass(slots=True)
class StagingArea:
    """Materializes upload streams on local disk before they reach the object store."""

    root: Path
    chunk_size: int = CHUNK_SIZE
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def directory_for(self, record_id: str) -> Path:
        millis = int(time.time() * 1000)
        return self.root / f"{record_id}-{millis}"

    async def stage(
        self,
        record_id: str,
        thumbnail: UploadStream | None = None,
        content: UploadStream | None = None,
    ) -> list[Path]:
        """Copy the given streams into a fresh directory, thumbnail first.

        Returns the staged paths in upload order; an empty list (and no
        directory) when both inputs are absent.
        """
        if thumbnail is None and content is None:
            return []

        directory = self.directory_for(record_id)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.log.error("media.staging.mkdir_failed", extra={"record_id": record_id, "path": str(directory)})
            raise InternalError(
                f"Failed to create staging directory for record {record_id}: {exc}",
                source="staging.directory",
                severity=SeverityLevel.HIGH,
            ) from exc

        staged: list[Path] = []
        for stem, upload in ((DEFAULT_THUMBNAIL_NAME, thumbnail), (DEFAULT_CONTENT_NAME, content)):
            if upload is None:
                continue
            target = directory / f"{stem}{self._derive_suffix(upload.filename)}"
            try:
                await self._copy(upload, target)
            except OSError as exc:
                self.log.error(
                    "media.staging.transfer_failed",
                    extra={"record_id": record_id, "stream": stem, "path": str(target)},
                )
                raise InternalError(
                    f"Failed to stage {stem} file for record {record_id}: {exc}",
                    source=f"staging.{stem}",
                    severity=SeverityLevel.HIGH,
                ) from exc
            staged.append(target)

        self.log.info(
            "media.staging.persisted",
            extra={
                "record_id": record_id,
                "directory": str(directory),
                "files": [path.name for path in staged],
            },
        )
        return staged

    def cleanup(self, record_id: str) -> None:
        """Remove every staging directory created for ``record_id``."""
        if not self.root.exists():
            return
        for directory in self.root.glob(f"{record_id}-*"):
            if directory.is_dir():
                self._remove_directory(directory)

    def list_stale(self, max_age: timedelta, reference_time: datetime | None = None) -> list[Path]:
        if not self.root.exists():
            return []
        now = reference_time or datetime.now(timezone.utc)
        threshold = (now - max_age).timestamp()
        return [
            directory
            for directory in self.root.iterdir()
            if directory.is_dir() and directory.stat().st_mtime < threshold
        ]

    def cleanup_stale(self, max_age: timedelta, reference_time: datetime | None = None) -> int:
        """Purge staging directories older than ``max_age`` (fallback for cron)."""
        removed = 0
        for directory in self.list_stale(max_age, reference_time):
            self._remove_directory(directory)
            removed += 1
            self.log.info("media.staging.cleanup.removed", extra={"directory": str(directory)})
        return removed

    async def _copy(self, upload: UploadStream, target: Path) -> None:
        with target.open("wb") as sink:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                sink.write(chunk)
        await upload.seek(0)

    def _remove_directory(self, directory: Path) -> None:
        if directory.exists() and self.root in directory.parents:
            shutil.rmtree(directory, ignore_errors=True)

    @staticmethod
    def _derive_suffix(filename: str | None) -> str:
        if not filename:
            return ""
        suffix = Path(filename).suffix.lower()
        return suffix if _SAFE_SUFFIX.match(suffix) else ""
