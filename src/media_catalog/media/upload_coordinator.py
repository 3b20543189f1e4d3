"""All-or-nothing upload of a record's files and metadata."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from ..exceptions import (
    InternalError,
    SeverityLevel,
    StorageOperation,
    StorageOperationError,
)
from .media_models import METADATA_OBJECT_NAME, UploadUnit
from .object_store import ObjectStore

MAX_CONTENT_BYTES = 100 * 1024 * 1024  # 100 MiB
METADATA_CONTENT_TYPE = "application/json"


@dataclass(slots=True)
class UploadCoordinator:
    """Uploads the files of one record sequentially, rolling back on failure.

    Keys are ``{record_id}/{file name}`` and ``{record_id}/metadata.json``.
    The metadata object is written last so that a reader never sees metadata
    without the binaries it describes. If any put fails, every key already
    written for the unit is deleted before the error propagates.
    """

    store: ObjectStore
    max_content_bytes: int = MAX_CONTENT_BYTES
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    async def upload(self, unit: UploadUnit) -> None:
        self._ensure_content_size(unit)
        body = self._serialize_metadata(unit)

        uploaded: list[str] = []
        for path in unit.files():
            key = f"{unit.record_id}/{path.name}"
            try:
                ok = await self.store.put_file(key, path)
            except Exception:
                await self._rollback(unit.record_id, uploaded)
                raise
            if not ok:
                await self._rollback(unit.record_id, uploaded)
                raise StorageOperationError(
                    f"Failed to upload '{path.name}' for record {unit.record_id}",
                    object_key=key,
                    operation=StorageOperation.UPLOAD_FAILED,
                    severity=SeverityLevel.MEDIUM,
                    record_id=unit.record_id,
                )
            uploaded.append(key)

        metadata_key = f"{unit.record_id}/{METADATA_OBJECT_NAME}"
        try:
            ok = await self.store.put_string(metadata_key, METADATA_CONTENT_TYPE, body)
        except Exception:
            await self._rollback(unit.record_id, uploaded)
            raise
        if not ok:
            await self._rollback(unit.record_id, uploaded)
            raise StorageOperationError(
                f"Failed to upload metadata for record {unit.record_id}",
                object_key=metadata_key,
                operation=StorageOperation.UPLOAD_FAILED,
                severity=SeverityLevel.HIGH if uploaded else SeverityLevel.MEDIUM,
                record_id=unit.record_id,
            )

        self.log.info(
            "media.upload.completed",
            extra={"record_id": unit.record_id, "keys": [*uploaded, metadata_key]},
        )

    def _ensure_content_size(self, unit: UploadUnit) -> None:
        if unit.content is None:
            return
        size = unit.content.stat().st_size
        if size < self.max_content_bytes:
            return
        limit_mb = self.max_content_bytes // (1024 * 1024)
        self.log.warning(
            "media.upload.content_too_large",
            extra={"record_id": unit.record_id, "size_bytes": size, "limit_bytes": self.max_content_bytes},
        )
        raise StorageOperationError(
            "Content file is too large for upload at the moment, please try a smaller file\n"
            f"Size supported: {limit_mb}MB",
            object_key=f"{unit.record_id}/{unit.content.name}",
            operation=StorageOperation.UPLOAD_FAILED,
            severity=SeverityLevel.LOW,
            record_id=unit.record_id,
        )

    @staticmethod
    def _serialize_metadata(unit: UploadUnit) -> str:
        try:
            return json.dumps(unit.metadata, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise InternalError(
                f"Failed to serialize metadata for record {unit.record_id}: {exc}",
                source="upload.metadata",
                severity=SeverityLevel.CRITICAL,
            ) from exc

    async def _rollback(self, record_id: str, keys: list[str]) -> None:
        """Best-effort delete of ``keys``; failures are logged, never raised."""
        if not keys:
            return
        deleted = 0
        for key in keys:
            try:
                if await self.store.delete(key):
                    deleted += 1
                    continue
            except Exception:
                self.log.exception("media.upload.rollback.delete_error", extra={"record_id": record_id, "key": key})
                continue
            self.log.warning("media.upload.rollback.delete_failed", extra={"record_id": record_id, "key": key})
        self.log.warning(
            "media.upload.rollback deleted %s of %s",
            deleted,
            len(keys),
            extra={"record_id": record_id, "deleted": deleted, "total": len(keys), "keys": keys},
        )
