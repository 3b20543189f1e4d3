"""S3 gateway used by the upload coordinator and lifecycle service."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol, TypeVar

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import ObjectStoreSettings
from ..exceptions import SeverityLevel, SigningError
from .media_models import PutResult, SignedUrl

T = TypeVar("T")

DELETE_BATCH_SIZE = 1000  # S3 DeleteObjects limit
DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def _run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Execute ``func`` in a worker thread to avoid blocking the event loop."""

    return await asyncio.to_thread(func, *args, **kwargs)


class ObjectStore(Protocol):
    """Operations the media core needs from object storage."""

    async def put_file(self, key: str, path: Path) -> bool: ...

    async def put_string(self, key: str, content_type: str, body: str) -> bool: ...

    async def delete(self, key: str) -> bool: ...

    async def delete_prefix(self, prefix: str) -> bool: ...

    def presign_read(self, key: str) -> SignedUrl: ...


def _is_success(response: dict[str, Any]) -> bool:
    status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    return 200 <= int(status_code) < 300


def _guess_content_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE


@dataclass(slots=True)
class S3ObjectStore:
    """Thin async facade over a boto3 S3 client; reports failures as ``False``."""

    client: Any
    bucket: str
    signed_url_ttl_seconds: int = 3600
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    @classmethod
    def from_settings(cls, settings: ObjectStoreSettings) -> "S3ObjectStore":
        config = BotoConfig(s3={"addressing_style": "path"}) if settings.endpoint_url else None
        client = boto3.client(
            "s3",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
            config=config,
        )
        return cls(
            client=client,
            bucket=settings.bucket,
            signed_url_ttl_seconds=settings.signed_url_ttl_seconds,
        )

    async def put_file(self, key: str, path: Path) -> bool:
        return await _run_sync(self._put_file_sync, key, path)

    async def put_string(self, key: str, content_type: str, body: str) -> bool:
        return await _run_sync(self._put_object_sync, key, body.encode("utf-8"), content_type)

    def put_file_deferred(self, key: str, path: Path) -> asyncio.Task[PutResult]:
        """Start a managed (multipart) transfer in the background.

        The returned task never raises for backend errors; inspect
        :attr:`PutResult.ok` instead.
        """
        return asyncio.create_task(self._deferred_upload(key, path))

    async def delete(self, key: str) -> bool:
        return await _run_sync(self._delete_sync, key)

    async def delete_prefix(self, prefix: str) -> bool:
        """Delete every object under ``prefix``; true only if all deletions succeeded."""
        return await _run_sync(self._delete_prefix_sync, prefix)

    def presign_read(self, key: str) -> SignedUrl:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.signed_url_ttl_seconds)
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.signed_url_ttl_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            self.log.error("media.store.presign_failed", extra={"key": key, "error": str(exc)})
            raise SigningError(
                f"Failed to sign read URL for '{key}'",
                url=f"s3://{self.bucket}/{key}",
                severity=SeverityLevel.HIGH,
            ) from exc
        return SignedUrl(url=url, expires_at=expires_at)

    def _put_file_sync(self, key: str, path: Path) -> bool:
        try:
            with path.open("rb") as body:
                response = self.client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    ContentType=_guess_content_type(path),
                )
        except (ClientError, BotoCoreError, OSError) as exc:
            self.log.warning("media.store.put_failed", extra={"key": key, "error": str(exc)})
            return False
        return self._report(response, "media.store.put", key)

    def _put_object_sync(self, key: str, body: bytes, content_type: str) -> bool:
        try:
            response = self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            self.log.warning("media.store.put_failed", extra={"key": key, "error": str(exc)})
            return False
        return self._report(response, "media.store.put", key)

    async def _deferred_upload(self, key: str, path: Path) -> PutResult:
        try:
            await _run_sync(
                self.client.upload_file,
                str(path),
                self.bucket,
                key,
                ExtraArgs={"ContentType": _guess_content_type(path)},
            )
        except (ClientError, BotoCoreError, S3UploadFailedError, OSError) as exc:
            self.log.warning("media.store.deferred_put_failed", extra={"key": key, "error": str(exc)})
            return PutResult(key=key, ok=False, error=str(exc))
        self.log.info("media.store.deferred_put", extra={"key": key})
        return PutResult(key=key, ok=True)

    def _delete_sync(self, key: str) -> bool:
        try:
            response = self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            self.log.warning("media.store.delete_failed", extra={"key": key, "error": str(exc)})
            return False
        return self._report(response, "media.store.delete", key)

    def _delete_prefix_sync(self, prefix: str) -> bool:
        try:
            keys = [
                item["Key"]
                for page in self.client.get_paginator("list_objects_v2").paginate(
                    Bucket=self.bucket, Prefix=prefix
                )
                for item in page.get("Contents", [])
            ]
        except (ClientError, BotoCoreError) as exc:
            self.log.warning("media.store.list_failed", extra={"prefix": prefix, "error": str(exc)})
            return False

        ok = True
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as exc:
                self.log.warning(
                    "media.store.delete_prefix_failed",
                    extra={"prefix": prefix, "batch_size": len(batch), "error": str(exc)},
                )
                ok = False
                continue
            errors = response.get("Errors") or []
            if errors or not _is_success(response):
                self.log.warning(
                    "media.store.delete_prefix_partial",
                    extra={"prefix": prefix, "failed_keys": [error.get("Key") for error in errors]},
                )
                ok = False
        self.log.info(
            "media.store.delete_prefix",
            extra={"prefix": prefix, "objects": len(keys), "ok": ok},
        )
        return ok

    def _report(self, response: dict[str, Any], event: str, key: str) -> bool:
        ok = _is_success(response)
        if ok:
            self.log.info(event, extra={"key": key})
        else:
            self.log.warning(f"{event}_rejected", extra={"key": key, "response": response.get("ResponseMetadata")})
        return ok
