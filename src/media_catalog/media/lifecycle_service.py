"""Conversion-status state machine shared by music and podcast services."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from ..exceptions import (
    DomainStateError,
    InvalidSearchArgumentsError,
    NotFoundError,
    RepositoryError,
    SeverityLevel,
    StorageOperation,
    StorageOperationError,
)
from ..repositories.catalog_repository import CatalogRepository
from ..search.search_dispatcher import SearchDispatcher
from ..search.search_models import SearchArg, SearchCriterion, SearchKind, SearchRule
from .media_models import (
    DEFAULT_CONTENT_NAME,
    DEFAULT_THUMBNAIL_NAME,
    ConversionStatus,
    MediaErrorType,
    MediaRecord,
    SignedUrl,
    UploadUnit,
)
from .media_schemas import MediaErrorView, MediaSuccessView
from .object_store import ObjectStore
from .staging_area import StagingArea, UploadStream
from .upload_coordinator import UploadCoordinator
from .url_signer import UrlSigner

RecordT = TypeVar("RecordT", bound=MediaRecord)
ViewT = TypeVar("ViewT", bound=MediaSuccessView)

PENDING_MESSAGE = "Conversion is still pending"
FAILED_MESSAGE = "Conversion failed"

# Fields a client may change through ``update``; identity, status and object names stay server-owned.
_SERVER_OWNED_FIELDS = frozenset(
    {"id", "conversion_status", "thumbnail_suffix", "content_key", "published_at"}
)


@dataclass(slots=True)
class MediaLifecycleService(Generic[RecordT, ViewT]):
    """Owns save/update/delete/find for one artifact type.

    Records start PENDING, become SUCCESS once the upload coordinator has
    written every object of the unit, and ERROR when staging or the upload
    fails. Only SUCCESS records are readable; PENDING records cannot be
    updated or deleted. There is no per-id lock: concurrent update and
    delete on the same id may interleave.
    """

    entity: ClassVar[str] = "media"

    repository: CatalogRepository[Any, RecordT]
    staging: StagingArea
    coordinator: UploadCoordinator
    store: ObjectStore
    signer: UrlSigner
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    dispatcher: SearchDispatcher = field(init=False)

    def __post_init__(self) -> None:
        self.dispatcher = SearchDispatcher(context=self.entity, rules=self.search_rules())

    # ------------------------------------------------------------------
    # Type-specific hooks
    # ------------------------------------------------------------------
    def build_record(self, payload: BaseModel) -> RecordT:
        raise NotImplementedError

    def build_view(self, record: RecordT, thumbnail_url: str) -> ViewT:
        raise NotImplementedError

    def search_rules(self) -> Mapping[SearchKind, SearchRule]:
        raise NotImplementedError

    def find_owned_by(self, owner: str) -> list[RecordT]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Write paths
    # ------------------------------------------------------------------
    async def save(
        self,
        payload: BaseModel,
        thumbnail: UploadStream | None = None,
        content: UploadStream | None = None,
    ) -> ViewT:
        """Persist a PENDING record, upload its files and return the public view."""
        record = self.build_record(payload)
        record.conversion_status = ConversionStatus.PENDING
        self.repository.save(record)
        self.log.info("media.record.created", extra={"entity": self.entity, "record_id": record.id})

        await self._upload(record, thumbnail, content)
        return self.to_public_view(record)

    async def update(
        self,
        record_id: str,
        changes: Mapping[str, Any],
        thumbnail: UploadStream | None = None,
        content: UploadStream | None = None,
    ) -> ViewT:
        """Apply non-null ``changes`` and re-run the upload for the record.

        A record left in ERROR has no stored files behind it, so it can only
        be updated together with a new thumbnail and content file.
        """
        record = self._require(record_id)
        if record.conversion_status is ConversionStatus.PENDING:
            raise DomainStateError(
                f"{self.entity} '{record_id}' cannot be updated while its conversion is pending",
                state_name="pending",
            )
        if record.conversion_status is ConversionStatus.ERROR and (thumbnail is None or content is None):
            raise DomainStateError(
                f"{self.entity} '{record_id}' failed conversion; both files must be uploaded again",
                state_name="error",
            )

        self._apply_changes(record, changes)
        record.conversion_status = ConversionStatus.PENDING
        self.repository.save(record)
        self.log.info("media.record.updating", extra={"entity": self.entity, "record_id": record_id})

        await self._upload(record, thumbnail, content)
        return self.to_public_view(record)

    async def delete(self, record_id: str) -> None:
        """Remove stored objects, then the record.

        Not atomic across the two stores: when the record delete fails after
        the objects are gone, the record is left without objects and the
        error propagates.
        """
        record = self._require(record_id)
        if record.conversion_status is ConversionStatus.PENDING:
            raise DomainStateError(
                f"{self.entity} '{record_id}' cannot be deleted while its conversion is pending",
                state_name="pending",
            )

        prefix = f"{record_id}/"
        if not await self.store.delete_prefix(prefix):
            raise StorageOperationError(
                f"Failed to delete stored objects of {self.entity} '{record_id}'",
                object_key=prefix,
                operation=StorageOperation.DELETE_FAILED,
                severity=SeverityLevel.MEDIUM,
                record_id=record_id,
            )

        try:
            self.repository.delete(record_id)
        except KeyError:
            self.log.warning("media.record.already_deleted", extra={"entity": self.entity, "record_id": record_id})
            return
        except RepositoryError:
            self.log.error("media.record.orphaned", extra={"entity": self.entity, "record_id": record_id})
            raise
        self.log.info("media.record.deleted", extra={"entity": self.entity, "record_id": record_id})

    # ------------------------------------------------------------------
    # Read paths
    # ------------------------------------------------------------------
    def find_by_id(self, record_id: str) -> ViewT:
        record = self._require(record_id)
        self._ensure_readable(record)
        return self.to_public_view(record)

    def content_url(self, record_id: str) -> SignedUrl:
        """Freshly signed URL for the record's content object."""
        record = self._require(record_id)
        self._ensure_readable(record)
        return self.signer.presign_read(record.content_object_key)

    def find_all_for_owner(self, owner: str) -> list[ViewT | MediaErrorView]:
        return self.list_with_errors_wrapped(self.find_owned_by(owner))

    def search(self, kind: SearchKind | str, *args: SearchArg) -> list[ViewT]:
        records = self.dispatcher.resolve(SearchCriterion(kind=kind, args=tuple(args)))
        return self.list_success_only(records)

    def search_first_given(self, candidates: Sequence[tuple[str, SearchKind, tuple[Any, ...]]]) -> list[ViewT]:
        """Dispatch the first candidate whose arguments are all present.

        ``candidates`` holds ``(parameter label, kind, args)`` in priority order.
        """
        for _, kind, args in candidates:
            if args and all(value not in (None, "") for value in args):
                return self.search(kind, *args)
        labels = ", ".join(label for label, _, _ in candidates)
        raise InvalidSearchArgumentsError(
            f"No search parameter provided, expected one of: {labels}",
        )

    def list_with_errors_wrapped(self, records: Iterable[RecordT]) -> list[ViewT | MediaErrorView]:
        """Success views for SUCCESS records, error views for PENDING and ERROR ones."""
        views: list[ViewT | MediaErrorView] = []
        for record in self._dedupe(records):
            status = record.conversion_status
            if status is None:
                continue
            if status is ConversionStatus.PENDING:
                views.append(
                    MediaErrorView(
                        id=record.id,
                        message=PENDING_MESSAGE,
                        error_type=MediaErrorType.CONVERSION_PENDING,
                    )
                )
            elif status is ConversionStatus.ERROR:
                views.append(
                    MediaErrorView(
                        id=record.id,
                        message=FAILED_MESSAGE,
                        error_type=MediaErrorType.CONVERSION_FAILED,
                    )
                )
            else:
                views.append(self.to_public_view(record))
        return views

    def list_success_only(self, records: Iterable[RecordT]) -> list[ViewT]:
        return [
            self.to_public_view(record)
            for record in self._dedupe(records)
            if record.conversion_status is ConversionStatus.SUCCESS
        ]

    def to_public_view(self, record: RecordT) -> ViewT:
        signed = self.signer.presign_read(record.thumbnail_object_key)
        return self.build_view(record, signed.url)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _upload(
        self,
        record: RecordT,
        thumbnail: UploadStream | None,
        content: UploadStream | None,
    ) -> None:
        if record.id is None:
            raise TypeError(f"{self.entity} record must have an id before upload")
        try:
            staged = await self.staging.stage(record.id, thumbnail, content)
            thumbnail_path, content_path = self._split_staged(staged)
            if thumbnail_path is not None:
                record.thumbnail_suffix = thumbnail_path.name
            if content_path is not None:
                record.content_key = content_path.name
            unit = UploadUnit(
                record_id=record.id,
                metadata=record.metadata(),
                thumbnail=thumbnail_path,
                content=content_path,
            )
            await self.coordinator.upload(unit)
        except Exception as exc:
            self._mark_error(record, exc)
            raise
        finally:
            self.staging.cleanup(record.id)

        record.conversion_status = ConversionStatus.SUCCESS
        self.repository.save(record)
        self.log.info("media.record.converted", extra={"entity": self.entity, "record_id": record.id})

    def _mark_error(self, record: RecordT, cause: Exception) -> None:
        record.conversion_status = ConversionStatus.ERROR
        try:
            self.repository.save(record)
        except RepositoryError:
            self.log.exception(
                "media.record.mark_error_failed",
                extra={"entity": self.entity, "record_id": record.id},
            )
        self.log.warning(
            "media.record.conversion_failed",
            extra={"entity": self.entity, "record_id": record.id, "error": str(cause)},
        )

    def _require(self, record_id: str) -> RecordT:
        record = self.repository.get(record_id)
        if record is None:
            raise NotFoundError(self.entity, record_id)
        return record

    def _ensure_readable(self, record: RecordT) -> None:
        status = record.conversion_status
        if status is ConversionStatus.SUCCESS:
            return
        if status is ConversionStatus.PENDING:
            raise DomainStateError(f"{self.entity} '{record.id}' conversion is still pending", state_name="pending")
        if status is ConversionStatus.ERROR:
            raise DomainStateError(f"{self.entity} '{record.id}' conversion failed", state_name="error")
        raise DomainStateError(f"{self.entity} '{record.id}' has no conversion status", state_name="null")

    @staticmethod
    def _apply_changes(record: MediaRecord, changes: Mapping[str, Any]) -> None:
        for name, value in changes.items():
            if value is None or name in _SERVER_OWNED_FIELDS:
                continue
            if not hasattr(record, name):
                raise ValueError(f"Unknown field '{name}'")
            setattr(record, name, value)

    @staticmethod
    def _split_staged(staged: list[Path]) -> tuple[Path | None, Path | None]:
        thumbnail = next((path for path in staged if path.stem == DEFAULT_THUMBNAIL_NAME), None)
        content = next((path for path in staged if path.stem == DEFAULT_CONTENT_NAME), None)
        return thumbnail, content

    @staticmethod
    def _dedupe(records: Iterable[RecordT]) -> list[RecordT]:
        seen: set[str | None] = set()
        unique: list[RecordT] = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        return unique
