"""Domain level exceptions and helpers for repository layers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Iterator, Sequence

from sqlalchemy import exc as sa_exc

__all__ = [
    "SeverityLevel",
    "StorageOperation",
    "AppError",
    "NotFoundError",
    "DomainStateError",
    "StorageOperationError",
    "SigningError",
    "InvalidSearchKindError",
    "InvalidSearchArgumentsError",
    "InternalError",
    "RepositoryError",
    "IntegrityConstraintViolation",
    "DatabaseOperationError",
    "handle_sqlalchemy_errors",
]


class SeverityLevel(StrEnum):
    """How serious a storage or internal failure is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class StorageOperation(StrEnum):
    """Object store operation that failed."""

    UPLOAD_FAILED = "upload_failed"
    DELETE_FAILED = "delete_failed"


class AppError(Exception):
    """Base class for application specific errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Structured context exposed to API clients."""
        return {}


class NotFoundError(AppError):
    """Raised when a record could not be located."""

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} '{identifier}' not found")
        self.entity = entity
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": self.identifier}


class DomainStateError(AppError):
    """Raised when a record's conversion status forbids the operation."""

    def __init__(self, message: str, *, state_name: str) -> None:
        super().__init__(message)
        self.state_name = state_name

    def details(self) -> dict[str, Any]:
        return {"state_name": self.state_name}


class StorageOperationError(AppError):
    """Raised when the object store rejects or fails an operation."""

    def __init__(
        self,
        message: str,
        *,
        object_key: str,
        operation: StorageOperation,
        severity: SeverityLevel,
        record_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.object_key = object_key
        self.operation = operation
        self.severity = severity
        self.record_id = record_id

    def details(self) -> dict[str, Any]:
        return {
            "object_key": self.object_key,
            "operation": self.operation.value,
            "severity": self.severity.value,
            "record_id": self.record_id,
        }


class SigningError(AppError):
    """Raised when a read URL could not be produced for an object."""

    def __init__(self, message: str, *, url: str, severity: SeverityLevel = SeverityLevel.HIGH) -> None:
        super().__init__(message)
        self.url = url
        self.severity = severity

    def details(self) -> dict[str, Any]:
        return {"url": self.url, "severity": self.severity.value}


class InvalidSearchKindError(AppError):
    """Raised when a search kind is not supported for the artifact type."""

    def __init__(self, kind: str, valid_kinds: Sequence[str], *, context: str) -> None:
        listed = ", ".join(valid_kinds)
        super().__init__(f"Invalid search kind '{kind}' for {context}. The valid search kinds are: [{listed}]")
        self.kind = kind
        self.valid_kinds = list(valid_kinds)
        self.context = context

    def details(self) -> dict[str, Any]:
        return {"search_kind": self.kind, "valid_kinds": self.valid_kinds, "context": self.context}


class InvalidSearchArgumentsError(AppError):
    """Raised when search arguments have the wrong arity or type."""

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind

    def details(self) -> dict[str, Any]:
        return {"search_kind": self.kind}


class InternalError(AppError):
    """Raised for unexpected local failures (filesystem, serialization)."""

    def __init__(
        self,
        message: str,
        *,
        source: str,
        severity: SeverityLevel = SeverityLevel.HIGH,
        occurred_at: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.severity = severity
        self.occurred_at = occurred_at or datetime.now(timezone.utc)

    def details(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "severity": self.severity.value,
            "occurred_at": self.occurred_at.isoformat(),
        }


class RepositoryError(AppError):
    """Base class for persistence layer failures."""


class IntegrityConstraintViolation(RepositoryError):
    """Raised when a database constraint is violated."""


class DatabaseOperationError(RepositoryError):
    """Raised for unexpected database errors."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> RepositoryError:
    if isinstance(exc, sa_exc.IntegrityError):
        return IntegrityConstraintViolation(context.format("integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        return DatabaseOperationError(context.format("database operation failed"))
    return RepositoryError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.IntegrityError, sa_exc.DBAPIError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
