"""Request helpers shared by the music and podcast routers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from fastapi import Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from ..api.errors import ApiError
from ..config import UploadLimits

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_upload_limits(request: Request) -> UploadLimits:
    """Fetch upload limits from application state."""
    try:
        return request.app.state.upload_limits  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Upload limits are not configured") from exc


def parse_form(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate form fields, reporting failures like body validation (422)."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


def check_upload(
    upload: UploadFile | None,
    allowed_types: Sequence[str],
    *,
    field_name: str,
) -> UploadFile | None:
    """Reject uploads whose declared content type is not supported."""
    if upload is None or not upload.filename:
        return None
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in allowed_types:
        raise ApiError(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "UnsupportedMediaType",
            f"Invalid {field_name} content type '{content_type}'. Supported types: {', '.join(allowed_types)}",
            {"field": field_name, "content_type": content_type},
        )
    return upload


def require_upload(upload: UploadFile | None, *, field_name: str) -> UploadFile:
    if upload is None:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "MissingFile",
            f"{field_name} is required",
            {"field": field_name},
        )
    return upload
