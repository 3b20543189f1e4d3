import json

import pytest

from src.media_catalog.api.errors import ApiError, status_for, to_api_error
from src.media_catalog.exceptions import (
    AppError,
    DatabaseOperationError,
    DomainStateError,
    InternalError,
    InvalidSearchArgumentsError,
    InvalidSearchKindError,
    NotFoundError,
    SeverityLevel,
    SigningError,
    StorageOperation,
    StorageOperationError,
)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (NotFoundError("music", "x"), 404),
        (DomainStateError("pending", state_name="pending"), 400),
        (InvalidSearchKindError("COLOUR", ["TITLE"], context="music"), 400),
        (InvalidSearchArgumentsError("bad"), 400),
        (
            StorageOperationError(
                "boom",
                object_key="r/content.mp3",
                operation=StorageOperation.UPLOAD_FAILED,
                severity=SeverityLevel.MEDIUM,
            ),
            500,
        ),
        (SigningError("nope", url="https://cdn"), 500),
        (InternalError("disk", source="staging.content"), 500),
        (DatabaseOperationError("music: database operation failed"), 500),
        (AppError("generic"), 500),
    ],
)
def test_status_mapping(error: AppError, expected: int) -> None:
    assert status_for(error) == expected


def test_api_error_body_carries_type_message_and_details() -> None:
    error = to_api_error(InvalidSearchKindError("COLOUR", ["TITLE", "YEAR"], context="music"))

    response = error.to_response()
    body = json.loads(response.body)

    assert response.status_code == 400
    assert body["message"] == "InvalidSearchKindError"
    assert body["error_message"].endswith("The valid search kinds are: [TITLE, YEAR]")
    assert body["details"] == {"search_kind": "COLOUR", "valid_kinds": ["TITLE", "YEAR"], "context": "music"}
    assert "timestamp" in body


def test_storage_error_details_include_severity() -> None:
    error = to_api_error(
        StorageOperationError(
            "Content file is too large",
            object_key="r/content.mp3",
            operation=StorageOperation.UPLOAD_FAILED,
            severity=SeverityLevel.LOW,
            record_id="r",
        )
    )

    assert error.details == {
        "object_key": "r/content.mp3",
        "operation": "upload_failed",
        "severity": "low",
        "record_id": "r",
    }


def test_api_error_defaults_to_empty_details() -> None:
    body = json.loads(ApiError(418, "Teapot", "short and stout").to_response().body)

    assert body["details"] == {}
