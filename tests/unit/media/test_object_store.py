from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import boto3
import pytest
from botocore.stub import ANY, Stubber

from src.media_catalog.exceptions import SigningError
from src.media_catalog.media.object_store import S3ObjectStore


def _ok(status_code: int = 200) -> dict[str, Any]:
    return {"ResponseMetadata": {"HTTPStatusCode": status_code}}


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.mark.asyncio
async def test_put_string_reports_success(s3_client) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_response(
            "put_object",
            _ok(),
            {"Bucket": "media", "Key": "r/metadata.json", "Body": b"{}", "ContentType": "application/json"},
        )
        assert await store.put_string("r/metadata.json", "application/json", "{}") is True
        stub.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_put_file_guesses_content_type(s3_client, tmp_path: Path) -> None:
    path = tmp_path / "content.mp3"
    path.write_bytes(b"audio")
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_response(
            "put_object",
            _ok(),
            {"Bucket": "media", "Key": "r/content.mp3", "Body": ANY, "ContentType": "audio/mpeg"},
        )
        assert await store.put_file("r/content.mp3", path) is True


@pytest.mark.asyncio
async def test_backend_errors_become_false(s3_client, tmp_path: Path) -> None:
    path = tmp_path / "thumbnail.png"
    path.write_bytes(b"png")
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        stub.add_client_error("delete_object", service_error_code="InternalError", http_status_code=500)
        assert await store.put_file("r/thumbnail.png", path) is False
        assert await store.delete("r/thumbnail.png") is False


@pytest.mark.asyncio
async def test_missing_local_file_is_reported_as_failed_put(s3_client, tmp_path: Path) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media")

    assert await store.put_file("r/content.mp3", tmp_path / "missing.mp3") is False


@pytest.mark.asyncio
async def test_delete_prefix_removes_every_listed_object(s3_client) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_response(
            "list_objects_v2",
            {"Contents": [{"Key": "r/thumbnail.png"}, {"Key": "r/metadata.json"}], "IsTruncated": False},
            {"Bucket": "media", "Prefix": "r/"},
        )
        stub.add_response(
            "delete_objects",
            {"Deleted": [{"Key": "r/thumbnail.png"}, {"Key": "r/metadata.json"}], **_ok()},
            {
                "Bucket": "media",
                "Delete": {
                    "Objects": [{"Key": "r/thumbnail.png"}, {"Key": "r/metadata.json"}],
                    "Quiet": True,
                },
            },
        )
        assert await store.delete_prefix("r/") is True
        stub.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_delete_prefix_reports_partial_failure(s3_client) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_response(
            "list_objects_v2",
            {"Contents": [{"Key": "r/content.mp3"}], "IsTruncated": False},
            {"Bucket": "media", "Prefix": "r/"},
        )
        stub.add_response(
            "delete_objects",
            {"Errors": [{"Key": "r/content.mp3", "Code": "AccessDenied", "Message": "denied"}], **_ok()},
            {"Bucket": "media", "Delete": {"Objects": [{"Key": "r/content.mp3"}], "Quiet": True}},
        )
        assert await store.delete_prefix("r/") is False


@pytest.mark.asyncio
async def test_delete_prefix_with_nothing_stored_succeeds(s3_client) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media")
    with Stubber(s3_client) as stub:
        stub.add_response("list_objects_v2", {"IsTruncated": False}, {"Bucket": "media", "Prefix": "r/"})
        assert await store.delete_prefix("r/") is True


def test_presign_read_signs_bucket_key_with_expiry(s3_client) -> None:
    store = S3ObjectStore(client=s3_client, bucket="media", signed_url_ttl_seconds=600)
    before = datetime.now(timezone.utc)

    signed = store.presign_read("r/thumbnail.png")

    assert "media" in signed.url
    assert "r/thumbnail.png" in signed.url
    assert timedelta(seconds=599) <= signed.expires_at - before <= timedelta(seconds=601)


def test_presign_read_wraps_backend_errors() -> None:
    from botocore.exceptions import NoCredentialsError

    class _Client:
        def generate_presigned_url(self, *args: Any, **kwargs: Any) -> str:
            raise NoCredentialsError()

    store = S3ObjectStore(client=_Client(), bucket="media")

    with pytest.raises(SigningError):
        store.presign_read("r/thumbnail.png")


@pytest.mark.asyncio
async def test_put_file_deferred_returns_task_with_result(tmp_path: Path) -> None:
    calls: list[tuple[str, str, str, dict[str, str]]] = []

    class _Client:
        def upload_file(self, filename: str, bucket: str, key: str, ExtraArgs: dict[str, str]) -> None:
            calls.append((filename, bucket, key, ExtraArgs))

    path = tmp_path / "content.flac"
    path.write_bytes(b"big")
    store = S3ObjectStore(client=_Client(), bucket="media")

    result = await store.put_file_deferred("r/content.flac", path)

    assert result.ok is True
    assert result.key == "r/content.flac"
    assert calls[0][:3] == (str(path), "media", "r/content.flac")


@pytest.mark.asyncio
async def test_put_file_deferred_reports_failure(tmp_path: Path) -> None:
    from boto3.exceptions import S3UploadFailedError

    class _Client:
        def upload_file(self, *args: Any, **kwargs: Any) -> None:
            raise S3UploadFailedError("multipart aborted")

    store = S3ObjectStore(client=_Client(), bucket="media")

    result = await store.put_file_deferred("r/content.flac", tmp_path / "content.flac")

    assert result.ok is False
    assert "multipart aborted" in (result.error or "")
