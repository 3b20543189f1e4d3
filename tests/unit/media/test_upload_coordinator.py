from pathlib import Path

import pytest

from src.media_catalog.exceptions import (
    InternalError,
    SeverityLevel,
    StorageOperation,
    StorageOperationError,
)
from src.media_catalog.media.media_models import UploadUnit
from src.media_catalog.media.upload_coordinator import UploadCoordinator
from tests.helpers.catalog import FakeObjectStore


def _write(path: Path, size: int = 16) -> Path:
    path.write_bytes(b"x" * size)
    return path


def _unit(tmp_path: Path, *, thumbnail: bool = True, content: bool = True, content_size: int = 16) -> UploadUnit:
    return UploadUnit(
        record_id="rec1",
        metadata={"id": "rec1", "title": "Song"},
        thumbnail=_write(tmp_path / "thumbnail.png") if thumbnail else None,
        content=_write(tmp_path / "content.mp3", content_size) if content else None,
    )


@pytest.mark.asyncio
async def test_upload_writes_files_then_metadata(tmp_path: Path) -> None:
    store = FakeObjectStore()
    coordinator = UploadCoordinator(store=store)

    await coordinator.upload(_unit(tmp_path))

    assert store.put_calls == ["rec1/thumbnail.png", "rec1/content.mp3", "rec1/metadata.json"]
    assert store.objects["rec1/metadata.json"] == b'{"id": "rec1", "title": "Song"}'
    assert store.delete_calls == []


@pytest.mark.asyncio
async def test_upload_without_files_writes_only_metadata(tmp_path: Path) -> None:
    store = FakeObjectStore()

    await UploadCoordinator(store=store).upload(_unit(tmp_path, thumbnail=False, content=False))

    assert store.put_calls == ["rec1/metadata.json"]


@pytest.mark.asyncio
async def test_content_at_threshold_is_refused_before_any_put(tmp_path: Path) -> None:
    store = FakeObjectStore()
    coordinator = UploadCoordinator(store=store, max_content_bytes=64)

    with pytest.raises(StorageOperationError) as excinfo:
        await coordinator.upload(_unit(tmp_path, content_size=64))

    assert store.put_calls == []
    assert excinfo.value.severity is SeverityLevel.LOW
    assert excinfo.value.operation is StorageOperation.UPLOAD_FAILED
    assert "too large" in excinfo.value.message


@pytest.mark.asyncio
async def test_content_below_threshold_is_accepted(tmp_path: Path) -> None:
    store = FakeObjectStore()

    await UploadCoordinator(store=store, max_content_bytes=64).upload(_unit(tmp_path, content_size=63))

    assert "rec1/content.mp3" in store.objects


@pytest.mark.asyncio
async def test_failed_content_put_rolls_back_thumbnail(tmp_path: Path) -> None:
    store = FakeObjectStore(fail_put=lambda key: key.endswith("content.mp3"))

    with pytest.raises(StorageOperationError) as excinfo:
        await UploadCoordinator(store=store).upload(_unit(tmp_path))

    assert store.delete_calls == ["rec1/thumbnail.png"]
    assert store.keys_for("rec1") == set()
    assert "rec1/metadata.json" not in store.put_calls
    assert excinfo.value.object_key == "rec1/content.mp3"
    assert excinfo.value.record_id == "rec1"
    assert excinfo.value.severity is SeverityLevel.MEDIUM


@pytest.mark.asyncio
async def test_first_file_failure_has_nothing_to_roll_back(tmp_path: Path) -> None:
    store = FakeObjectStore(fail_put=lambda key: key.endswith("thumbnail.png"))

    with pytest.raises(StorageOperationError):
        await UploadCoordinator(store=store).upload(_unit(tmp_path))

    assert store.put_calls == ["rec1/thumbnail.png"]
    assert store.delete_calls == []


@pytest.mark.asyncio
async def test_failed_metadata_put_rolls_back_every_file(tmp_path: Path) -> None:
    store = FakeObjectStore(fail_put=lambda key: key.endswith("metadata.json"))

    with pytest.raises(StorageOperationError) as excinfo:
        await UploadCoordinator(store=store).upload(_unit(tmp_path))

    assert store.delete_calls == ["rec1/thumbnail.png", "rec1/content.mp3"]
    assert store.keys_for("rec1") == set()
    assert excinfo.value.severity is SeverityLevel.HIGH
    assert excinfo.value.object_key == "rec1/metadata.json"


@pytest.mark.asyncio
async def test_rollback_continues_past_failed_deletion_and_keeps_original_error(tmp_path: Path) -> None:
    unit = _unit(tmp_path)
    store = FakeObjectStore(
        fail_put=lambda key: key.endswith("metadata.json"),
        fail_delete=lambda key: key.endswith("thumbnail.png"),
    )

    with pytest.raises(StorageOperationError) as excinfo:
        await UploadCoordinator(store=store).upload(unit)

    assert store.delete_calls == ["rec1/thumbnail.png", "rec1/content.mp3"]
    assert store.keys_for("rec1") == {"rec1/thumbnail.png"}
    assert excinfo.value.object_key == "rec1/metadata.json"


@pytest.mark.asyncio
async def test_rollback_runs_when_store_raises(tmp_path: Path) -> None:
    class RaisingStore(FakeObjectStore):
        async def put_file(self, key: str, path: Path) -> bool:
            if key.endswith("content.mp3"):
                raise RuntimeError("connection reset")
            return await super().put_file(key, path)

    store = RaisingStore()

    with pytest.raises(RuntimeError, match="connection reset"):
        await UploadCoordinator(store=store).upload(_unit(tmp_path))

    assert store.delete_calls == ["rec1/thumbnail.png"]


@pytest.mark.asyncio
async def test_unserializable_metadata_is_critical_and_uploads_nothing(tmp_path: Path) -> None:
    store = FakeObjectStore()
    unit = _unit(tmp_path)
    unit.metadata["bad"] = object()

    with pytest.raises(InternalError) as excinfo:
        await UploadCoordinator(store=store).upload(unit)

    assert excinfo.value.severity is SeverityLevel.CRITICAL
    assert store.put_calls == []
