"""HTTP routes for music tracks."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import Response

from ..config import UploadLimits
from ..media.media_api import check_upload, get_upload_limits, parse_form, require_upload
from ..media.media_schemas import ContentUrlResponse, MediaErrorView
from ..search.search_models import SearchKind
from .music_schemas import MusicCreate, MusicUpdate, MusicView
from .music_service import MusicService

router = APIRouter(prefix="/api/music", tags=["music"])
logger = structlog.get_logger(__name__)


def get_music_service(request: Request) -> MusicService:
    """Fetch music service from application state."""
    try:
        return request.app.state.music_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("MusicService is not configured") from exc


@router.get("/content", response_model=ContentUrlResponse)
def get_content_url(
    record_id: str = Query(..., alias="id", min_length=1),
    service: MusicService = Depends(get_music_service),
) -> ContentUrlResponse:
    """Return a freshly signed URL for the track's audio."""
    signed = service.content_url(record_id)
    return ContentUrlResponse(id=record_id, url=signed.url, expires_at=signed.expires_at)


@router.post("", response_model=MusicView, status_code=status.HTTP_201_CREATED)
async def create_music(
    title: str = Form(...),
    artist: str = Form(...),
    genre: str = Form(...),
    moods: list[str] = Form(...),
    album: str = Form(""),
    feats: list[str] | None = Form(None),
    year: int | None = Form(None),
    explicit: bool = Form(False),
    thumbnail_file: UploadFile | None = File(None),
    content_file: UploadFile | None = File(None),
    limits: UploadLimits = Depends(get_upload_limits),
    service: MusicService = Depends(get_music_service),
) -> MusicView:
    thumbnail = require_upload(
        check_upload(thumbnail_file, limits.thumbnail_content_types, field_name="thumbnail_file"),
        field_name="thumbnail_file",
    )
    content = require_upload(
        check_upload(content_file, limits.content_content_types, field_name="content_file"),
        field_name="content_file",
    )
    payload = parse_form(
        MusicCreate,
        {
            "title": title,
            "artist": artist,
            "genre": genre,
            "moods": moods,
            "album": album,
            "feats": feats,
            "year": year,
            "explicit": explicit,
        },
    )
    view = await service.save(payload, thumbnail, content)
    logger.info("music.created", record_id=view.id)
    return view


@router.put("", response_model=MusicView)
async def update_music(
    record_id: str = Form(..., alias="id", min_length=1),
    title: str | None = Form(None),
    artist: str | None = Form(None),
    genre: str | None = Form(None),
    moods: list[str] | None = Form(None),
    album: str | None = Form(None),
    feats: list[str] | None = Form(None),
    year: int | None = Form(None),
    explicit: bool | None = Form(None),
    thumbnail_file: UploadFile | None = File(None),
    content_file: UploadFile | None = File(None),
    limits: UploadLimits = Depends(get_upload_limits),
    service: MusicService = Depends(get_music_service),
) -> MusicView:
    thumbnail = check_upload(thumbnail_file, limits.thumbnail_content_types, field_name="thumbnail_file")
    content = check_upload(content_file, limits.content_content_types, field_name="content_file")
    payload = parse_form(
        MusicUpdate,
        {
            "title": title,
            "artist": artist,
            "genre": genre,
            "moods": moods,
            "album": album,
            "feats": feats,
            "year": year,
            "explicit": explicit,
        },
    )
    return await service.update(record_id, payload.model_dump(exclude_none=True), thumbnail, content)


@router.get("/search", response_model=list[MusicView])
def search_music(
    title: str | None = Query(None),
    artist: str | None = Query(None),
    album: str | None = Query(None),
    feat: str | None = Query(None),
    genre: str | None = Query(None),
    year: int | None = Query(None),
    start_year: int | None = Query(None),
    end_year: int | None = Query(None),
    service: MusicService = Depends(get_music_service),
) -> list[MusicView]:
    """Search by the first provided parameter."""
    return service.smart_search(
        title=title,
        artist=artist,
        album=album,
        feat=feat,
        genre=genre,
        year=year,
        start_year=start_year,
        end_year=end_year,
    )


@router.post("/search/by-feats", response_model=list[MusicView])
def search_by_feats(
    feats: list[str] = Body(...),
    service: MusicService = Depends(get_music_service),
) -> list[MusicView]:
    return service.search(SearchKind.FEAT_IN, *feats)


@router.post("/search/by-moods", response_model=list[MusicView])
def search_by_moods(
    moods: list[str] = Body(...),
    service: MusicService = Depends(get_music_service),
) -> list[MusicView]:
    return service.search(SearchKind.MOODS_IN, *moods)


@router.get("/owner/{artist}", response_model=list[MusicView | MediaErrorView])
def list_for_artist(
    artist: str,
    service: MusicService = Depends(get_music_service),
) -> list[MusicView | MediaErrorView]:
    """All tracks of an artist, including pending and failed ones as error entries."""
    return service.find_all_for_owner(artist)


@router.get("/{record_id}", response_model=MusicView)
def get_music(
    record_id: str,
    service: MusicService = Depends(get_music_service),
) -> MusicView:
    return service.find_by_id(record_id)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_music(
    record_id: str,
    service: MusicService = Depends(get_music_service),
) -> Response:
    await service.delete(record_id)
    logger.info("music.deleted", record_id=record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
