"""HTTP routes for podcast episodes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import Response

from ..config import UploadLimits
from ..media.media_api import check_upload, get_upload_limits, parse_form, require_upload
from ..media.media_schemas import ContentUrlResponse, MediaErrorView
from ..search.search_models import SearchKind
from .podcast_schemas import PodcastCreate, PodcastUpdate, PodcastView
from .podcast_service import PodcastService

router = APIRouter(prefix="/api/podcasts", tags=["podcasts"])
logger = structlog.get_logger(__name__)


def get_podcast_service(request: Request) -> PodcastService:
    """Fetch podcast service from application state."""
    try:
        return request.app.state.podcast_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("PodcastService is not configured") from exc


@router.get("/content", response_model=ContentUrlResponse)
def get_content_url(
    record_id: str = Query(..., alias="id", min_length=1),
    service: PodcastService = Depends(get_podcast_service),
) -> ContentUrlResponse:
    signed = service.content_url(record_id)
    return ContentUrlResponse(id=record_id, url=signed.url, expires_at=signed.expires_at)


@router.post("", response_model=PodcastView, status_code=status.HTTP_201_CREATED)
async def create_podcast(
    title: str = Form(...),
    presenter: str = Form(...),
    description: str = Form(...),
    categories: list[str] = Form(...),
    guests: list[str] | None = Form(None),
    year: int | None = Form(None),
    explicit: bool = Form(False),
    episode_number: int | None = Form(None),
    season_number: int | None = Form(None),
    thumbnail_file: UploadFile | None = File(None),
    content_file: UploadFile | None = File(None),
    limits: UploadLimits = Depends(get_upload_limits),
    service: PodcastService = Depends(get_podcast_service),
) -> PodcastView:
    thumbnail = require_upload(
        check_upload(thumbnail_file, limits.thumbnail_content_types, field_name="thumbnail_file"),
        field_name="thumbnail_file",
    )
    content = require_upload(
        check_upload(content_file, limits.content_content_types, field_name="content_file"),
        field_name="content_file",
    )
    payload = parse_form(
        PodcastCreate,
        {
            "title": title,
            "presenter": presenter,
            "description": description,
            "categories": categories,
            "guests": guests,
            "year": year,
            "explicit": explicit,
            "episode_number": episode_number,
            "season_number": season_number,
        },
    )
    view = await service.save(payload, thumbnail, content)
    logger.info("podcast.created", record_id=view.id)
    return view


@router.put("", response_model=PodcastView)
async def update_podcast(
    record_id: str = Form(..., alias="id", min_length=1),
    title: str | None = Form(None),
    presenter: str | None = Form(None),
    description: str | None = Form(None),
    categories: list[str] | None = Form(None),
    guests: list[str] | None = Form(None),
    year: int | None = Form(None),
    explicit: bool | None = Form(None),
    episode_number: int | None = Form(None),
    season_number: int | None = Form(None),
    thumbnail_file: UploadFile | None = File(None),
    content_file: UploadFile | None = File(None),
    limits: UploadLimits = Depends(get_upload_limits),
    service: PodcastService = Depends(get_podcast_service),
) -> PodcastView:
    thumbnail = check_upload(thumbnail_file, limits.thumbnail_content_types, field_name="thumbnail_file")
    content = check_upload(content_file, limits.content_content_types, field_name="content_file")
    payload = parse_form(
        PodcastUpdate,
        {
            "title": title,
            "presenter": presenter,
            "description": description,
            "categories": categories,
            "guests": guests,
            "year": year,
            "explicit": explicit,
            "episode_number": episode_number,
            "season_number": season_number,
        },
    )
    return await service.update(record_id, payload.model_dump(exclude_none=True), thumbnail, content)


@router.get("/search", response_model=list[PodcastView])
def search_podcasts(
    title: str | None = Query(None),
    presenter: str | None = Query(None),
    guest: str | None = Query(None),
    year: int | None = Query(None),
    start_year: int | None = Query(None),
    end_year: int | None = Query(None),
    service: PodcastService = Depends(get_podcast_service),
) -> list[PodcastView]:
    """Search by the first provided parameter."""
    return service.smart_search(
        title=title,
        presenter=presenter,
        guest=guest,
        year=year,
        start_year=start_year,
        end_year=end_year,
    )


@router.post("/search/by-guests", response_model=list[PodcastView])
def search_by_guests(
    guests: list[str] = Body(...),
    service: PodcastService = Depends(get_podcast_service),
) -> list[PodcastView]:
    return service.search(SearchKind.GUESTS_IN, *guests)


@router.post("/search/by-categories", response_model=list[PodcastView])
def search_by_categories(
    categories: list[str] = Body(...),
    service: PodcastService = Depends(get_podcast_service),
) -> list[PodcastView]:
    return service.search(SearchKind.CATEGORIES_IN, *categories)


@router.get("/owner/{presenter}", response_model=list[PodcastView | MediaErrorView])
def list_for_presenter(
    presenter: str,
    service: PodcastService = Depends(get_podcast_service),
) -> list[PodcastView | MediaErrorView]:
    return service.find_all_for_owner(presenter)


@router.get("/{record_id}", response_model=PodcastView)
def get_podcast(
    record_id: str,
    service: PodcastService = Depends(get_podcast_service),
) -> PodcastView:
    return service.find_by_id(record_id)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_podcast(
    record_id: str,
    service: PodcastService = Depends(get_podcast_service),
) -> Response:
    await service.delete(record_id)
    logger.info("podcast.deleted", record_id=record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
