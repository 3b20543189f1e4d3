"""Dependency wiring helpers."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .api.errors import register_exception_handlers
from .config import AppConfig
from .media.object_store import ObjectStore, S3ObjectStore
from .media.staging_area import StagingArea
from .media.upload_coordinator import UploadCoordinator
from .media.url_signer import CloudFrontUrlSigner, UrlSigner
from .music.music_api import router as music_router
from .music.music_service import MusicService
from .podcast.podcast_api import router as podcast_router
from .podcast.podcast_service import PodcastService
from .repositories.music_repository import MusicRepository
from .repositories.podcast_repository import PodcastRepository

logger = logging.getLogger(__name__)


def build_signer(config: AppConfig, store: ObjectStore) -> UrlSigner:
    """CloudFront when configured, otherwise S3 presigned URLs."""
    if config.cdn is None:
        return store
    return CloudFrontUrlSigner.from_settings(
        config.cdn,
        ttl_seconds=config.object_store.signed_url_ttl_seconds,
    )


def include_routers(app: FastAPI, config: AppConfig, *, store: ObjectStore | None = None) -> None:
    """Mount module routers and attach services."""
    store = store or S3ObjectStore.from_settings(config.object_store)
    signer = build_signer(config, store)
    staging = StagingArea(root=config.staging.root, chunk_size=config.staging.chunk_size_bytes)
    coordinator = UploadCoordinator(store=store, max_content_bytes=config.upload_limits.max_content_bytes)

    app.state.config = config
    app.state.upload_limits = config.upload_limits
    app.state.staging_area = staging

    register_exception_handlers(app)

    if config.music_enabled:
        app.state.music_service = MusicService(
            repository=MusicRepository(config.session_factory),
            staging=staging,
            coordinator=coordinator,
            store=store,
            signer=signer,
        )
        app.include_router(music_router)

    if config.podcast_enabled:
        app.state.podcast_service = PodcastService(
            repository=PodcastRepository(config.session_factory),
            staging=staging,
            coordinator=coordinator,
            store=store,
            signer=signer,
        )
        app.include_router(podcast_router)

    logger.info(
        "app.routers.included",
        extra={
            "music": config.music_enabled,
            "podcast": config.podcast_enabled,
            "signer": type(signer).__name__,
        },
    )
