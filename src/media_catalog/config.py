"""Application configuration builder."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db

THUMBNAIL_CONTENT_TYPES = ("image/png", "image/jpeg", "image/webp")
AUDIO_CONTENT_TYPES = (
    "audio/opus",
    "audio/ogg",
    "audio/flac",
    "audio/mpeg",
    "audio/wav",
    "audio/x-wav",
    "audio/aac",
)


@dataclass(slots=True)
class StagingSettings:
    root: Path
    chunk_size_bytes: int
    ttl_seconds: int


@dataclass(slots=True)
class UploadLimits:
    max_content_bytes: int
    thumbnail_content_types: tuple[str, ...]
    content_content_types: tuple[str, ...]


@dataclass(slots=True)
class ObjectStoreSettings:
    bucket: str
    region: str
    endpoint_url: str | None
    signed_url_ttl_seconds: int


@dataclass(slots=True)
class CdnSettings:
    domain: str
    key_pair_id: str
    private_key_path: Path


@dataclass(slots=True)
class AppConfig:
    staging: StagingSettings
    upload_limits: UploadLimits
    object_store: ObjectStoreSettings
    cdn: CdnSettings | None
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    music_enabled: bool = True
    podcast_enabled: bool = True


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_cdn_settings() -> CdnSettings | None:
    domain = os.getenv("CLOUDFRONT_DOMAIN")
    key_pair_id = os.getenv("CLOUDFRONT_KEY_PAIR_ID")
    key_path = os.getenv("CLOUDFRONT_PRIVATE_KEY_PATH")
    if not (domain and key_pair_id and key_path):
        return None
    return CdnSettings(domain=domain, key_pair_id=key_pair_id, private_key_path=Path(key_path))


DEFAULT_DATABASE_URL = "sqlite:///media_catalog.db"


def database_url_from_env() -> str:
    """Database URL shared by the app and the migration environment."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite and local staging by default)."""
    staging = StagingSettings(
        root=Path(
            os.getenv(
                "STAGING_ROOT",
                str(Path(tempfile.gettempdir()) / "media-catalog" / "uploads"),
            )
        ),
        chunk_size_bytes=int(os.getenv("STAGING_CHUNK_SIZE_BYTES", 1 * 1024 * 1024)),
        ttl_seconds=int(os.getenv("STAGING_TTL_SECONDS", 24 * 60 * 60)),
    )
    staging.root.mkdir(parents=True, exist_ok=True)

    upload_limits = UploadLimits(
        max_content_bytes=int(os.getenv("MAX_CONTENT_BYTES", 100 * 1024 * 1024)),
        thumbnail_content_types=THUMBNAIL_CONTENT_TYPES,
        content_content_types=AUDIO_CONTENT_TYPES,
    )

    object_store = ObjectStoreSettings(
        bucket=os.getenv("S3_BUCKET_NAME", "media-catalog"),
        region=os.getenv("AWS_REGION", "us-east-1"),
        endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        signed_url_ttl_seconds=int(os.getenv("SIGNED_URL_TTL_SECONDS", 3600)),
    )

    database_url = database_url_from_env()
    engine = create_engine(database_url, future=True)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    init_db(engine)

    return AppConfig(
        staging=staging,
        upload_limits=upload_limits,
        object_store=object_store,
        cdn=_load_cdn_settings(),
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        music_enabled=_env_flag("MUSIC_ENABLED", True),
        podcast_enabled=_env_flag("PODCAST_ENABLED", True),
    )
