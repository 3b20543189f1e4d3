"""Data structures shared by the media lifecycle."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar

DEFAULT_THUMBNAIL_NAME = "thumbnail"
DEFAULT_CONTENT_NAME = "content"
METADATA_OBJECT_NAME = "metadata.json"

_TAG_SEPARATORS = re.compile(r"[\s_&\-]+")


class ConversionStatus(StrEnum):
    """Lifecycle statuses of a media record."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class MediaErrorType(StrEnum):
    """Reasons a record is reported through an error view."""

    CONVERSION_FAILED = "conversion_failed"
    CONVERSION_PENDING = "conversion_pending"
    NOT_FOUND = "not_found"


def _normalize_tag(text: str) -> str:
    words = [word for word in _TAG_SEPARATORS.split(text.strip().lower()) if word and word != "and"]
    return "".join(words)


class CatalogTag(StrEnum):
    """Enum whose value is the display name; parsed leniently from user input."""

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> Any:
        """Resolve ``text`` ("hip hop", "R&B", "society_and_culture") to a member."""
        if isinstance(text, cls):
            return text
        wanted = _normalize_tag(str(text))
        for member in cls:
            if wanted and wanted in (_normalize_tag(member.name), _normalize_tag(member.value)):
                return member
        raise ValueError(f"Invalid value '{text}' for {cls.__name__}")


class Genre(CatalogTag):
    ROCK = "Rock"
    POP = "Pop"
    JAZZ = "Jazz"
    CLASSICAL = "Classical"
    HIP_HOP = "Hip-Hop"
    COUNTRY = "Country"
    REGGAE = "Reggae"
    BLUES = "Blues"
    ELECTRONIC = "Electronic"
    FOLK = "Folk"
    METAL = "Metal"
    PUNK = "Punk"
    R_AND_B = "R&B"
    SOUL = "Soul"
    FUNK = "Funk"
    GOSPEL = "Gospel"
    INDIE = "Indie"
    ALTERNATIVE_ROCK = "Alternative Rock"


class Mood(CatalogTag):
    HAPPY = "Happy"
    SAD = "Sad"
    CALM = "Calm"
    EXCITED = "Excited"
    RELAXED = "Relaxed"
    MOTIVATED = "Motivated"
    NOSTALGIC = "Nostalgic"
    ROMANTIC = "Romantic"
    ENERGETIC = "Energetic"
    MELANCHOLIC = "Melancholic"
    PEACEFUL = "Peaceful"
    INTENSE = "Intense"
    CHILLED = "Chilled"
    FUNKY = "Funky"
    SOULFUL = "Soulful"
    DREAMY = "Dreamy"
    SPIRITUAL = "Spiritual"
    MYSTERIOUS = "Mysterious"
    DARK = "Dark"
    PLAYFUL = "Playful"
    SERENE = "Serene"
    VIBRANT = "Vibrant"


class Category(CatalogTag):
    COMEDY = "Comedy"
    EDUCATION = "Education"
    BUSINESS = "Business"
    TECHNOLOGY = "Technology"
    HEALTH = "Health"
    NEWS = "News"
    SPORTS = "Sports"
    ARTS = "Arts"
    SCIENCE = "Science"
    SOCIETY_CULTURE = "Society & Culture"


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class MediaRecord:
    """Persisted catalog entry; ``id`` is assigned by the repository."""

    collection_name: ClassVar[str] = "media"

    title: str = ""
    id: str | None = None
    year: int = field(default_factory=_current_year)
    explicit: bool = False
    duration: str = "00:00:00"
    published_at: datetime = field(default_factory=_utcnow)
    thumbnail_suffix: str = DEFAULT_THUMBNAIL_NAME
    content_key: str = DEFAULT_CONTENT_NAME
    conversion_status: ConversionStatus | None = ConversionStatus.PENDING

    def object_key(self, name: str) -> str:
        return f"{self.id}/{name}"

    @property
    def thumbnail_object_key(self) -> str:
        return self.object_key(self.thumbnail_suffix)

    @property
    def content_object_key(self) -> str:
        return self.object_key(self.content_key)

    def metadata(self) -> dict[str, Any]:
        """Public summary uploaded next to the binaries."""
        return {"id": self.id, "title": self.title, "year": self.year}


@dataclass(slots=True)
class MusicRecord(MediaRecord):
    collection_name: ClassVar[str] = "music"

    artist: str = ""
    album: str = ""
    feats: list[str] = field(default_factory=list)
    genre: Genre | None = None
    moods: list[Mood] = field(default_factory=list)

    def metadata(self) -> dict[str, Any]:
        payload = MediaRecord.metadata(self)
        payload.update(
            {
                "artist": self.artist,
                "album": self.album,
                "genre": self.genre.display_name if self.genre else None,
                "type": "music",
                "collection_name": self.collection_name,
            }
        )
        return payload


@dataclass(slots=True)
class PodcastRecord(MediaRecord):
    collection_name: ClassVar[str] = "podcast"

    presenter: str = ""
    description: str = ""
    guests: list[str] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    episode_number: int = 1
    season_number: int = 1

    def metadata(self) -> dict[str, Any]:
        payload = MediaRecord.metadata(self)
        payload.update(
            {
                "presenter": self.presenter,
                "description": self.description,
                "type": "podcast",
                "collection_name": self.collection_name,
            }
        )
        return payload


@dataclass(slots=True)
class UploadUnit:
    """Files and metadata of one record, uploaded all-or-nothing."""

    record_id: str
    metadata: dict[str, Any]
    thumbnail: Path | None = None
    content: Path | None = None

    def files(self) -> list[Path]:
        return [path for path in (self.thumbnail, self.content) if path is not None]


@dataclass(slots=True)
class SignedUrl:
    """Read URL for an object together with its expiry."""

    url: str
    expires_at: datetime


@dataclass(slots=True)
class PutResult:
    """Outcome of a deferred (background) upload."""

    key: str
    ok: bool
    error: str | None = None
