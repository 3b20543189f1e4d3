"""Music lifecycle and search."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from pydantic import BaseModel

from ..media.lifecycle_service import MediaLifecycleService
from ..media.media_models import Genre, Mood, MusicRecord
from ..repositories.music_repository import MusicRepository
from ..search.search_models import SearchKind, SearchRule, int_arg, tag_arg, text_arg
from .music_schemas import MusicCreate, MusicView


@dataclass(slots=True)
class MusicService(MediaLifecycleService[MusicRecord, MusicView]):
    """Music tracks: owner is the artist."""

    entity: ClassVar[str] = "music"

    def search_rules(self) -> Mapping[SearchKind, SearchRule]:
        repo: MusicRepository = self.repository  # type: ignore[assignment]
        return {
            SearchKind.TITLE: SearchRule(repo.find_by_title_containing, text_arg),
            SearchKind.ARTIST: SearchRule(repo.find_by_artist_containing, text_arg),
            SearchKind.ALBUM: SearchRule(repo.find_by_album_containing, text_arg),
            SearchKind.FEAT_IN: SearchRule(repo.find_by_feats_in, text_arg, collect=True),
            SearchKind.FEAT_CONTAINS: SearchRule(repo.find_by_feat_containing, text_arg, arity=1),
            SearchKind.GENRE: SearchRule(repo.find_by_genre, tag_arg(Genre)),
            SearchKind.MOODS_IN: SearchRule(repo.find_by_moods_in, tag_arg(Mood), collect=True),
            SearchKind.YEAR: SearchRule(repo.find_by_year, int_arg),
            SearchKind.YEAR_BETWEEN: SearchRule(repo.find_by_year_between, int_arg, arity=2),
        }

    def build_record(self, payload: BaseModel) -> MusicRecord:
        if not isinstance(payload, MusicCreate):
            raise TypeError(f"Expected MusicCreate, got {type(payload).__name__}")
        record = MusicRecord(
            title=payload.title,
            explicit=payload.explicit,
            artist=payload.artist,
            album=payload.album,
            feats=list(payload.feats),
            genre=payload.genre,
            moods=list(payload.moods),
        )
        if payload.year is not None:
            record.year = payload.year
        return record

    def build_view(self, record: MusicRecord, thumbnail_url: str) -> MusicView:
        return MusicView(
            id=record.id,
            title=record.title,
            thumbnail_url=thumbnail_url,
            duration=record.duration,
            year=record.year,
            explicit=record.explicit,
            artist=record.artist,
            feats=list(record.feats),
            album=record.album,
            genre=record.genre.display_name if record.genre else None,
            moods=[mood.display_name for mood in record.moods],
        )

    def find_owned_by(self, owner: str) -> list[MusicRecord]:
        repo: MusicRepository = self.repository  # type: ignore[assignment]
        return repo.find_by_artist_containing(owner)

    def smart_search(
        self,
        *,
        title: str | None = None,
        artist: str | None = None,
        album: str | None = None,
        feat: str | None = None,
        genre: str | None = None,
        year: int | None = None,
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> list[MusicView]:
        """Search by the first non-empty parameter, in declaration order."""
        return self.search_first_given(
            [
                ("title", SearchKind.TITLE, (title,)),
                ("artist", SearchKind.ARTIST, (artist,)),
                ("album", SearchKind.ALBUM, (album,)),
                ("feat", SearchKind.FEAT_CONTAINS, (feat,)),
                ("genre", SearchKind.GENRE, (genre,)),
                ("year", SearchKind.YEAR, (year,)),
                ("start_year+end_year", SearchKind.YEAR_BETWEEN, (start_year, end_year)),
            ]
        )
