"""Persistence layer for music records."""

from __future__ import annotations

from collections.abc import Sequence

from ..db.db_models import MusicFeatModel, MusicModel, MusicMoodModel
from ..media.media_models import Genre, Mood, MusicRecord
from .catalog_repository import CatalogRepository


class MusicRepository(CatalogRepository[MusicModel, MusicRecord]):
    """Manage music records and their feat/mood rows."""

    model = MusicModel
    entity = "music"

    def find_by_artist_containing(self, artist: str) -> list[MusicRecord]:
        return self._find(MusicModel.artist.icontains(artist, autoescape=True))

    def find_by_album_containing(self, album: str) -> list[MusicRecord]:
        return self._find(MusicModel.album.icontains(album, autoescape=True))

    def find_by_feat_containing(self, feat: str) -> list[MusicRecord]:
        return self._find(MusicModel.feats.any(MusicFeatModel.name.icontains(feat, autoescape=True)))

    def find_by_feats_in(self, feats: Sequence[str]) -> list[MusicRecord]:
        return self._find(MusicModel.feats.any(MusicFeatModel.name.in_(list(feats))))

    def find_by_genre(self, genre: Genre) -> list[MusicRecord]:
        return self._find(MusicModel.genre == genre.name)

    def find_by_moods_in(self, moods: Sequence[Mood]) -> list[MusicRecord]:
        return self._find(MusicModel.moods.any(MusicMoodModel.mood.in_([mood.name for mood in moods])))

    def _apply(self, model: MusicModel, record: MusicRecord) -> None:
        model.artist = record.artist
        model.album = record.album
        model.genre = record.genre.name if record.genre else None
        model.feats = [
            MusicFeatModel(position=index, name=name) for index, name in enumerate(record.feats)
        ]
        model.moods = [
            MusicMoodModel(position=index, mood=mood.name) for index, mood in enumerate(record.moods)
        ]

    def _to_domain(self, model: MusicModel) -> MusicRecord:
        return MusicRecord(
            **self._common_fields(model),
            artist=model.artist,
            album=model.album,
            feats=[feat.name for feat in model.feats],
            genre=Genre[model.genre] if model.genre else None,
            moods=[Mood[row.mood] for row in model.moods],
        )
