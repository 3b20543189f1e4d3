"""Pydantic schemas for the music API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..media.media_models import Genre, Mood
from ..media.media_schemas import MediaSuccessView, check_year, split_list


class MusicView(MediaSuccessView):
    artist: str
    feats: list[str]
    album: str
    genre: str | None
    moods: list[str]


def _parse_genre(value: Any) -> Any:
    if isinstance(value, str):
        return Genre.parse(value) if value.strip() else None
    return value


def _parse_moods(value: Any) -> Any:
    value = split_list(value)
    if isinstance(value, list):
        return [Mood.parse(item) if isinstance(item, str) else item for item in value]
    return value


class MusicCreate(BaseModel):
    title: str = Field(..., min_length=1)
    year: int | None = None
    explicit: bool = False
    artist: str = Field(..., min_length=1)
    album: str = ""
    feats: list[str] = Field(default_factory=list)
    genre: Genre
    moods: list[Mood] = Field(..., min_length=1, max_length=6)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return check_year(value)

    @field_validator("feats", mode="before")
    @classmethod
    def split_feats(cls, value: Any) -> Any:
        return split_list(value) if value is not None else []

    @field_validator("genre", mode="before")
    @classmethod
    def parse_genre(cls, value: Any) -> Any:
        return _parse_genre(value)

    @field_validator("moods", mode="before")
    @classmethod
    def parse_moods(cls, value: Any) -> Any:
        return _parse_moods(value)


class MusicUpdate(BaseModel):
    """Partial update; ``None`` leaves the stored value unchanged."""

    title: str | None = Field(default=None, min_length=1)
    year: int | None = None
    explicit: bool | None = None
    artist: str | None = Field(default=None, min_length=1)
    album: str | None = None
    feats: list[str] | None = None
    genre: Genre | None = None
    moods: list[Mood] | None = Field(default=None, min_length=1, max_length=6)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return check_year(value)

    @field_validator("feats", mode="before")
    @classmethod
    def split_feats(cls, value: Any) -> Any:
        return split_list(value)

    @field_validator("genre", mode="before")
    @classmethod
    def parse_genre(cls, value: Any) -> Any:
        return _parse_genre(value)

    @field_validator("moods", mode="before")
    @classmethod
    def parse_moods(cls, value: Any) -> Any:
        return _parse_moods(value) if value else None
