"""Pydantic schemas for the podcast API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..media.media_models import Category
from ..media.media_schemas import MediaSuccessView, check_year, split_list


class PodcastView(MediaSuccessView):
    presenter: str
    guests: list[str]
    description: str
    categories: list[str]
    episode_number: int
    season_number: int


def _parse_categories(value: Any) -> Any:
    value = split_list(value)
    if isinstance(value, list):
        return [Category.parse(item) if isinstance(item, str) else item for item in value]
    return value


class PodcastCreate(BaseModel):
    title: str = Field(..., min_length=1)
    year: int | None = None
    explicit: bool = False
    presenter: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    guests: list[str] = Field(default_factory=list)
    categories: list[Category] = Field(..., min_length=1, max_length=3)
    episode_number: int = Field(default=1, ge=1)
    season_number: int = Field(default=1, ge=1)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return check_year(value)

    @field_validator("guests", mode="before")
    @classmethod
    def split_guests(cls, value: Any) -> Any:
        return split_list(value) if value is not None else []

    @field_validator("categories", mode="before")
    @classmethod
    def parse_categories(cls, value: Any) -> Any:
        return _parse_categories(value)

    @field_validator("episode_number", "season_number", mode="before")
    @classmethod
    def default_numbers(cls, value: Any) -> Any:
        return 1 if value in (None, "") else value


class PodcastUpdate(BaseModel):
    """Partial update; ``None`` leaves the stored value unchanged."""

    title: str | None = Field(default=None, min_length=1)
    year: int | None = None
    explicit: bool | None = None
    presenter: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    guests: list[str] | None = None
    categories: list[Category] | None = Field(default=None, min_length=1, max_length=3)
    episode_number: int | None = Field(default=None, ge=1)
    season_number: int | None = Field(default=None, ge=1)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return check_year(value)

    @field_validator("guests", mode="before")
    @classmethod
    def split_guests(cls, value: Any) -> Any:
        return split_list(value)

    @field_validator("categories", mode="before")
    @classmethod
    def parse_categories(cls, value: Any) -> Any:
        return _parse_categories(value) if value else None
