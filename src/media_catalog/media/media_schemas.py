"""Pydantic schemas for public media views."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .media_models import MediaErrorType


class MediaSuccessView(BaseModel):
    id: str
    title: str
    thumbnail_url: str
    duration: str
    year: int
    explicit: bool


class MediaErrorView(BaseModel):
    id: str
    message: str
    error_type: MediaErrorType


class ContentUrlResponse(BaseModel):
    id: str
    url: str
    expires_at: datetime


MIN_YEAR = 1900


def check_year(value: int | None) -> int | None:
    """Years run from 1900 to the current year."""
    if value is None:
        return value
    current = datetime.now().year
    if not MIN_YEAR <= value <= current:
        raise ValueError(f"Year must be between {MIN_YEAR} and {current}")
    return value


def split_list(value: object) -> object:
    """Accept comma separated form values as lists, dropping blank items."""
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return [part.strip() for item in value for part in item.split(",") if part.strip()]
    return value
