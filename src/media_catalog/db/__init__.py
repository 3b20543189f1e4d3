"""Database models and utilities for the media catalog."""

from .db_models import Base, MusicModel, PodcastModel

__all__ = ["Base", "MusicModel", "PodcastModel"]
