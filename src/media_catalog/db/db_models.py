"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


class MusicModel(Base):
    __tablename__ = "music"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    explicit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    duration: Mapped[str] = mapped_column(String(16), default="00:00:00", nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    thumbnail_suffix: Mapped[str] = mapped_column(String(128), nullable=False)
    content_key: Mapped[str] = mapped_column(String(128), nullable=False)
    conversion_status: Mapped[str | None] = mapped_column(String(16), index=True)
    artist: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    album: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    genre: Mapped[str | None] = mapped_column(String(32), index=True)

    feats: Mapped[list["MusicFeatModel"]] = relationship(
        back_populates="music",
        cascade="all, delete-orphan",
        order_by="MusicFeatModel.position",
    )
    moods: Mapped[list["MusicMoodModel"]] = relationship(
        back_populates="music",
        cascade="all, delete-orphan",
        order_by="MusicMoodModel.position",
    )


class MusicFeatModel(Base):
    __tablename__ = "music_feat"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    music_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("music.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    music: Mapped[MusicModel] = relationship(back_populates="feats")


class MusicMoodModel(Base):
    __tablename__ = "music_mood"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    music_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("music.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    mood: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    music: Mapped[MusicModel] = relationship(back_populates="moods")


class PodcastModel(Base):
    __tablename__ = "podcast"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    explicit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    duration: Mapped[str] = mapped_column(String(16), default="00:00:00", nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    thumbnail_suffix: Mapped[str] = mapped_column(String(128), nullable=False)
    content_key: Mapped[str] = mapped_column(String(128), nullable=False)
    conversion_status: Mapped[str | None] = mapped_column(String(16), index=True)
    presenter: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    season_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    guests: Mapped[list["PodcastGuestModel"]] = relationship(
        back_populates="podcast",
        cascade="all, delete-orphan",
        order_by="PodcastGuestModel.position",
    )
    categories: Mapped[list["PodcastCategoryModel"]] = relationship(
        back_populates="podcast",
        cascade="all, delete-orphan",
        order_by="PodcastCategoryModel.position",
    )


class PodcastGuestModel(Base):
    __tablename__ = "podcast_guest"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    podcast_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("podcast.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    podcast: Mapped[PodcastModel] = relationship(back_populates="guests")


class PodcastCategoryModel(Base):
    __tablename__ = "podcast_category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    podcast_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("podcast.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    podcast: Mapped[PodcastModel] = relationship(back_populates="categories")
