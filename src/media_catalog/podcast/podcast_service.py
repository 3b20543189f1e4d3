"""Podcast lifecycle and search."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from pydantic import BaseModel

from ..media.lifecycle_service import MediaLifecycleService
from ..media.media_models import Category, PodcastRecord
from ..repositories.podcast_repository import PodcastRepository
from ..search.search_models import SearchKind, SearchRule, int_arg, tag_arg, text_arg
from .podcast_schemas import PodcastCreate, PodcastView


@dataclass(slots=True)
class PodcastService(MediaLifecycleService[PodcastRecord, PodcastView]):
    """Podcast episodes: owner is the presenter."""

    entity: ClassVar[str] = "podcast"

    def search_rules(self) -> Mapping[SearchKind, SearchRule]:
        repo: PodcastRepository = self.repository  # type: ignore[assignment]
        return {
            SearchKind.TITLE: SearchRule(repo.find_by_title_containing, text_arg),
            SearchKind.PRESENTER: SearchRule(repo.find_by_presenter_containing, text_arg),
            SearchKind.GUESTS_IN: SearchRule(repo.find_by_guests_in, text_arg, collect=True),
            SearchKind.GUEST_CONTAINS: SearchRule(repo.find_by_guest_containing, text_arg, arity=1),
            SearchKind.CATEGORIES_IN: SearchRule(repo.find_by_categories_in, tag_arg(Category), collect=True),
            SearchKind.YEAR: SearchRule(repo.find_by_year, int_arg),
            SearchKind.YEAR_BETWEEN: SearchRule(repo.find_by_year_between, int_arg, arity=2),
        }

    def build_record(self, payload: BaseModel) -> PodcastRecord:
        if not isinstance(payload, PodcastCreate):
            raise TypeError(f"Expected PodcastCreate, got {type(payload).__name__}")
        record = PodcastRecord(
            title=payload.title,
            explicit=payload.explicit,
            presenter=payload.presenter,
            description=payload.description,
            guests=list(payload.guests),
            categories=list(payload.categories),
            episode_number=payload.episode_number,
            season_number=payload.season_number,
        )
        if payload.year is not None:
            record.year = payload.year
        return record

    def build_view(self, record: PodcastRecord, thumbnail_url: str) -> PodcastView:
        return PodcastView(
            id=record.id,
            title=record.title,
            thumbnail_url=thumbnail_url,
            duration=record.duration,
            year=record.year,
            explicit=record.explicit,
            presenter=record.presenter,
            guests=list(record.guests),
            description=record.description,
            categories=[category.display_name for category in record.categories],
            episode_number=record.episode_number,
            season_number=record.season_number,
        )

    def find_owned_by(self, owner: str) -> list[PodcastRecord]:
        repo: PodcastRepository = self.repository  # type: ignore[assignment]
        return repo.find_by_presenter_containing(owner)

    def smart_search(
        self,
        *,
        title: str | None = None,
        presenter: str | None = None,
        guest: str | None = None,
        year: int | None = None,
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> list[PodcastView]:
        """Search by the first non-empty parameter, in declaration order."""
        return self.search_first_given(
            [
                ("title", SearchKind.TITLE, (title,)),
                ("presenter", SearchKind.PRESENTER, (presenter,)),
                ("guest", SearchKind.GUEST_CONTAINS, (guest,)),
                ("year", SearchKind.YEAR, (year,)),
                ("start_year+end_year", SearchKind.YEAR_BETWEEN, (start_year, end_year)),
            ]
        )
