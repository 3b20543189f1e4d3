"""Persistence layer for podcast records."""

from __future__ import annotations

from collections.abc import Sequence

from ..db.db_models import PodcastCategoryModel, PodcastGuestModel, PodcastModel
from ..media.media_models import Category, PodcastRecord
from .catalog_repository import CatalogRepository


class PodcastRepository(CatalogRepository[PodcastModel, PodcastRecord]):
    """Manage podcast records and their guest/category rows."""

    model = PodcastModel
    entity = "podcast"

    def find_by_presenter_containing(self, presenter: str) -> list[PodcastRecord]:
        return self._find(PodcastModel.presenter.icontains(presenter, autoescape=True))

    def find_by_guest_containing(self, guest: str) -> list[PodcastRecord]:
        return self._find(
            PodcastModel.guests.any(PodcastGuestModel.name.icontains(guest, autoescape=True))
        )

    def find_by_guests_in(self, guests: Sequence[str]) -> list[PodcastRecord]:
        return self._find(PodcastModel.guests.any(PodcastGuestModel.name.in_(list(guests))))

    def find_by_categories_in(self, categories: Sequence[Category]) -> list[PodcastRecord]:
        names = [category.name for category in categories]
        return self._find(PodcastModel.categories.any(PodcastCategoryModel.category.in_(names)))

    def _apply(self, model: PodcastModel, record: PodcastRecord) -> None:
        model.presenter = record.presenter
        model.description = record.description
        model.episode_number = record.episode_number
        model.season_number = record.season_number
        model.guests = [
            PodcastGuestModel(position=index, name=name) for index, name in enumerate(record.guests)
        ]
        model.categories = [
            PodcastCategoryModel(position=index, category=category.name)
            for index, category in enumerate(record.categories)
        ]

    def _to_domain(self, model: PodcastModel) -> PodcastRecord:
        return PodcastRecord(
            **self._common_fields(model),
            presenter=model.presenter,
            description=model.description,
            guests=[guest.name for guest in model.guests],
            categories=[Category[row.category] for row in model.categories],
            episode_number=model.episode_number,
            season_number=model.season_number,
        )
