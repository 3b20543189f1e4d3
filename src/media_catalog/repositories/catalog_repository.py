"""Shared persistence logic for catalog record repositories."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar, Generic, TypeVar
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement

from ..exceptions import handle_sqlalchemy_errors
from ..media.media_models import ConversionStatus, MediaRecord

ModelT = TypeVar("ModelT")
RecordT = TypeVar("RecordT", bound=MediaRecord)


class CatalogRepository(Generic[ModelT, RecordT]):
    """Base repository: id assignment, upsert, delete and common queries.

    Subclasses map list-valued fields to child tables in ``_apply`` and
    ``_to_domain`` and expose the type-specific finders.
    """

    model: ClassVar[type[Any]]
    entity: ClassVar[str]

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, record_id: str) -> RecordT | None:
        with handle_sqlalchemy_errors(entity=self.entity), self._session_factory() as session:
            model = session.get(self.model, record_id)
            if model is None:
                return None
            return self._to_domain(model)

    def save(self, record: RecordT) -> RecordT:
        """Insert or update ``record``; assigns ``record.id`` on first save."""
        if record.id is None:
            record.id = uuid4().hex
        with handle_sqlalchemy_errors(entity=self.entity), self._session_factory() as session:
            model = session.get(self.model, record.id)
            if model is None:
                model = self.model(id=record.id)
                session.add(model)
            self._apply_common(model, record)
            self._apply(model, record)
            session.commit()
        return record

    def delete(self, record_id: str) -> None:
        with handle_sqlalchemy_errors(entity=self.entity), self._session_factory() as session:
            model = session.get(self.model, record_id)
            if model is None:
                raise KeyError(f"{self.entity} '{record_id}' not found")
            session.delete(model)
            session.commit()

    def find_by_title_containing(self, title: str) -> list[RecordT]:
        return self._find(self.model.title.icontains(title, autoescape=True))

    def find_by_year(self, year: int) -> list[RecordT]:
        return self._find(self.model.year == year)

    def find_by_year_between(self, start: int, end: int) -> list[RecordT]:
        """Inclusive on both ends."""
        return self._find(self.model.year.between(start, end))

    def _find(self, *criteria: ColumnElement[bool]) -> list[RecordT]:
        stmt = (
            select(self.model)
            .where(*criteria)
            .order_by(self.model.published_at, self.model.id)
        )
        with handle_sqlalchemy_errors(entity=self.entity), self._session_factory() as session:
            return [self._to_domain(model) for model in session.scalars(stmt)]

    @staticmethod
    def _apply_common(model: Any, record: MediaRecord) -> None:
        model.title = record.title
        model.year = record.year
        model.explicit = record.explicit
        model.duration = record.duration
        model.published_at = record.published_at
        model.thumbnail_suffix = record.thumbnail_suffix
        model.content_key = record.content_key
        model.conversion_status = record.conversion_status.value if record.conversion_status else None

    @staticmethod
    def _common_fields(model: Any) -> dict[str, Any]:
        return {
            "id": model.id,
            "title": model.title,
            "year": model.year,
            "explicit": model.explicit,
            "duration": model.duration,
            "published_at": model.published_at,
            "thumbnail_suffix": model.thumbnail_suffix,
            "content_key": model.content_key,
            "conversion_status": (
                ConversionStatus(model.conversion_status) if model.conversion_status else None
            ),
        }

    def _apply(self, model: ModelT, record: RecordT) -> None:
        raise NotImplementedError

    def _to_domain(self, model: ModelT) -> RecordT:
        raise NotImplementedError
