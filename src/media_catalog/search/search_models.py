"""Search kinds and the rules binding them to repository queries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..media.media_models import CatalogTag


class SearchKind(StrEnum):
    """Every search kind known to the catalog; each artifact type supports a subset."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    FEAT_IN = "feat_in"
    FEAT_CONTAINS = "feat_contains"
    GENRE = "genre"
    MOODS_IN = "moods_in"
    YEAR = "year"
    YEAR_BETWEEN = "year_between"
    PRESENTER = "presenter"
    GUESTS_IN = "guests_in"
    GUEST_CONTAINS = "guest_contains"
    CATEGORIES_IN = "categories_in"


SearchArg = str | int | CatalogTag


@dataclass(slots=True, frozen=True)
class SearchCriterion:
    """A search request: a kind tag plus loosely typed arguments."""

    kind: SearchKind | str
    args: tuple[SearchArg, ...] = ()


@dataclass(slots=True, frozen=True)
class SearchRule:
    """How a kind consumes its arguments.

    ``arity`` fixes the exact argument count (``None`` means "at least one").
    With ``collect`` the coerced arguments are passed as one list, otherwise
    fixed-arity rules receive them positionally and open rules receive only
    the first argument.
    """

    query: Callable[..., list[Any]]
    coerce: Callable[[Any], Any]
    arity: int | None = None
    collect: bool = False


def text_arg(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"expected text, got {type(value).__name__}")
    text = str(value).strip()
    if not text:
        raise ValueError("expected non-empty text")
    return text


def int_arg(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected integer, got {type(value).__name__}")


def tag_arg(enum_cls: type[CatalogTag]) -> Callable[[Any], Any]:
    def coerce(value: Any) -> Any:
        if isinstance(value, enum_cls):
            return value
        if not isinstance(value, str):
            raise TypeError(f"expected {enum_cls.__name__}, got {type(value).__name__}")
        return enum_cls.parse(value)

    return coerce
