from datetime import datetime, timedelta

import pytest

from src.media_catalog.media.media_models import ConversionStatus, Genre, Mood, MusicRecord
from src.media_catalog.repositories.music_repository import MusicRepository
from tests.helpers.catalog import build_session_factory

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def _music(title: str, *, offset: int = 0, **fields) -> MusicRecord:
    defaults = {
        "year": 2020,
        "artist": "Artist",
        "album": "Album",
        "genre": Genre.POP,
        "moods": [Mood.HAPPY],
        "published_at": BASE_TIME + timedelta(minutes=offset),
    }
    defaults.update(fields)
    return MusicRecord(title=title, **defaults)


@pytest.fixture
def repository() -> MusicRepository:
    return MusicRepository(build_session_factory())


def test_save_assigns_id_and_round_trips_lists(repository: MusicRepository) -> None:
    record = _music(
        "Song",
        feats=["Guest One", "Guest Two"],
        genre=Genre.R_AND_B,
        moods=[Mood.CALM, Mood.ROMANTIC],
    )

    saved = repository.save(record)
    loaded = repository.get(saved.id)

    assert saved.id
    assert loaded is not None
    assert loaded.feats == ["Guest One", "Guest Two"]
    assert loaded.genre is Genre.R_AND_B
    assert loaded.moods == [Mood.CALM, Mood.ROMANTIC]
    assert loaded.conversion_status is ConversionStatus.PENDING


def test_save_existing_record_replaces_child_rows(repository: MusicRepository) -> None:
    record = repository.save(_music("Song", feats=["A", "B"], moods=[Mood.SAD]))

    record.feats = ["C"]
    record.moods = [Mood.ENERGETIC, Mood.HAPPY]
    record.conversion_status = ConversionStatus.SUCCESS
    repository.save(record)

    loaded = repository.get(record.id)
    assert loaded.feats == ["C"]
    assert loaded.moods == [Mood.ENERGETIC, Mood.HAPPY]
    assert loaded.conversion_status is ConversionStatus.SUCCESS


def test_get_missing_returns_none(repository: MusicRepository) -> None:
    assert repository.get("missing") is None


def test_delete_removes_record_and_raises_when_absent(repository: MusicRepository) -> None:
    record = repository.save(_music("Song", feats=["A"]))

    repository.delete(record.id)

    assert repository.get(record.id) is None
    assert repository.find_by_feats_in(["A"]) == []
    with pytest.raises(KeyError):
        repository.delete(record.id)


def test_text_finders_are_case_insensitive_substring_matches(repository: MusicRepository) -> None:
    repository.save(_music("Blue Monday", artist="New Order", album="Power, Corruption & Lies"))
    repository.save(_music("Yellow", artist="Coldplay", album="Parachutes", offset=1))

    assert [r.title for r in repository.find_by_title_containing("MONDAY")] == ["Blue Monday"]
    assert [r.title for r in repository.find_by_artist_containing("old")] == ["Yellow"]
    assert [r.title for r in repository.find_by_album_containing("corruption")] == ["Blue Monday"]


def test_title_search_treats_wildcards_literally(repository: MusicRepository) -> None:
    repository.save(_music("100% Pure"))
    repository.save(_music("1000 Pure", offset=1))

    assert [r.title for r in repository.find_by_title_containing("100%")] == ["100% Pure"]


def test_feat_finders(repository: MusicRepository) -> None:
    repository.save(_music("One", feats=["Alice", "Bob"]))
    repository.save(_music("Two", feats=["Carol"], offset=1))
    repository.save(_music("Three", offset=2))

    assert [r.title for r in repository.find_by_feats_in(["Bob", "Carol"])] == ["One", "Two"]
    assert [r.title for r in repository.find_by_feat_containing("ali")] == ["One"]


def test_genre_and_mood_finders(repository: MusicRepository) -> None:
    repository.save(_music("Rock", genre=Genre.ROCK, moods=[Mood.ENERGETIC]))
    repository.save(_music("Pop", genre=Genre.POP, moods=[Mood.HAPPY, Mood.CALM], offset=1))

    assert [r.title for r in repository.find_by_genre(Genre.ROCK)] == ["Rock"]
    assert [r.title for r in repository.find_by_moods_in([Mood.CALM, Mood.ENERGETIC])] == ["Rock", "Pop"]


def test_year_finders_are_inclusive(repository: MusicRepository) -> None:
    for offset, year in enumerate((1999, 2000, 2005, 2010, 2011)):
        repository.save(_music(f"Y{year}", year=year, offset=offset))

    assert [r.year for r in repository.find_by_year(2005)] == [2005]
    assert [r.year for r in repository.find_by_year_between(2000, 2010)] == [2000, 2005, 2010]


def test_results_are_ordered_by_publication_time(repository: MusicRepository) -> None:
    repository.save(_music("Later", offset=10))
    repository.save(_music("Earlier", offset=0))

    assert [r.title for r in repository.find_by_artist_containing("artist")] == ["Earlier", "Later"]
