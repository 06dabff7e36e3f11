from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from fixture_engine.models import Fixture, Official
from fixture_engine.normalise import canonical_key, official_key, parse_when, same_official
from fixture_engine.models import OfficialRef


UTC = timezone.utc


class TestParseWhen:
    @pytest.mark.parametrize(
        "raw",
        [
            "2025-03-01T15:00:00Z",
            "2025-03-01T15:00:00+00:00",
            "2025-03-01T16:00:00+01:00",
            "2025-03-01 15:00",
            "1 March 2025 3pm",
            1740841200000,
            {"seconds": 1740841200, "nanoseconds": 0},
            {"_seconds": 1740841200},
            datetime(2025, 3, 1, 15, 0),
        ],
    )
    def test_accepted_shapes(self, raw):
        assert parse_when(raw) == datetime(2025, 3, 1, 15, 0, tzinfo=UTC)

    def test_plain_date_is_midnight_utc(self):
        assert parse_when(date(2025, 3, 1)) == datetime(2025, 3, 1, tzinfo=UTC)

    @pytest.mark.parametrize("raw", [None, "", "   ", "TBD", True, float("nan"), {"nanoseconds": 5}, [2025, 3, 1]])
    def test_rejected_shapes(self, raw):
        assert parse_when(raw) is None

    @pytest.mark.parametrize("raw", ["15:00", "Monday", "March 11 15:00", "11th 3pm"])
    def test_partial_dates_do_not_borrow_from_today(self, raw):
        assert parse_when(raw) is None

    def test_free_text_without_time_is_midnight(self):
        assert parse_when("1 March 2025") == datetime(2025, 3, 1, tzinfo=UTC)


def test_canonical_key_folds_case_and_spacing():
    assert canonical_key("  John \t SMITH ") == "john smith"
    assert canonical_key(None) == ""


def test_official_key_prefers_name():
    assert official_key(OfficialRef(id="u1", name="Ann Lee")) == "ann lee"
    assert official_key(OfficialRef(id="u1")) == "id:u1"
    assert official_key(OfficialRef()) is None
    assert official_key(None) is None


def test_same_official():
    assert same_official(OfficialRef(id="u1", name="A"), OfficialRef(id="u1", name="B"))
    assert not same_official(OfficialRef(id="u1", name="Ann"), OfficialRef(id="u2", name="Ann"))
    assert same_official(OfficialRef(id="u1", name="Ann"), OfficialRef(name=" ann "))
    assert not same_official(OfficialRef(id="u1"), OfficialRef(name="Ann"))


def test_fixture_from_store_record():
    f = Fixture.model_validate(
        {
            "id": "m1",
            "homeTeam": {"name": "Man Utd", "logo": "mu.png"},
            "awayTeam": "Liverpool",
            "venue": "Old Trafford",
            "date": {"seconds": 1740841200, "nanoseconds": 0},
            "league": "Premier League",
            "status": "started",
            "mainReferee": {"uid": "u1", "firstName": "John", "lastName": "Smith", "photoURL": "js.png"},
            "assistantReferee1": "Ann Lee",
            "assistantReferee2": None,
            "matchCode": 42,
            "balls": [],
        }
    )
    assert (f.home, f.away) == ("Man Utd", "Liverpool")
    assert f.when == datetime(2025, 3, 1, 15, 0, tzinfo=UTC)
    assert f.match_code == "42"
    main = f.main_referee
    assert (main.id, main.name, main.image) == ("u1", "John Smith", "js.png")
    assert [(role, ref.name) for role, ref in f.officials()] == [("main", "John Smith"), ("assistant1", "Ann Lee")]


def test_empty_slots_are_ignored():
    f = Fixture(home="A", away="B", main_referee="", assistant_referee_1={"id": " ", "name": ""})
    assert f.officials() == []


def test_fixture_with_missing_fields_still_loads():
    f = Fixture.model_validate({"homeTeam": None, "venue": None, "date": "TBD"})
    assert f.home == "" and f.venue == ""
    assert f.when is None


def test_official_from_store_record():
    o = Official.model_validate({"id": 7, "firstName": "Ann", "lastName": "Lee", "isAvailable": False})
    assert (o.id, o.name, o.available) == ("7", "Ann Lee", False)
