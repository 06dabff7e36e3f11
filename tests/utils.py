"""Builders for fixture snapshots used across the tests."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fixture_engine.models import Fixture, Official

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def at(iso: str) -> datetime:
    return datetime.fromisoformat(iso).replace(tzinfo=timezone.utc)


def days_ago(n: float, now: datetime = NOW) -> datetime:
    return now - timedelta(days=n)


def make_fixture(
    home: str = "Man Utd",
    away: str = "Liverpool",
    venue: str = "Old Trafford",
    when: Any = None,
    *,
    id: Optional[str] = None,
    league: str = "Premier League",
    status: Optional[str] = None,
    main: Any = None,
    ar1: Any = None,
    ar2: Any = None,
) -> Fixture:
    return Fixture(
        id=id,
        home=home,
        away=away,
        venue=venue,
        date=when if when is not None else at("2025-03-01T15:00:00"),
        league=league,
        status=status,
        main_referee=main,
        assistant_referee_1=ar1,
        assistant_referee_2=ar2,
    )


def make_official(name: str, *, id: Optional[str] = None, available: bool = True) -> Official:
    return Official(id=id, name=name, available=available)
