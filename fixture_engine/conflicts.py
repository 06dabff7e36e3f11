"""Conflict checks run before a fixture is saved.

Checks run in a fixed order and the first hit is returned:

1. the same official in two role slots of the candidate
2. an identical fixture (teams, venue, kick-off)
3. the same pairing at the same kick-off but another venue
4. a shared team at the same venue and kick-off
5. an official already booked on a fixture less than ``window_hours`` away

Kick-off comparisons for 2-4 are exact; the booking window in 5 is an
absolute difference and ignores calendar days.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

from .errors import Conflict, ConflictCode, FixtureConflict, InvalidFixture
from .models import Fixture, FixtureRef, OfficialRef
from .normalise import display_name, norm_text, official_key, same_official
from .utils import iso_z

CONFLICT_WINDOW_HOURS = 3.0

MESSAGES: dict[str, str] = {
    "DUPLICATE_ROLE_ASSIGNMENT": "A referee cannot be assigned to multiple roles in the same match",
    "DUPLICATE_MATCH_SAME_VENUE_TIME": "Match already exists",
    "DUPLICATE_MATCH_DIFFERENT_VENUE": "A match with the same teams at the same time already exists at a different venue",
    "DUPLICATE_MATCH_SAME_TEAM": "A match with the same team at the same venue, date, and time already exists",
    "OFFICIAL_CONFLICT": "One or more referees are already assigned to another match at {time}",
}


class _Keyed(NamedTuple):
    fixture: Fixture
    when: datetime
    home: str
    away: str
    venue: str


def _keyed(fixture: Fixture) -> Optional[_Keyed]:
    when = fixture.when
    if when is None:
        return None
    return _Keyed(fixture, when, norm_text(fixture.home), norm_text(fixture.away), norm_text(fixture.venue))


def _teams(k: _Keyed) -> set[str]:
    return {t for t in (k.home, k.away) if t}


def _is_exact_duplicate(cand: _Keyed, other: _Keyed) -> bool:
    return (
        cand.when == other.when
        and cand.home == other.home
        and cand.away == other.away
        and cand.venue == other.venue
    )


def _is_same_pair_elsewhere(cand: _Keyed, other: _Keyed) -> bool:
    if cand.when != other.when or cand.venue == other.venue:
        return False
    same = cand.home == other.home and cand.away == other.away
    swapped = cand.home == other.away and cand.away == other.home
    return same or swapped


def _shares_team_at_venue(cand: _Keyed, other: _Keyed) -> bool:
    if cand.when != other.when or cand.venue != other.venue:
        return False
    if _is_exact_duplicate(cand, other):
        return False
    return bool(_teams(cand) & _teams(other))


_FIXTURE_CHECKS: Tuple[Tuple[ConflictCode, Callable[[_Keyed, _Keyed], bool]], ...] = (
    ("DUPLICATE_MATCH_SAME_VENUE_TIME", _is_exact_duplicate),
    ("DUPLICATE_MATCH_DIFFERENT_VENUE", _is_same_pair_elsewhere),
    ("DUPLICATE_MATCH_SAME_TEAM", _shares_team_at_venue),
)


def duplicate_role(candidate: Fixture) -> Optional[OfficialRef]:
    """Return the first official who fills more than one slot on ``candidate``."""
    refs = [ref for _role, ref in candidate.officials()]
    for i, a in enumerate(refs):
        for b in refs[i + 1 :]:
            if same_official(a, b):
                return a
    return None


def _others(existing: Iterable[Fixture], exclude_id: Optional[str]) -> List[_Keyed]:
    out: List[_Keyed] = []
    for f in existing:
        if exclude_id is not None and f.id == exclude_id:
            continue
        k = _keyed(f)
        if k is not None:
            out.append(k)
    return out


def _booking_clash(
    cand: _Keyed, others: List[_Keyed], window: timedelta
) -> Optional[Tuple[_Keyed, OfficialRef]]:
    mine = [ref for _role, ref in cand.fixture.officials()]
    if not mine:
        return None
    for other in others:
        if abs(other.when - cand.when) >= window:
            continue
        for _role, theirs in other.fixture.officials():
            hit = next((ref for ref in mine if same_official(ref, theirs)), None)
            if hit is not None:
                return other, hit
    return None


def validate(
    candidate: Fixture,
    existing: Iterable[Fixture],
    exclude_id: Optional[str] = None,
    *,
    window_hours: float = CONFLICT_WINDOW_HOURS,
) -> Optional[Conflict]:
    """Check ``candidate`` against ``existing``; None means it can be saved.

    ``exclude_id`` names the fixture being edited so it does not clash with
    its own stored copy.
    """
    if window_hours < 0:
        raise ValueError("window_hours must be >= 0")

    twice = duplicate_role(candidate)
    if twice is not None:
        return Conflict(
            code="DUPLICATE_ROLE_ASSIGNMENT",
            message=MESSAGES["DUPLICATE_ROLE_ASSIGNMENT"],
            official_key=official_key(twice),
            official_name=display_name(twice),
        )

    cand = _keyed(candidate)
    if cand is None:
        raise InvalidFixture(f"candidate fixture has no valid kick-off time: {candidate.date!r}")

    others = _others(existing, exclude_id)

    for code, matches in _FIXTURE_CHECKS:
        for other in others:
            if matches(cand, other):
                return Conflict(
                    code=code,
                    message=MESSAGES[code],
                    fixture=FixtureRef.of(other.fixture),
                    at=other.when,
                )

    clash = _booking_clash(cand, others, timedelta(hours=window_hours))
    if clash is not None:
        other, ref = clash
        return Conflict(
            code="OFFICIAL_CONFLICT",
            message=MESSAGES["OFFICIAL_CONFLICT"].format(time=iso_z(other.when)),
            fixture=FixtureRef.of(other.fixture),
            official_key=official_key(ref),
            official_name=display_name(ref),
            at=other.when,
        )
    return None


def ensure_valid(
    candidate: Fixture,
    existing: Iterable[Fixture],
    exclude_id: Optional[str] = None,
    *,
    window_hours: float = CONFLICT_WINDOW_HOURS,
) -> None:
    """Like ``validate`` but raises ``FixtureConflict`` instead of returning it."""
    conflict = validate(candidate, existing, exclude_id, window_hours=window_hours)
    if conflict is not None:
        raise FixtureConflict(conflict)
