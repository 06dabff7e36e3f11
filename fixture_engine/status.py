from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .models import STATUS_ORDER, Fixture, StatusTag
from .utils import DEFAULT_TZ, ensure_utc, in_range, month_bounds, to_local_date

UPCOMING_DAYS = 3.0

# Stored spellings seen in the document store, mapped onto display states.
_ALIASES: Dict[str, StatusTag] = {
    "not_started": "not_started",
    "upcoming": "upcoming",
    "scheduled": "upcoming",
    "live": "live",
    "started": "live",
    "in_progress": "live",
    "ongoing": "live",
    "ended": "ended",
    "completed": "ended",
    "finished": "ended",
    "played": "ended",
}

# Set by an operator and returned as-is; everything else is derived from time.
MANUAL_STATES = frozenset({"live", "ended", "not_started"})


def canonical_status(raw: Optional[str]) -> Optional[StatusTag]:
    if not raw:
        return None
    return _ALIASES.get("_".join(str(raw).lower().split()))


def storage_status(tag: StatusTag) -> str:
    """Spelling written back to the store (``live`` is persisted as ``started``)."""
    return "started" if tag == "live" else tag


def derive_status(fixture: Fixture, now: datetime, upcoming_days: float = UPCOMING_DAYS) -> StatusTag:
    """Display state of ``fixture`` at ``now``.

    Precedence:
      1. a manual ``live``, ``ended`` or ``not_started`` status wins;
      2. kick-off within ``[now, now + upcoming_days]`` is ``upcoming``;
      3. anything else is ``not_started``.
    """
    manual = canonical_status(fixture.status)
    if manual in MANUAL_STATES:
        return manual
    when = fixture.when
    now = ensure_utc(now)
    if when is not None and now <= when <= now + timedelta(days=upcoming_days):
        return "upcoming"
    return "not_started"


def status_breakdown(
    fixtures: Iterable[Fixture],
    now: datetime,
    start: Optional[date] = None,
    end: Optional[date] = None,
    *,
    upcoming_days: float = UPCOMING_DAYS,
    tz: str = DEFAULT_TZ,
) -> Dict[StatusTag, int]:
    """Count derived states for fixtures dated within ``start``..``end``.

    The period defaults to the calendar month containing ``now``.
    """
    if start is None or end is None:
        first, last = month_bounds(to_local_date(now, tz))
        start = start or first
        end = end or last
    counts: Dict[StatusTag, int] = {tag: 0 for tag in STATUS_ORDER}
    for f in fixtures:
        when = f.when
        if when is None or not in_range(to_local_date(when, tz), start, end):
            continue
        counts[derive_status(f, now, upcoming_days)] += 1
    return counts


def filter_fixtures(
    fixtures: Iterable[Fixture],
    now: datetime,
    *,
    league: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    upcoming_days: float = UPCOMING_DAYS,
) -> List[Fixture]:
    out: List[Fixture] = []
    lo = ensure_utc(date_from) if date_from else None
    hi = ensure_utc(date_to) if date_to else None
    for f in fixtures:
        if league and league != "all" and f.league != league:
            continue
        if status and status != "all" and derive_status(f, now, upcoming_days) != status:
            continue
        if lo or hi:
            when = f.when
            if when is None:
                continue
            if lo and when < lo:
                continue
            if hi and when > hi:
                continue
        out.append(f)
    return out


def leagues(fixtures: Iterable[Fixture]) -> List[str]:
    """Distinct non-empty league names in first-seen order."""
    seen: Dict[str, None] = {}
    for f in fixtures:
        if f.league:
            seen.setdefault(f.league, None)
    return list(seen)
