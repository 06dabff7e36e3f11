"""Recency-weighted activity ranking of match officials.

Each assignment inside the lookback window contributes
``0.5 ** (age_days / half_life_days)`` to its official's score, so recent work
counts more than old work without old work vanishing. Scores are bucketed into
low/medium/high tiers at the 33rd and 66th percentiles.

Officials are merged by normalised name (see ``normalise.official_key``)
because many assignment records carry a free-text name and no identifier.
Two different officials sharing a name are therefore counted as one.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .models import ActivityEntry, Fixture, LeaderboardRow, Official, RefereeOverview, Tier
from .normalise import display_name, official_key, prefer_name
from .utils import ensure_utc

LOOKBACK_DAYS = 30.0
HALF_LIFE_DAYS = 30.0
TOP_N = 24
LEADERBOARD_SIZE = 5
TIER_CUTS = (0.33, 0.66)

_DAY = timedelta(days=1)


@dataclass
class _Tally:
    name: str
    weight: float = 0.0
    count: int = 0
    image: Optional[str] = None


def decay_weight(age_days: float, half_life_days: float) -> float:
    return 0.5 ** (max(0.0, age_days) / half_life_days)


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear-interpolated percentile of an ascending sequence (index = p * (n - 1))."""
    if not sorted_values:
        return 0.0
    idx = p * (len(sorted_values) - 1)
    lo = math.floor(idx)
    hi = math.ceil(idx)
    if lo == hi:
        return sorted_values[lo]
    # exact when both neighbours are equal
    return sorted_values[lo] + (sorted_values[hi] - sorted_values[lo]) * (idx - lo)


def tier_for(weight: float, p33: float, p66: float) -> Tier:
    if weight <= p33:
        return "low"
    if weight <= p66:
        return "medium"
    return "high"


def _in_window(fixtures: Iterable[Fixture], now: datetime, lookback_days: float) -> Iterator[Tuple[Fixture, datetime]]:
    since = now - timedelta(days=lookback_days)
    for f in fixtures:
        when = f.when
        if when is None or when < since or when > now:
            continue
        yield f, when


def _tally(fixtures: Iterable[Fixture], now: datetime, lookback_days: float, half_life_days: float) -> Dict[str, _Tally]:
    tallies: Dict[str, _Tally] = {}
    for fixture, when in _in_window(fixtures, now, lookback_days):
        weight = decay_weight((now - when) / _DAY, half_life_days)
        for _role, ref in fixture.officials():
            key = official_key(ref)
            if key is None:
                continue
            name = display_name(ref)
            t = tallies.get(key)
            if t is None:
                t = tallies[key] = _Tally(name=name)
            else:
                t.name = prefer_name(t.name, name)
            t.weight += weight
            t.count += 1
            if ref.image and not t.image:
                t.image = ref.image
    return tallies


def score(
    fixtures: Iterable[Fixture],
    now: datetime,
    lookback_days: float = LOOKBACK_DAYS,
    half_life_days: float = HALF_LIFE_DAYS,
    top_n: int = TOP_N,
) -> List[ActivityEntry]:
    """Rank officials by decayed assignment weight, most active first."""
    if half_life_days <= 0:
        raise ValueError("half_life_days must be > 0")
    if lookback_days < 0:
        raise ValueError("lookback_days must be >= 0")
    if top_n < 0:
        raise ValueError("top_n must be >= 0")

    now = ensure_utc(now)
    tallies = _tally(fixtures, now, lookback_days, half_life_days)
    if not tallies:
        return []

    weights = sorted(t.weight for t in tallies.values())
    p33, p66 = (percentile(weights, p) for p in TIER_CUTS)

    entries = [
        ActivityEntry(
            key=key,
            name=t.name,
            weight=t.weight,
            count=t.count,
            tier=tier_for(t.weight, p33, p66),
            image=t.image,
        )
        for key, t in tallies.items()
    ]
    entries.sort(key=lambda e: (-e.weight, e.key))
    return entries[:top_n]


def referee_overview(
    officials: Iterable[Official],
    fixtures: Iterable[Fixture],
    now: datetime,
    lookback_days: float = LOOKBACK_DAYS,
    leaderboard_size: int = LEADERBOARD_SIZE,
) -> RefereeOverview:
    """Availability headline numbers plus a raw-count leaderboard for the lookback window."""
    refs = list(officials)
    total = len(refs)
    available = sum(1 for o in refs if o.available)

    # half-life is irrelevant for raw counts
    tallies = _tally(fixtures, ensure_utc(now), lookback_days, HALF_LIFE_DAYS)
    rows = sorted(tallies.items(), key=lambda kv: (-kv[1].count, kv[0]))
    leaderboard = [
        LeaderboardRow(key=key, name=t.name, count=t.count, image=t.image)
        for key, t in rows[: max(0, leaderboard_size)]
    ]
    return RefereeOverview(
        total=total,
        available=available,
        unavailable=total - available,
        available_pct=round(available / total * 100) if total else 0,
        assignments=sum(t.count for t in tallies.values()),
        leaderboard=leaderboard,
    )
