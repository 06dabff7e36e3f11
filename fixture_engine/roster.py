from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Literal, Tuple

from .models import DayEntry, DayOfficial, Fixture, HeatCell, Heatmap
from .normalise import display_name, official_key, prefer_name
from .utils import DEFAULT_TZ, as_date, end_of_week, in_range, month_bounds, start_of_week, to_local_date

HEATMAP_WEEKS = 12

View = Literal["month", "week"]


def aggregate(
    fixtures: Iterable[Fixture],
    range_start: Any,
    range_end: Any,
    tz: str = DEFAULT_TZ,
) -> Dict[str, DayEntry]:
    """Per-day official assignments for every day in the inclusive range that has any.

    Keys are ``YYYY-MM-DD`` in ``tz``; days without assignments are absent.
    Fixtures with unparseable dates are skipped.
    """
    start = as_date(range_start, tz)
    end = as_date(range_end, tz)
    days: Dict[str, DayEntry] = {}
    if start > end:
        return days

    for f in fixtures:
        when = f.when
        if when is None:
            continue
        day = to_local_date(when, tz)
        if not in_range(day, start, end):
            continue
        for role, ref in f.officials():
            key = official_key(ref)
            if key is None:
                continue
            day_key = day.isoformat()
            entry = days.get(day_key)
            if entry is None:
                entry = days[day_key] = DayEntry(date=day_key)
            slot = entry.officials.get(key)
            if slot is None:
                slot = entry.officials[key] = DayOfficial(name=display_name(ref))
            else:
                slot.name = prefer_name(slot.name, display_name(ref))
            slot.roles.add(role)
            slot.count += 1
            entry.total += 1
    return dict(sorted(days.items()))


def calendar_range(anchor: date | datetime, view: View = "month", tz: str = DEFAULT_TZ) -> Tuple[date, date]:
    """Visible days of a planner view: whole Sunday-first weeks covering the week or month of ``anchor``."""
    day = as_date(anchor, tz)
    if view == "week":
        return start_of_week(day), end_of_week(day)
    if view == "month":
        first, last = month_bounds(day)
        return start_of_week(first), end_of_week(last)
    raise ValueError(f"unknown view: {view!r}")


def heatmap(
    fixtures: Iterable[Fixture],
    today: date | datetime,
    weeks: int = HEATMAP_WEEKS,
    tz: str = DEFAULT_TZ,
) -> Heatmap:
    """Assignments per day for the last ``weeks`` weeks, as Sunday-first columns."""
    if weeks < 1:
        raise ValueError("weeks must be >= 1")
    day = as_date(today, tz)
    start = start_of_week(day - timedelta(weeks=weeks - 1))
    end = end_of_week(day)
    totals = {k: e.total for k, e in aggregate(fixtures, start, end, tz).items()}

    columns: List[List[HeatCell]] = []
    cursor = start
    while cursor <= end:
        week = [cursor + timedelta(days=i) for i in range(7)]
        columns.append([HeatCell(date=d.isoformat(), count=totals.get(d.isoformat(), 0)) for d in week])
        cursor += timedelta(days=7)
    return Heatmap(weeks=columns, max_count=max(totals.values(), default=0) or 1)
