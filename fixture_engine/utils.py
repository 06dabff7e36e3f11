from __future__ import annotations

import os
import pathlib
import re
import unicodedata
from datetime import datetime, date, timedelta, timezone
from zoneinfo import ZoneInfo
from typing import Any, Optional

import orjson

from .normalise import parse_when

DEFAULT_TZ = "UTC"


def ensure_dir(p: str | pathlib.Path) -> None:
    pathlib.Path(p).mkdir(parents=True, exist_ok=True)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    # Naive clocks are taken as UTC, matching stored timestamps.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_z(dt: datetime) -> str:
    return ensure_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def slugify(value: str) -> str:
    value = (
        unicodedata.normalize("NFKD", value)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    value = value.lower()
    value = re.sub(r"[^a-z0-9\s-]", "", value)
    value = re.sub(r"\s+", "-", value).strip("-")
    value = re.sub(r"-+", "-", value)
    return value


def dumps_json(data: Any) -> bytes:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)


def write_json(path: str | pathlib.Path, data: Any) -> None:
    ensure_dir(pathlib.Path(path).parent)
    with open(path, "wb") as f:
        f.write(dumps_json(data))


def read_env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def to_local_date(dt: datetime, tz: str = DEFAULT_TZ) -> date:
    return ensure_utc(dt).astimezone(ZoneInfo(tz)).date()


def as_date(value: Any, tz: str = DEFAULT_TZ) -> date:
    """Calendar date of a range bound given as a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return to_local_date(value, tz)
    if isinstance(value, date):
        return value
    parsed = parse_when(value)
    if parsed is None:
        raise ValueError(f"not a date: {value!r}")
    if isinstance(value, str) and len(value.strip()) == 10:
        # A bare YYYY-MM-DD is already a calendar date.
        return parsed.date()
    return to_local_date(parsed, tz)


def start_of_week(day: date) -> date:
    # Weeks run Sunday..Saturday
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    first = day.replace(day=1)
    nxt = (first + timedelta(days=32)).replace(day=1)
    return first, nxt - timedelta(days=1)


def in_range(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def parse_now(value: Optional[str]) -> datetime:
    if not value:
        return now_utc()
    parsed = parse_when(value)
    if parsed is None:
        raise ValueError(f"cannot parse time: {value!r}")
    return parsed
