from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from dateutil import parser as dtparser

if TYPE_CHECKING:
    from .models import OfficialRef


_WS_RE = re.compile(r"\s+")

UNNAMED = "Unnamed"


def collapse_ws(s: str) -> str:
    return _WS_RE.sub(" ", s).strip()


def norm_text(s: Optional[str]) -> str:
    """Case and whitespace-insensitive form of a team, venue or person name."""
    if not s:
        return ""
    return collapse_ws(str(s)).lower()


def canonical_key(name: Optional[str]) -> str:
    return norm_text(name)


def official_key(ref: Optional["OfficialRef"]) -> Optional[str]:
    """Identity key used to merge assignment records.

    Records frequently carry only a free-text name, so the normalised name is
    the key. A stable identifier is used only when no name is present.
    """
    if ref is None:
        return None
    key = canonical_key(ref.name)
    if key:
        return key
    ident = (ref.id or "").strip()
    if ident:
        return f"id:{ident}"
    return None


def same_official(a: "OfficialRef", b: "OfficialRef") -> bool:
    a_id = (a.id or "").strip()
    b_id = (b.id or "").strip()
    if a_id and b_id:
        return a_id == b_id
    a_key = canonical_key(a.name)
    return bool(a_key) and a_key == canonical_key(b.name)


def is_capitalized(name: Optional[str]) -> bool:
    return bool(name) and name[0].isupper()


def display_name(ref: "OfficialRef") -> str:
    return (ref.name or "").strip() or UNNAMED


def prefer_name(current: Optional[str], candidate: str) -> str:
    # Capitalised variants win; otherwise the first name seen is kept.
    if not current:
        return candidate
    if is_capitalized(candidate) and not is_capitalized(current):
        return candidate
    return current


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_when(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, dates, ISO or free-text strings, epoch milliseconds and
    document-store timestamp objects (``{"seconds": ..., "nanoseconds": ...}``).
    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        try:
            return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
        except (TypeError, OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            pass
        return _parse_free_text(text)
    return None


# Two unrelated defaults: a field dateutil fills from them differs between the parses.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def _parse_free_text(text: str) -> Optional[datetime]:
    """Free-text timestamp that names a full calendar date, else None.

    ``"15:00"`` or ``"March 11"`` would otherwise borrow the missing parts
    from whatever default dateutil is given.
    """
    try:
        a = dtparser.parse(text, default=_DEFAULT_A)
        b = dtparser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None
    if a.date() != b.date():
        return None
    return _as_utc(a)
