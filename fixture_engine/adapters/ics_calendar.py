from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import List, Tuple

import httpx
from icalendar import Calendar
from tenacity import retry, wait_exponential, stop_after_attempt

from ..config import EngineSettings
from ..models import Fixture
from ..utils import slugify

logger = logging.getLogger(__name__)

# "<home> v|vs|vs. <away>", optionally followed by " - <league>" or " (<league>)"
_SUMMARY_RE = re.compile(
    r"^(?P<home>.+?)\s+(?:v|vs\.?)\s+(?P<away>.+?)"
    r"(?:\s+-\s+(?P<league_dash>.+)|\s+\((?P<league_paren>[^()]+)\))?$",
    re.IGNORECASE,
)


def parse_event_summary(summary: str) -> Tuple[str, str, str]:
    """Split an event title into ``(home, away, league)``; unknown parts are empty."""
    text = summary.strip()
    m = _SUMMARY_RE.match(text)
    if m is None:
        return text, "", ""
    league = m.group("league_dash") or m.group("league_paren") or ""
    return m.group("home").strip(), m.group("away").strip(), league.strip()


def _kickoff(value: object) -> datetime:
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    # all-day events
    return datetime.combine(value, datetime.min.time(), timezone.utc)


def parse_calendar(raw: bytes | str, default_league: str = "Fixture") -> List[Fixture]:
    """Fixtures (without officials) from the VEVENTs of an iCalendar feed."""
    out: List[Fixture] = []
    for event in Calendar.from_ical(raw).walk("VEVENT"):
        start = event.get("dtstart")
        if start is None:
            continue
        when = _kickoff(start.dt)
        summary = str(event.get("summary", ""))
        home, away, league = parse_event_summary(summary)
        uid = str(event.get("uid", "")) or f"{slugify(summary)}-{when.isoformat()}"
        out.append(
            Fixture(
                id=f"ics-{uid}",
                home=home,
                away=away,
                venue=str(event.get("location", "")),
                date=when,
                league=league or default_league,
            )
        )
    return out


@retry(wait=wait_exponential(multiplier=0.5, min=0.5, max=4), stop=stop_after_attempt(3))
def _download(client: httpx.Client, url: str) -> bytes:
    r = client.get(url)
    r.raise_for_status()
    return r.content


def fetch(settings: EngineSettings, transport: httpx.BaseTransport | None = None) -> List[Fixture]:
    """Fixtures from every configured calendar feed; feeds that fail are logged and skipped."""
    if not settings.feature_flags.enable_ics or not settings.ics.urls:
        return []
    src = settings.ics
    out: List[Fixture] = []
    headers = {"User-Agent": "fixture-engine/0.1"}
    with httpx.Client(headers=headers, timeout=src.timeout, transport=transport) as client:
        for url in src.urls:
            try:
                fixtures = parse_calendar(_download(client, url), src.league)
            except Exception as e:
                logger.warning("ics feed %s failed: %s", url, e)
                continue
            logger.info("read %d fixtures from %s", len(fixtures), url)
            out.extend(fixtures)
    return out
