from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from .normalise import parse_when

Role = Literal["main", "assistant1", "assistant2"]
StatusTag = Literal["not_started", "upcoming", "live", "ended"]
Tier = Literal["low", "medium", "high"]

ROLES: Tuple[Role, ...] = ("main", "assistant1", "assistant2")
STATUS_ORDER: Tuple[StatusTag, ...] = ("not_started", "upcoming", "live", "ended")

# Records arrive in the document store's camelCase shape; snake_case also works.
_STORE_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


def _from_user_like(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    out = dict(data)
    if not out.get("id") and out.get("uid"):
        out["id"] = out["uid"]
    if not out.get("name") and (out.get("firstName") or out.get("lastName")):
        out["name"] = " ".join(str(p).strip() for p in (out.get("firstName"), out.get("lastName")) if p)
    if not out.get("image") and out.get("photoURL"):
        out["image"] = out["photoURL"]
    return out


class OfficialRef(BaseModel):
    model_config = _STORE_CONFIG

    id: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        # A bare string in a referee slot is a name-only record.
        if isinstance(data, str):
            return {"name": data}
        return _from_user_like(data)

    @property
    def is_empty(self) -> bool:
        return not ((self.id or "").strip() or (self.name or "").strip())


class Official(BaseModel):
    model_config = _STORE_CONFIG

    id: Optional[str] = None
    name: str = ""
    available: bool = Field(default=True, alias="isAvailable")
    image: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        return _from_user_like(data)


class Fixture(BaseModel):
    model_config = _STORE_CONFIG

    id: Optional[str] = None
    home: str = Field(default="", alias="homeTeam")
    away: str = Field(default="", alias="awayTeam")
    venue: str = ""
    # Raw timestamp as delivered by the store; see ``when``.
    date: Any = None
    league: str = ""
    status: Optional[str] = None
    main_referee: Optional[OfficialRef] = Field(default=None, alias="mainReferee")
    assistant_referee_1: Optional[OfficialRef] = Field(default=None, alias="assistantReferee1")
    assistant_referee_2: Optional[OfficialRef] = Field(default=None, alias="assistantReferee2")
    match_code: Optional[str] = Field(default=None, alias="matchCode")

    @field_validator("home", "away", mode="before")
    @classmethod
    def _team_name(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return v.get("name") or ""
        return "" if v is None else v

    @field_validator("venue", "league", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def when(self) -> Optional[datetime]:
        return parse_when(self.date)

    def officials(self) -> List[Tuple[Role, OfficialRef]]:
        """Filled role slots in main, assistant1, assistant2 order."""
        slots = zip(ROLES, (self.main_referee, self.assistant_referee_1, self.assistant_referee_2))
        return [(role, ref) for role, ref in slots if ref is not None and not ref.is_empty]


class FixtureRef(BaseModel):
    id: Optional[str] = None
    home: str
    away: str
    venue: str
    when: Optional[datetime] = None

    @classmethod
    def of(cls, fixture: Fixture) -> "FixtureRef":
        return cls(id=fixture.id, home=fixture.home, away=fixture.away, venue=fixture.venue, when=fixture.when)


class Snapshot(BaseModel):
    fixtures: List[Fixture] = Field(default_factory=list)
    officials: List[Official] = Field(default_factory=list)
    fetched_at: Optional[str] = None


class ActivityEntry(BaseModel):
    key: str
    name: str
    weight: float
    count: int
    tier: Tier
    image: Optional[str] = None


class LeaderboardRow(BaseModel):
    key: str
    name: str
    count: int
    image: Optional[str] = None


class RefereeOverview(BaseModel):
    total: int
    available: int
    unavailable: int
    available_pct: int
    assignments: int
    leaderboard: List[LeaderboardRow]


class DayOfficial(BaseModel):
    name: str
    roles: Set[Role] = Field(default_factory=set)
    count: int = 0

    @field_serializer("roles")
    def _ordered_roles(self, roles: Set[Role]) -> List[str]:
        return [r for r in ROLES if r in roles]


class DayEntry(BaseModel):
    date: str  # YYYY-MM-DD
    officials: Dict[str, DayOfficial] = Field(default_factory=dict)
    total: int = 0


class HeatCell(BaseModel):
    date: str
    count: int


class Heatmap(BaseModel):
    weeks: List[List[HeatCell]]
    max_count: int
