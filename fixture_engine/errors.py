from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from .models import FixtureRef

ConflictCode = Literal[
    "DUPLICATE_ROLE_ASSIGNMENT",
    "DUPLICATE_MATCH_SAME_VENUE_TIME",
    "DUPLICATE_MATCH_DIFFERENT_VENUE",
    "DUPLICATE_MATCH_SAME_TEAM",
    "OFFICIAL_CONFLICT",
]


class Conflict(BaseModel):
    """Why a proposed fixture cannot be saved. Only the first applicable conflict is reported."""

    code: ConflictCode
    message: str
    fixture: Optional[FixtureRef] = None
    official_key: Optional[str] = None
    official_name: Optional[str] = None
    at: Optional[datetime] = None


class EngineError(Exception):
    """Base class for errors raised by fixture_engine."""


class FixtureConflict(EngineError):
    def __init__(self, conflict: Conflict) -> None:
        super().__init__(f"{conflict.code}: {conflict.message}")
        self.conflict = conflict


class InvalidFixture(EngineError, ValueError):
    """Raised when a candidate fixture lacks data the validator needs."""


class SnapshotError(EngineError, RuntimeError):
    """Raised when a snapshot cannot be read or fetched."""
