"""
Scheduling & referee workload engine.

Pure functions over an in-memory snapshot of fixtures and officials:

    from fixture_engine import validate, derive_status, score, aggregate

    conflict = validate(candidate, fixtures, exclude_id="m-12")
    state = derive_status(fixture, now)
    ranking = score(fixtures, now, lookback_days=30, half_life_days=30, top_n=24)
    days = aggregate(fixtures, date(2025, 3, 1), date(2025, 3, 7))

Every function takes ``now`` explicitly and never reads the clock, logs or
touches the network. Loading snapshots is the job of ``fixture_engine.adapters``.
"""

from .activity import percentile, referee_overview, score
from .config import EngineSettings, load_config
from .conflicts import ensure_valid, validate
from .errors import Conflict, ConflictCode, EngineError, FixtureConflict, InvalidFixture, SnapshotError
from .models import (
    ActivityEntry,
    DayEntry,
    DayOfficial,
    Fixture,
    Heatmap,
    Official,
    OfficialRef,
    RefereeOverview,
    Snapshot,
)
from .normalise import canonical_key, official_key
from .roster import aggregate, calendar_range, heatmap
from .status import canonical_status, derive_status, filter_fixtures, leagues, status_breakdown, storage_status

__all__ = [
    # Engine
    "validate",
    "ensure_valid",
    "derive_status",
    "score",
    "aggregate",
    # Helpers
    "percentile",
    "referee_overview",
    "calendar_range",
    "heatmap",
    "canonical_status",
    "storage_status",
    "status_breakdown",
    "filter_fixtures",
    "leagues",
    "canonical_key",
    "official_key",
    # Config
    "EngineSettings",
    "load_config",
    # Errors
    "Conflict",
    "ConflictCode",
    "EngineError",
    "FixtureConflict",
    "InvalidFixture",
    "SnapshotError",
    # Models
    "ActivityEntry",
    "DayEntry",
    "DayOfficial",
    "Fixture",
    "Heatmap",
    "Official",
    "OfficialRef",
    "RefereeOverview",
    "Snapshot",
]
