from __future__ import annotations

import logging
import pathlib
from typing import Any, List, Type, TypeVar

import orjson
from pydantic import BaseModel, ValidationError

from ..errors import SnapshotError
from ..models import Fixture, Official, Snapshot

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_records(rows: Any, model: Type[M]) -> List[M]:
    """Validate store records, dropping the ones that do not fit ``model``."""
    if not isinstance(rows, list):
        return []
    out: List[M] = []
    for idx, item in enumerate(rows):
        try:
            out.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("skipping %s record %d: %s", model.__name__, idx, e.errors()[0].get("msg", e))
    return out


def snapshot_from_data(data: Any) -> Snapshot:
    # Either {"fixtures": [...], "officials": [...]} or a bare list of fixtures.
    if isinstance(data, list):
        return Snapshot(fixtures=parse_records(data, Fixture))
    if not isinstance(data, dict):
        raise SnapshotError(f"unexpected snapshot payload: {type(data).__name__}")
    return Snapshot(
        fixtures=parse_records(data.get("fixtures", data.get("matches")), Fixture),
        officials=parse_records(data.get("officials", data.get("referees")), Official),
        fetched_at=data.get("fetched_at"),
    )


def load(path: str | pathlib.Path) -> Snapshot:
    p = pathlib.Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise SnapshotError(f"cannot read snapshot {p}: {e}") from e
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise SnapshotError(f"snapshot {p} is not valid JSON: {e}") from e
    snap = snapshot_from_data(data)
    logger.info("loaded %d fixtures and %d officials from %s", len(snap.fixtures), len(snap.officials), p)
    return snap


def load_one(path: str | pathlib.Path) -> Fixture:
    """Read a single candidate fixture from a JSON file."""
    p = pathlib.Path(path)
    try:
        data = orjson.loads(p.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        raise SnapshotError(f"cannot read fixture {p}: {e}") from e
    try:
        return Fixture.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"invalid fixture in {p}: {e}") from e
