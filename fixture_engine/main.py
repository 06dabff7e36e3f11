from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, List, Optional

from .activity import referee_overview, score
from .adapters import fetch_http, fetch_ics, load_fixture, load_snapshot
from .config import EngineSettings, load_config
from .conflicts import validate
from .errors import SnapshotError
from .models import Snapshot
from .roster import aggregate, calendar_range, heatmap
from .status import derive_status, filter_fixtures, status_breakdown
from .utils import as_date, dumps_json, iso_z, now_utc, parse_now, to_local_date, write_json

logger = logging.getLogger(__name__)


def emit(data: Any, out: Optional[str]) -> None:
    if out:
        write_json(out, data)
        logger.info("wrote %s", out)
    else:
        sys.stdout.buffer.write(dumps_json(data) + b"\n")
        sys.stdout.flush()


def _snapshot(args: argparse.Namespace, cfg: EngineSettings) -> Snapshot:
    return load_snapshot(args.snapshot or cfg.snapshot_path)


def fetch_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = Snapshot(fetched_at=iso_z(now_utc()))
    if cfg.feature_flags.enable_http:
        snap = fetch_http(cfg)
    ics_fixtures = fetch_ics(cfg)
    if ics_fixtures:
        snap.fixtures.extend(ics_fixtures)
    if not (cfg.feature_flags.enable_http or cfg.feature_flags.enable_ics):
        logger.warning("no snapshot source enabled; writing an empty snapshot")
    write_json(args.out or cfg.snapshot_path, snap.model_dump(mode="json", by_alias=True))
    return 0


def validate_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    candidate = load_fixture(args.candidate)
    conflict = validate(candidate, snap.fixtures, args.exclude_id, window_hours=cfg.conflict_window_hours)
    if conflict is None:
        emit({"ok": True}, args.out)
        return 0
    emit({"ok": False, "conflict": conflict.model_dump(mode="json")}, args.out)
    return 1


def status_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    now = parse_now(args.now)
    if args.breakdown:
        emit(status_breakdown(snap.fixtures, now, upcoming_days=cfg.upcoming_days, tz=cfg.timezone), args.out)
        return 0
    rows = filter_fixtures(snap.fixtures, now, league=args.league, status=args.status, upcoming_days=cfg.upcoming_days)
    emit(
        [
            {
                "id": f.id,
                "home": f.home,
                "away": f.away,
                "league": f.league,
                "when": iso_z(f.when) if f.when else None,
                "status": derive_status(f, now, cfg.upcoming_days),
            }
            for f in rows
        ],
        args.out,
    )
    return 0


def activity_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    entries = score(
        snap.fixtures,
        parse_now(args.now),
        lookback_days=cfg.lookback_days,
        half_life_days=cfg.half_life_days,
        top_n=args.top if args.top is not None else cfg.top_n,
    )
    emit([e.model_dump(mode="json") for e in entries], args.out)
    return 0


def overview_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    summary = referee_overview(
        snap.officials,
        snap.fixtures,
        parse_now(args.now),
        lookback_days=cfg.lookback_days,
        leaderboard_size=cfg.leaderboard_size,
    )
    emit(summary.model_dump(mode="json"), args.out)
    return 0


def roster_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    if args.start and args.end:
        start, end = as_date(args.start, cfg.timezone), as_date(args.end, cfg.timezone)
    else:
        start, end = calendar_range(to_local_date(parse_now(args.now), cfg.timezone), args.view)
    days = aggregate(snap.fixtures, start, end, cfg.timezone)
    emit({k: v.model_dump(mode="json") for k, v in days.items()}, args.out)
    return 0


def heatmap_cmd(args: argparse.Namespace, cfg: EngineSettings) -> int:
    snap = _snapshot(args, cfg)
    grid = heatmap(snap.fixtures, parse_now(args.now), weeks=cfg.heatmap_weeks, tz=cfg.timezone)
    emit(grid.model_dump(mode="json"), args.out)
    return 0


COMMANDS = {
    "fetch": fetch_cmd,
    "validate": validate_cmd,
    "status": status_cmd,
    "activity": activity_cmd,
    "overview": overview_cmd,
    "roster": roster_cmd,
    "heatmap": heatmap_cmd,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="settings YAML (default: ./config.yaml)")
    common.add_argument("--snapshot", help="snapshot JSON (default: snapshot_path from config)")
    common.add_argument("--now", help="ISO timestamp to evaluate at (default: current time)")
    common.add_argument("--out", help="write JSON here instead of stdout")
    common.add_argument("--log-level", default="INFO")

    parser = argparse.ArgumentParser(prog="fixture_engine", description="Fixture scheduling and referee workload engine")
    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("fetch", parents=[common], help="pull a snapshot from the configured sources")

    p = sub.add_parser("validate", parents=[common], help="check a proposed fixture for conflicts")
    p.add_argument("--candidate", required=True, help="JSON file holding the proposed fixture")
    p.add_argument("--exclude-id", help="id of the fixture being edited")

    p = sub.add_parser("status", parents=[common], help="derived status of each fixture")
    p.add_argument("--league")
    p.add_argument("--status", choices=["all", "not_started", "upcoming", "live", "ended"])
    p.add_argument("--breakdown", action="store_true", help="count statuses for the current month")

    p = sub.add_parser("activity", parents=[common], help="recency-weighted referee activity ranking")
    p.add_argument("--top", type=int)

    sub.add_parser("overview", parents=[common], help="availability and assignment leaderboard")

    p = sub.add_parser("roster", parents=[common], help="assignments per calendar day")
    p.add_argument("--start", help="YYYY-MM-DD, inclusive")
    p.add_argument("--end", help="YYYY-MM-DD, inclusive")
    p.add_argument("--view", choices=["month", "week"], default="month")

    sub.add_parser("heatmap", parents=[common], help="daily assignment counts over recent weeks")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    cfg = load_config(args.config)
    try:
        code = COMMANDS[args.cmd](args, cfg)
    except SnapshotError as e:
        logger.error("%s", e)
        raise SystemExit(2)
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
