from __future__ import annotations

import pathlib
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator

from .utils import read_env

DEFAULT_CONFIG = pathlib.Path("config.yaml")


class HttpSource(BaseModel):
    base_url: Optional[str] = None
    fixtures_path: str = "/matches"
    officials_path: str = "/referees"
    token: Optional[str] = None
    timeout: float = 20.0


class IcsSource(BaseModel):
    urls: List[str] = Field(default_factory=list)
    league: str = "Fixture"
    timeout: float = 20.0


class FeatureFlags(BaseModel):
    enable_http: bool = False
    enable_ics: bool = False


class EngineSettings(BaseModel):
    conflict_window_hours: float = Field(default=3.0, ge=0)
    upcoming_days: float = Field(default=3.0, ge=0)
    lookback_days: float = Field(default=30.0, ge=0)
    half_life_days: float = Field(default=30.0, gt=0)
    top_n: int = Field(default=24, ge=0)
    leaderboard_size: int = Field(default=5, ge=0)
    heatmap_weeks: int = Field(default=12, ge=1)
    timezone: str = "UTC"
    snapshot_path: str = ".cache/snapshot.json"
    http: HttpSource = Field(default_factory=HttpSource)
    ics: IcsSource = Field(default_factory=IcsSource)
    feature_flags: FeatureFlags = Field(default_factory=FeatureFlags)

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {v}") from e
        return v


def load_config(path: str | pathlib.Path | None = None) -> EngineSettings:
    """Read settings from YAML; a missing file gives the defaults.

    ``FIXTURE_ENGINE_CONFIG`` overrides the path, ``FIXTURE_ENGINE_BASE_URL`` and
    ``FIXTURE_ENGINE_TOKEN`` override the HTTP source.
    """
    cfg_path = pathlib.Path(path or read_env("FIXTURE_ENGINE_CONFIG") or DEFAULT_CONFIG)
    raw = {}
    if cfg_path.exists():
        raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    settings = EngineSettings.model_validate(raw)

    base_url = read_env("FIXTURE_ENGINE_BASE_URL")
    if base_url:
        settings.http.base_url = base_url
    token = read_env("FIXTURE_ENGINE_TOKEN")
    if token:
        settings.http.token = token
    return settings
