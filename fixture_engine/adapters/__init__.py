from .snapshot_file import load as load_snapshot, load_one as load_fixture
from .http_store import fetch as fetch_http
from .ics_calendar import fetch as fetch_ics

__all__ = [
    "load_snapshot",
    "load_fixture",
    "fetch_http",
    "fetch_ics",
]
