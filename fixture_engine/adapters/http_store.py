from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from tenacity import RetryError, retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..config import EngineSettings
from ..errors import SnapshotError
from ..models import Snapshot
from ..utils import iso_z, now_utc
from .snapshot_file import snapshot_from_data

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


@retry(
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    stop=stop_after_attempt(3),
    retry=retry_if_exception(_is_transient),
)
def _get(client: httpx.Client, url: str) -> Any:
    r = client.get(url)
    r.raise_for_status()
    data = r.json()
    # Store exports wrap rows as {"data": [...]} or return the list directly.
    return data.get("data") if isinstance(data, dict) and "data" in data else data


def fetch(settings: EngineSettings, transport: Optional[httpx.BaseTransport] = None) -> Snapshot:
    """Pull fixtures and officials from the document store's HTTP export."""
    src = settings.http
    if not src.base_url:
        raise SnapshotError("http.base_url is not configured")

    headers = {"User-Agent": "fixture-engine/0.1"}
    if src.token:
        headers["Authorization"] = f"Bearer {src.token}"

    try:
        with httpx.Client(base_url=src.base_url, headers=headers, timeout=src.timeout, transport=transport) as client:
            fixtures = _get(client, src.fixtures_path)
            officials = _get(client, src.officials_path)
    except RetryError as e:
        raise SnapshotError(f"store unavailable after retries: {e.last_attempt.exception()}") from e
    except httpx.HTTPError as e:
        raise SnapshotError(f"store request failed: {e}") from e
    except ValueError as e:
        raise SnapshotError(f"store returned invalid JSON: {e}") from e

    snap = snapshot_from_data({"fixtures": fixtures, "officials": officials, "fetched_at": iso_z(now_utc())})
    logger.info("fetched %d fixtures and %d officials from %s", len(snap.fixtures), len(snap.officials), src.base_url)
    return snap
