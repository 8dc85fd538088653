"""Read the published index and snapshot files the way the browser does."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from pipelines.common import DEFAULT_TIMEOUT_SECONDS
from pipelines.model import IndexDocument, SeriesSnapshot
from storage.snapshots import INDEX_FILENAME, snapshot_filename

logger = logging.getLogger(__name__)


class DashboardLoadError(RuntimeError):
    """A published file could not be loaded during a render pass."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to load {path}: {reason}")
        self.path = path
        self.reason = reason


class DataSource(Protocol):
    async def load_json(self, name: str) -> Any: ...


class HttpDataSource:
    """Pulls files from static hosting, defeating caches with a ``t`` query parameter."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    async def load_json(self, name: str) -> Any:
        url = self.url_for(name)
        params = {"t": int(time.time() * 1000)}
        try:
            if self._client is None:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)
            else:
                response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise DashboardLoadError(url, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise DashboardLoadError(url, str(response.status_code))
        try:
            return response.json()
        except ValueError as exc:
            raise DashboardLoadError(url, "invalid JSON") from exc


class DirectoryDataSource:
    """Reads the published directory directly, for hosting from the same process."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def load_json(self, name: str) -> Any:
        path = self.root / name
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DashboardLoadError(str(path), "404") from exc
        except UnicodeDecodeError as exc:
            raise DashboardLoadError(str(path), "invalid encoding") from exc
        except OSError as exc:
            raise DashboardLoadError(str(path), str(exc)) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DashboardLoadError(str(path), "invalid JSON") from exc


async def load_index(source: DataSource) -> IndexDocument:
    payload = await source.load_json(INDEX_FILENAME)
    try:
        return IndexDocument.model_validate(payload)
    except ValidationError as exc:
        raise DashboardLoadError(INDEX_FILENAME, "invalid index document") from exc


async def load_all(source: DataSource, index: IndexDocument) -> dict[str, SeriesSnapshot]:
    """Load every indexed snapshot, one after another, into a fresh mapping."""

    store: dict[str, SeriesSnapshot] = {}
    for series_id in index.series:
        name = snapshot_filename(series_id)
        payload = await source.load_json(name)
        try:
            store[series_id] = SeriesSnapshot.model_validate(payload)
        except ValidationError as exc:
            raise DashboardLoadError(name, "invalid snapshot") from exc
        logger.debug("Loaded %s (%s points).", series_id, store[series_id].points)
    return store


__all__ = [
    "DashboardLoadError",
    "DataSource",
    "HttpDataSource",
    "DirectoryDataSource",
    "load_index",
    "load_all",
]
