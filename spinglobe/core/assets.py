# spinglobe/core/assets.py
"""
One-shot map asset acquisition.

An asset source only has to provide `fetch(path) -> Future`. The future
resolves to the decoded JSON mapping or fails with FetchError. Work happens on
a single worker thread; the controller consumes the result from a frame
callback, so nothing else in the renderer ever runs off the main thread.

    source = FileAssetSource(root="assets")
    future = source.fetch("world.topo.json")
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import urljoin

import requests

from .errors import FetchError

log = logging.getLogger(__name__)

__all__ = ["AssetSource", "FileAssetSource", "HttpAssetSource"]

_DEFAULT_TIMEOUT = 20  # seconds


@runtime_checkable
class AssetSource(Protocol):
    def fetch(self, path: str) -> "Future[Any]": ...


class _ThreadedSource:
    """Runs `_load` on a private single worker thread."""

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self._executor = executor
        self._owns_executor = executor is None

    def fetch(self, path: str) -> "Future[Any]":
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="spinglobe-fetch")
        log.info("Fetching map asset %s", path)
        return self._executor.submit(self._load, path)

    def _load(self, path: str) -> Any:  # pragma: no cover - overridden
        raise NotImplementedError

    def close(self) -> None:
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=False)
            self._executor = None


class FileAssetSource(_ThreadedSource):
    """Reads a JSON asset from disk, relative to `root` when given."""

    def __init__(self, root: str | Path | None = None, executor: Optional[ThreadPoolExecutor] = None) -> None:
        super().__init__(executor)
        self.root = Path(root) if root is not None else None

    def resolve(self, path: str) -> Path:
        p = Path(path)
        if self.root is not None and not p.is_absolute():
            p = self.root / p
        return p

    def _load(self, path: str) -> Any:
        p = self.resolve(path)
        try:
            with p.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise FetchError(path, "file not found") from e
        except json.JSONDecodeError as e:
            raise FetchError(path, f"invalid JSON: {e}") from e
        except OSError as e:
            raise FetchError(path, str(e)) from e


class HttpAssetSource(_ThreadedSource):
    """Single GET of a JSON asset. No retry: a failed fetch is terminal."""

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        super().__init__(executor)
        self.base_url = base_url
        self.timeout = timeout
        self._session = session

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path) if self.base_url else path

    def _load(self, path: str) -> Any:
        url = self.url_for(path)
        getter = self._session.get if self._session is not None else requests.get
        try:
            resp = getter(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise FetchError(url, f"request failed: {e}") from e
        except ValueError as e:
            raise FetchError(url, f"invalid JSON: {e}") from e
