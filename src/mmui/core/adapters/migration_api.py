from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Callable, TypeVar
from urllib.parse import quote

import requests

from mmui.core.client import ClientConfig, get_session
from mmui.core.models import Batch, Instance, Network, QueueEntry, Source, Target

logger = logging.getLogger(__name__)

T = TypeVar("T")


class APIError(RuntimeError):
    """Raised when the daemon rejects a request or cannot be reached."""


class QueryCache:
    """In-memory TTL cache of list queries, keyed by query key (e.g. "batches")."""

    _CACHE_TTL_ENV = "MMUI_CACHE_TTL"
    _CACHE_DISABLE_ENV = "MMUI_CACHE_DISABLE"
    # The web console refetched list views every 10 seconds.
    _DEFAULT_CACHE_TTL_SECONDS = 10

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _cache_ttl_seconds(self) -> int:
        """Return cache TTL in seconds, honoring env override."""
        raw = os.getenv(self._CACHE_TTL_ENV)
        if raw is None:
            return self._DEFAULT_CACHE_TTL_SECONDS
        try:
            return max(int(raw), 0)
        except ValueError:
            return self._DEFAULT_CACHE_TTL_SECONDS

    def _cache_enabled(self) -> bool:
        """Return True if caching is enabled."""
        disabled = os.getenv(self._CACHE_DISABLE_ENV, "").strip().lower()
        if disabled in {"1", "true", "yes"}:
            return False
        return self._cache_ttl_seconds() > 0

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value for key, loading it when missing or stale."""
        if self._cache_enabled():
            with self._lock:
                entry = self._entries.get(key)
            if entry is not None and self._clock() - entry[0] <= self._cache_ttl_seconds():
                return entry[1]

        value = loader()
        if self._cache_enabled():
            with self._lock:
                self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, key: str) -> None:
        """Drop every cached query whose key starts with key."""
        with self._lock:
            stale = [k for k in self._entries if k == key or k.startswith(f"{key}/")]
            for k in stale:
                del self._entries[k]
        logger.debug("Invalidated %d cached quer%s for %r", len(stale), "y" if len(stale) == 1 else "ies", key)


class MigrationAPI:
    """Adapter around the migration daemon's REST API (``/1.0``)."""

    def __init__(
        self,
        config: ClientConfig,
        session: requests.Session | None = None,
        cache: QueryCache | None = None,
    ):
        """Create an API adapter for a daemon."""
        self.config = config
        self.session = session or get_session(config)
        self.cache = cache or QueryCache()

    def _url(self, path: str) -> str:
        return f"{self.config.url}/1.0/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the response envelope's metadata."""
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as exc:
            raise APIError(f"Request to {url} failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {"error": resp.text}

        if not isinstance(payload, dict):
            payload = {"metadata": payload}

        error_code = payload.get("error_code") or 0
        if resp.status_code >= 400 or error_code:
            error = payload.get("error") or resp.reason or "unknown error"
            raise APIError(f"HTTP {resp.status_code}: {error}")

        return payload.get("metadata")

    def _list(self, path: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        metadata = self._request("GET", path, params=params)
        return [item for item in metadata or [] if isinstance(item, dict)]

    def _one(self, path: str) -> dict[str, Any]:
        metadata = self._request("GET", path)
        if not isinstance(metadata, dict):
            raise APIError(f"Unexpected response for {path}")
        return metadata

    # Batches

    def list_batches(self) -> list[Batch]:
        """Return all batches (cached)."""
        return self.cache.get_or_load(
            "batches",
            lambda: [Batch.from_json(b) for b in self._list("batches", {"recursion": "1"})],
        )

    def get_batch(self, name: str) -> Batch:
        return Batch.from_json(self._one(f"batches/{quote(name, safe='')}"))

    def list_batch_instances(self, name: str) -> list[Instance]:
        path = f"batches/{quote(name, safe='')}/instances"
        return [Instance.from_json(i) for i in self._list(path, {"recursion": "1"})]

    def start_batch(self, name: str) -> None:
        self._request("POST", f"batches/{quote(name, safe='')}/:start")

    def stop_batch(self, name: str) -> None:
        self._request("POST", f"batches/{quote(name, safe='')}/:stop")

    def reset_batch(self, name: str) -> None:
        self._request("POST", f"batches/{quote(name, safe='')}/:reset")

    # Queue

    def list_queue(self) -> list[QueueEntry]:
        """Return all queue entries (cached)."""
        return self.cache.get_or_load(
            "queue",
            lambda: [QueueEntry.from_json(q) for q in self._list("queue", {"recursion": "1"})],
        )

    def get_queue_entry(self, uuid: str) -> QueueEntry:
        return QueueEntry.from_json(self._one(f"queue/{quote(uuid, safe='')}"))

    def cancel_queue_entry(self, uuid: str) -> None:
        self._request("POST", f"queue/{quote(uuid, safe='')}/:cancel")

    def retry_queue_entry(self, uuid: str) -> None:
        self._request("POST", f"queue/{quote(uuid, safe='')}/:retry")

    def delete_queue_entry(self, uuid: str) -> None:
        self._request("DELETE", f"queue/{quote(uuid, safe='')}")

    # Instances

    def list_instances(self, include_expression: str | None = None) -> list[Instance]:
        """Return instances, optionally filtered by an include expression (cached per filter)."""
        params = {"recursion": "1"}
        key = "instances"
        if include_expression:
            params["include_expression"] = include_expression
            key = f"instances/{include_expression}"
        return self.cache.get_or_load(
            key,
            lambda: [Instance.from_json(i) for i in self._list("instances", params)],
        )

    def count_instances(self, include_expression: str) -> int:
        """Return how many instances an include expression selects."""
        return len(self.list_instances(include_expression))

    def get_instance(self, uuid: str) -> Instance:
        return Instance.from_json(self._one(f"instances/{quote(uuid, safe='')}"))

    # Networks

    def list_networks(self) -> list[Network]:
        """Return all networks (cached)."""
        return self.cache.get_or_load(
            "networks",
            lambda: [Network.from_json(n) for n in self._list("networks", {"recursion": "1"})],
        )

    def get_network(self, uuid: str) -> Network:
        return Network.from_json(self._one(f"networks/{quote(uuid, safe='')}"))

    def list_network_instances(self, uuid: str) -> list[Instance]:
        path = f"networks/{quote(uuid, safe='')}/instances"
        return [Instance.from_json(i) for i in self._list(path, {"recursion": "1"})]

    # Sources and targets

    def list_sources(self) -> list[Source]:
        """Return all sources (cached)."""
        return self.cache.get_or_load(
            "sources",
            lambda: [Source.from_json(s) for s in self._list("sources", {"recursion": "1"})],
        )

    def list_targets(self) -> list[Target]:
        """Return all targets (cached)."""
        return self.cache.get_or_load(
            "targets",
            lambda: [Target.from_json(t) for t in self._list("targets", {"recursion": "1"})],
        )
