"""File-backed JSON cache with per-namespace TTLs.

Each entry lives in its own file, `<namespace>_<sanitized key>.json`, holding
the payload together with the time it was written. Writes replace the whole
file atomically, so concurrent writers can only race to last-writer-wins and
readers never observe a partial file.
"""

import json
import os
import re
import tempfile
import threading
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from meshlocator.logger import logger

CLIENT_NAMESPACE = "client"
GEO_NAMESPACE = "geo"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class CacheOutcome(str, Enum):
    miss = "miss"
    expired = "expired"
    valid = "valid"


class CacheLookup(NamedTuple):
    outcome: CacheOutcome
    payload: dict[str, Any] | None = None

    @property
    def hit(self) -> bool:
        return self.outcome is CacheOutcome.valid


def sanitize_key(key: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", key)


class CacheStore:
    """TTL cache persisted as one JSON file per entry."""

    def __init__(
        self,
        cache_dir: str | Path,
        ttls: dict[str, int],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache_dir = Path(cache_dir)
        self._ttls = dict(ttls)
        self._clock = clock
        self._write_lock = threading.Lock()

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, namespace: str, key: str) -> Path:
        if namespace not in self._ttls:
            raise KeyError(f"Unknown cache namespace: {namespace}")
        return self._cache_dir / f"{namespace}_{sanitize_key(key)}.json"

    def lookup(self, namespace: str, key: str) -> CacheLookup:
        path = self.path_for(namespace, key)
        entry = self._read_entry(path)
        if entry is None:
            return CacheLookup(CacheOutcome.miss)

        written_at, payload = entry
        if self._clock() - written_at > self._ttls[namespace]:
            return CacheLookup(CacheOutcome.expired)
        return CacheLookup(CacheOutcome.valid, payload)

    def load(self, namespace: str, key: str) -> dict[str, Any] | None:
        """Return the cached payload, or None for a missing or expired entry."""
        result = self.lookup(namespace, key)
        return result.payload if result.hit else None

    def save(self, namespace: str, key: str, payload: dict[str, Any]) -> None:
        path = self.path_for(namespace, key)
        document = {"written_at": self._clock(), "payload": payload}

        with self._write_lock:
            try:
                self._cache_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, prefix=f".{path.name}.", suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        json.dump(document, fh, indent=2, ensure_ascii=False)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                # An unwritable cache only costs a repeated lookup next time.
                logger.warning(f"Failed to write cache entry path={path} error={exc!r}")

    @staticmethod
    def _read_entry(path: Path) -> tuple[float, dict[str, Any]] | None:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning(f"Failed to read cache entry path={path} error={exc!r}")
            return None

        try:
            document = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring malformed cache entry path={path}")
            return None

        if not isinstance(document, dict):
            return None
        written_at = document.get("written_at")
        payload = document.get("payload")
        if isinstance(written_at, bool) or not isinstance(written_at, (int, float)) or not isinstance(payload, dict):
            logger.warning(f"Ignoring malformed cache entry path={path}")
            return None
        return float(written_at), payload
