from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union


logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 10 * 1024 * 1024


@dataclass
class CachedResponse:
    url: str
    status_code: int
    headers: Dict[str, str]
    body: bytes
    stored_at: float = 0.0


class DiskCache:
    """A size-bounded response cache on disk, keyed by URL.

    Each entry is a ``<key>.json`` metadata file next to a ``<key>.body``
    payload. The metadata file's mtime doubles as the last-access stamp, and
    entries are evicted least recently used first once the directory grows
    past ``max_size`` bytes.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        max_size: int = DEFAULT_MAX_SIZE,
        time_func=time.time,
    ) -> None:
        self.directory = Path(directory)
        self.max_size = max_size
        self._time_func = time_func
        self._lock = threading.Lock()
        self.directory.mkdir(parents=True, exist_ok=True)

    def get(self, url: str) -> Optional[CachedResponse]:
        meta_path, body_path = self._paths(url)
        with self._lock:
            try:
                meta = json.loads(meta_path.read_text(encoding="utf-8"))
                body = body_path.read_bytes()
            except FileNotFoundError:
                return None
            except (OSError, ValueError) as exc:
                logger.warning("Dropping unreadable cache entry for %s: %s", url, exc)
                self._unlink(meta_path, body_path)
                return None
            if meta.get("url") != url:
                return None
            now = self._time_func()
            os.utime(meta_path, (now, now))
        return CachedResponse(
            url=meta["url"],
            status_code=int(meta["status_code"]),
            headers=dict(meta.get("headers") or {}),
            body=body,
            stored_at=float(meta.get("stored_at", 0.0)),
        )

    def put(self, url: str, entry: CachedResponse) -> None:
        meta_path, body_path = self._paths(url)
        if not entry.stored_at:
            entry.stored_at = self._time_func()
        meta = {
            "url": url,
            "status_code": entry.status_code,
            "headers": entry.headers,
            "stored_at": entry.stored_at,
        }
        if len(entry.body) > self.max_size:
            logger.debug("Not caching %s: %s bytes exceeds cache size", url, len(entry.body))
            return
        with self._lock:
            body_path.write_bytes(entry.body)
            meta_path.write_text(json.dumps(meta), encoding="utf-8")
            now = self._time_func()
            os.utime(meta_path, (now, now))
            self._trim()

    def remove(self, url: str) -> None:
        with self._lock:
            self._unlink(*self._paths(url))

    def clear(self) -> None:
        with self._lock:
            for path in self.directory.glob("*.json"):
                self._unlink(path, path.with_suffix(".body"))

    def size(self) -> int:
        with self._lock:
            return sum(entry_size for _, entry_size, _ in self._entries())

    # Helpers ------------------------------------------------------------
    def _paths(self, url: str) -> Tuple[Path, Path]:
        key = hashlib.sha256(url.encode("utf-8")).hexdigest()
        return self.directory / f"{key}.json", self.directory / f"{key}.body"

    def _entries(self) -> List[Tuple[float, int, Path]]:
        entries = []
        for meta_path in self.directory.glob("*.json"):
            body_path = meta_path.with_suffix(".body")
            try:
                stat = meta_path.stat()
                entry_size = stat.st_size + body_path.stat().st_size
            except FileNotFoundError:
                continue
            entries.append((stat.st_mtime, entry_size, meta_path))
        return entries

    def _trim(self) -> None:
        entries = sorted(self._entries())
        total = sum(entry_size for _, entry_size, _ in entries)
        for _, entry_size, meta_path in entries:
            if total <= self.max_size:
                break
            logger.debug("Evicting %s", meta_path.name)
            self._unlink(meta_path, meta_path.with_suffix(".body"))
            total -= entry_size

    def _unlink(self, *paths: Path) -> None:
        for path in paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass


__all__ = ["CachedResponse", "DEFAULT_MAX_SIZE", "DiskCache"]
