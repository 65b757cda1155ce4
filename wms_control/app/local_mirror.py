"""Durable key/value mirror of the in-memory cache and the resolved profile.

Each key is one JSON file under the mirror directory. Unreadable or malformed
files read as absent so a corrupt mirror never blocks a cold start.
"""

from __future__ import annotations

import json
import os
import re
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from wms_control.app.config import DEFAULT_MIRROR_DIR
from wms_control.app.infrastructure.logging.logger import get_logger

PROFILE_KEY = "user"
ROLE_KEY = "user_role"
SESSION_MARKER_KEY = "currentUser"
SESSION_MARKER_TTL_SECONDS = 24 * 60 * 60

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")

logger = get_logger("wms_control.local_mirror")


def _mirror_dir() -> Path:
    configured = os.getenv("WMS_LOCAL_MIRROR_DIR", "").strip()
    return Path(configured) if configured else DEFAULT_MIRROR_DIR


class LocalMirror:
    def __init__(self, directory: Path | str | None = None, now: Callable[[], float] | None = None) -> None:
        self.directory = Path(directory) if directory is not None else _mirror_dir()
        self._now = now or time.time
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"invalid mirror key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        with self._lock:
            if not path.exists():
                return default
            try:
                return json.loads(path.read_text(encoding="utf-8"))
            except (ValueError, OSError):
                logger.warning("mirror key %s is unreadable; treating as absent", key)
                return default

    def write(self, key: str, value: Any) -> bool:
        path = self._path(key)
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = path.with_suffix(".json.tmp")
                tmp_path.write_text(json.dumps(value, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
                tmp_path.replace(path)
            except OSError as exc:
                logger.warning("mirror write failed for key %s: %s", key, exc)
                return False
        return True

    def remove(self, key: str) -> None:
        path = self._path(key)
        with self._lock:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("mirror remove failed for key %s: %s", key, exc)

    def clear(self) -> None:
        with self._lock:
            if not self.directory.exists():
                return
            for path in self.directory.glob("*.json"):
                try:
                    path.unlink()
                except OSError as exc:
                    logger.warning("mirror clear failed for %s: %s", path.name, exc)

    def write_marker(self, key: str, value: str, ttl_seconds: float = SESSION_MARKER_TTL_SECONDS) -> bool:
        return self.write(key, {"value": value, "expires_at": self._now() + ttl_seconds})

    def read_marker(self, key: str) -> str | None:
        payload = self.read(key)
        if not isinstance(payload, dict):
            return None
        expires_at = payload.get("expires_at")
        if not isinstance(expires_at, (int, float)) or expires_at <= self._now():
            return None
        value = payload.get("value")
        return str(value) if value is not None else None
