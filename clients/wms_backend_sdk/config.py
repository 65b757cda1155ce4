from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BASE_URL = "http://localhost:54321/"


@dataclass(frozen=True)
class SDKConfig:
    base_url: str
    anon_key: str
    service_role_key: str
    timeout_seconds: float
    verify_ssl: bool
    retry_max_attempts: int
    retry_backoff_ms: int

    @classmethod
    def from_env(cls, env_file: str = ".env") -> "SDKConfig":
        _load_dotenv(env_file)
        base_url = _normalize_base_url(os.getenv("WMS_BACKEND_URL", DEFAULT_BASE_URL))
        anon_key = os.getenv("WMS_BACKEND_ANON_KEY", "").strip()
        service_role_key = os.getenv("WMS_BACKEND_SERVICE_ROLE_KEY", "").strip()
        timeout_seconds = float(os.getenv("WMS_BACKEND_TIMEOUT_SECONDS", "15"))
        verify_ssl = parse_bool(os.getenv("WMS_BACKEND_VERIFY_SSL", "true"), default=True)
        retry_max_attempts = max(1, int(os.getenv("WMS_BACKEND_RETRY_MAX_ATTEMPTS", "3")))
        retry_backoff_ms = max(0, int(os.getenv("WMS_BACKEND_RETRY_BACKOFF_MS", "250")))
        return cls(
            base_url=base_url,
            anon_key=anon_key,
            service_role_key=service_role_key,
            timeout_seconds=timeout_seconds,
            verify_ssl=verify_ssl,
            retry_max_attempts=retry_max_attempts,
            retry_backoff_ms=retry_backoff_ms,
        )

    def with_base_url(self, base_url: str) -> "SDKConfig":
        return SDKConfig(
            base_url=_normalize_base_url(base_url),
            anon_key=self.anon_key,
            service_role_key=self.service_role_key,
            timeout_seconds=self.timeout_seconds,
            verify_ssl=self.verify_ssl,
            retry_max_attempts=self.retry_max_attempts,
            retry_backoff_ms=self.retry_backoff_ms,
        )


def _normalize_base_url(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        return DEFAULT_BASE_URL
    return normalized if normalized.endswith("/") else f"{normalized}/"


def parse_bool(value: str | bool | None, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default

    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _load_dotenv(path: str) -> None:
    dotenv_path = Path(path)
    if not dotenv_path.exists():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
