from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from clients.wms_backend_sdk.config import _load_dotenv, parse_bool

INIT_SAFETY_TIMEOUT_SECONDS = 2.0
REFRESH_DEBOUNCE_SECONDS = 1.0
STALE_AFTER_SECONDS = 300.0
REFRESH_CHECK_INTERVAL_SECONDS = 60.0
DEFAULT_MIRROR_DIR = Path.home() / ".wms_control" / "mirror"
DEFAULT_ADMIN_API_URL = "http://localhost:8000/"


@dataclass(frozen=True)
class AppConfig:
    init_safety_timeout_seconds: float = INIT_SAFETY_TIMEOUT_SECONDS
    refresh_debounce_seconds: float = REFRESH_DEBOUNCE_SECONDS
    stale_after_seconds: float = STALE_AFTER_SECONDS
    refresh_check_interval_seconds: float = REFRESH_CHECK_INTERVAL_SECONDS
    # Unresolvable profiles become full admins while this is on. Needs product sign-off.
    fallback_admin_profile: bool = True
    mirror_dir: Path = DEFAULT_MIRROR_DIR
    admin_api_url: str = DEFAULT_ADMIN_API_URL

    @classmethod
    def from_env(cls, env_file: str = ".env") -> "AppConfig":
        _load_dotenv(env_file)
        mirror_dir = os.getenv("WMS_LOCAL_MIRROR_DIR", "").strip()
        config = cls(
            init_safety_timeout_seconds=float(
                os.getenv("WMS_INIT_SAFETY_TIMEOUT_SECONDS", str(INIT_SAFETY_TIMEOUT_SECONDS))
            ),
            refresh_debounce_seconds=float(os.getenv("WMS_REFRESH_DEBOUNCE_SECONDS", str(REFRESH_DEBOUNCE_SECONDS))),
            stale_after_seconds=float(os.getenv("WMS_STALE_AFTER_SECONDS", str(STALE_AFTER_SECONDS))),
            refresh_check_interval_seconds=float(
                os.getenv("WMS_REFRESH_CHECK_INTERVAL_SECONDS", str(REFRESH_CHECK_INTERVAL_SECONDS))
            ),
            fallback_admin_profile=parse_bool(os.getenv("WMS_FALLBACK_ADMIN_PROFILE", "true"), default=True),
            mirror_dir=Path(mirror_dir) if mirror_dir else DEFAULT_MIRROR_DIR,
            admin_api_url=os.getenv("WMS_ADMIN_API_URL", DEFAULT_ADMIN_API_URL).strip() or DEFAULT_ADMIN_API_URL,
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.init_safety_timeout_seconds <= 0:
            raise ValueError("WMS_INIT_SAFETY_TIMEOUT_SECONDS must be greater than 0")
        if self.refresh_debounce_seconds <= 0:
            raise ValueError("WMS_REFRESH_DEBOUNCE_SECONDS must be greater than 0")
        if self.stale_after_seconds <= 0:
            raise ValueError("WMS_STALE_AFTER_SECONDS must be greater than 0")
        if self.refresh_check_interval_seconds <= 0:
            raise ValueError("WMS_REFRESH_CHECK_INTERVAL_SECONDS must be greater than 0")
