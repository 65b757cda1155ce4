import json
import logging
from datetime import datetime, timezone

_REDACTED_KEYS = frozenset({"password", "new_password", "secret", "access_token", "refresh_token", "token"})


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    user_id: str | None,
    outcome: str,
    level: int = logging.INFO,
    **extra,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "actor_role": actor_role,
        "user_id": user_id,
        "outcome": outcome,
    }
    payload.update({key: value for key, value in extra.items() if key not in _REDACTED_KEYS})
    logger.log(level, json.dumps(payload, default=str))
