from __future__ import annotations

import json
import logging
from contextvars import ContextVar

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def bind_trace_id(trace_id: str):
    return _trace_id.set(trace_id)


def reset_trace_id(token) -> None:
    _trace_id.reset(token)


def current_trace_id() -> str:
    return _trace_id.get()


def log_json(logger: logging.Logger, payload: dict, level: int = logging.INFO) -> None:
    if "trace_id" not in payload:
        payload = {**payload, "trace_id": current_trace_id()}
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
