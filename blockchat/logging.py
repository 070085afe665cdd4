from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

from blockchat.config import get_log_path, load_config

# One id per chat command, shared by every log line it produces.
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_correlation_id(cid: str) -> None:
    _correlation_id.set(cid)


@contextmanager
def correlation_context(cid: str | None = None) -> Generator[str, None, None]:
    """Tag all logging inside the block with one correlation id."""
    token = _correlation_id.set(cid or _new_id())
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


class CorrelationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            entry["data"] = record.extra_data
        return json.dumps(entry, default=str)


def configure_logging(config: dict[str, Any] | None = None) -> None:
    cfg = config or load_config()
    log_cfg = cfg.get("logging", {}) if isinstance(cfg.get("logging"), dict) else {}
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        # Already configured (tests, or a host application).
        return

    fmt: logging.Formatter
    if log_cfg.get("json_format", False):
        fmt = StructuredFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s")

    # The console channel owns stdout, so log lines go to stderr.
    stream = logging.StreamHandler()
    handlers: list[logging.Handler] = [stream]

    if log_cfg.get("file", True):
        log_path = get_log_path(cfg)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"))

    correlation_filter = CorrelationFilter()
    for handler in handlers:
        handler.setFormatter(fmt)
        handler.addFilter(correlation_filter)
        root.addHandler(handler)


def log_with_context(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message carrying structured data for the JSON formatter."""
    if not logger.isEnabledFor(level):
        return
    record = logger.makeRecord(logger.name, level, "(unknown)", 0, message, (), None)
    record.extra_data = extra
    logger.handle(record)
