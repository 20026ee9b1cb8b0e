"""Logging setup shared by the API, the CLI and the pipeline observer."""

from __future__ import annotations

import datetime as dt
import json
import logging

ROOT_LOGGER = "leadscrub"

_DEF_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event:
            payload["event"] = event
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", fmt: str = "text", *, force: bool = False) -> None:
    """Attach a single stream handler to the package logger."""
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_DEF_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``leadscrub`` namespace."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
