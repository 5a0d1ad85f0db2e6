"""Structured logging with a per-request correlation ID.

A current-zone check or destination recommendation logs from several
modules (index build, classify, policy). Each line carries the request's
correlation_id so those lines can be grouped after the fact, in JSON for
deployed services and in plain text for a terminal.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Whitelisted keys from logger.info("msg", extra={...})
EXTRA_FIELDS = ("match_type", "category", "distance_m", "duration_ms")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_correlation_id() -> str:
    """Correlation ID of the current request, or "" outside one."""
    return correlation_id.get()


def new_correlation_id(incoming: str | None = None) -> str:
    """Reuse a caller-supplied request ID when present, otherwise mint one."""
    incoming = (incoming or "").strip()
    return incoming or str(uuid.uuid4())


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Args:
        fields: ``extra`` keys copied into the output when set on a record.
    """

    def __init__(self, fields: tuple[str, ...] = EXTRA_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        cid = correlation_id.get()
        if cid:
            entry["correlation_id"] = cid

        entry.update(
            (key, record.__dict__[key])
            for key in self.fields
            if record.__dict__.get(key) is not None
        )

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines; the correlation ID is appended when set."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        cid = correlation_id.get()
        return f"{line} [cid={cid}]" if cid else line


def setup_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Replace root handlers with a single stream handler.

    Args:
        json_format: JSONFormatter when True, TextFormatter otherwise.
        level: level name; unknown names fall back to INFO.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if json_format else TextFormatter())
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "mlflow"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
