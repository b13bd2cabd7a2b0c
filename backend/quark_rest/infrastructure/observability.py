"""Structured Logging — JSON log lines carrying Task context.

Invariants:
    - Every line has timestamp, level, logger and message
    - Task context passed via `extra=` (resource_type, resource_id, user, method,
      error_code, attempt, status_code, path) is emitted only when set
    - setup_logging() installs exactly one handler, however often it is called

Design Decisions:
    - stdlib logging + a small formatter, no logging dependency
    - Called from the app lifespan, so importing the package never touches logging
"""

import json
import logging
from datetime import datetime, timezone

TASK_CONTEXT_KEYS = (
    "resource_type", "resource_id", "user", "method", "error_code",
    "attempt", "status_code", "path",
)

_HANDLER_NAME = "quark-rest"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update({
            key: record.__dict__[key]
            for key in TASK_CONTEXT_KEYS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
