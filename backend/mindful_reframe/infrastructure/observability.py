"""Structured Logging — one JSON line per record, turn metadata as top-level keys.

Invariants:
    - Only allow-listed extra keys are emitted: journal text and chat messages can
      never leak through an unexpected `extra=` field
    - setup_logging is idempotent: a second call replaces its handler, never stacks one
    - SDK / HTTP client chatter capped at WARNING so turn logs stay readable

Design Decisions:
    - stdlib logging with a small formatter, no logging framework
    - Allow-list lives on the formatter instance so tests can format arbitrary records
"""

import logging
import json
from datetime import datetime, timezone

TURN_KEYS = (
    "session_id", "user_id", "turn_count", "status", "reply_kind",
    "error_code", "attempt", "input_tokens", "output_tokens", "path",
)

_QUIET_LOGGERS = ("httpx", "httpcore", "anthropic")


class JSONFormatter(logging.Formatter):
    def __init__(self, extra_keys: tuple[str, ...] = TURN_KEYS):
        super().__init__()
        self.extra_keys = extra_keys

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: record.__dict__[key]
            for key in self.extra_keys
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ReframeHandler(logging.StreamHandler):
    """Marker type so setup_logging can find and replace its own handler."""


def setup_logging(level: str = "INFO", fmt: str = "json"):
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _ReframeHandler)]:
        root.removeHandler(existing)

    handler = _ReframeHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(session_id)s] %(message)s",
            defaults={"session_id": "-"},
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
