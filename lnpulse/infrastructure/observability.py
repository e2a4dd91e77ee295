"""Structured Logging — one JSON object per line on stderr.

Invariants:
    - Every line carries ts, level, logger, message; task when logged from a
      named asyncio task (3.12+ records it)
    - Only whitelisted extra keys are surfaced: the ones services pass via
      `extra=` or LnPulseError.to_log_extra()
    - stdout is left alone for the terminal renderer
    - setup_logging() is idempotent: calling it again swaps the handler

Design Decisions:
    - stdlib logging + json, no structlog: the process logs a few lines per
      refresh tick
"""

import logging
import json
import sys
from datetime import datetime, timezone

_EXTRA_KEYS: tuple[str, ...] = (
    "operation", "channel_point", "pub_key", "error_code", "error_category", "severity",
    "status_code", "duration_ms", "added", "enriched", "peer_lookups_failed",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Marks the handler installed by setup_logging so a second call replaces it
_HANDLER_NAME = "lnpulse"


class JSONFormatter(logging.Formatter):
    """LogRecord -> single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        task = getattr(record, "taskName", None)
        if task:
            entry["task"] = task
        entry.update(
            (key, record.__dict__[key])
            for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the stderr handler on the root logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )

    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
