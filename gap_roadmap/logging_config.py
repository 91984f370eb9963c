# gap_roadmap/logging_config.py
"""
Stderr-only logging configuration.

Stdout is reserved for rendered artifacts (roadmaps, reports) so CLI
output stays pipeable. Logs go to stderr as JSON lines or plain text.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

_LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, timestamped in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(verbosity: str = "normal", json_logs: bool = False) -> None:
    """
    Configure the root logger to write to stderr only.

    Clears existing handlers so repeated calls (e.g. from tests) do not
    stack handlers.

    Args:
        verbosity: One of "quiet", "normal", "verbose"
        json_logs: Emit JSON lines instead of human-readable text
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s  %(levelname)-7s  %(message)s",
            datefmt="%H:%M:%S",
        ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_LEVELS.get(verbosity, logging.INFO))
