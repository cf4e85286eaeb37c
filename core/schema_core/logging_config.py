"""Process-wide logging setup.

Library modules only ever call ``logging.getLogger(__name__)``.  Entry points
(the CLI, an embedding web server) call :func:`configure_logging` once to pick
between human-readable text lines and single-line JSON records.
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Output schema per line::

        {
            "timestamp": "2026-05-15T12:34:56.789012+00:00",
            "level": "INFO",
            "logger": "schema_core.store.version_store",
            "message": "Created version 3",
            "exc_info": "Traceback ..."  // present only on exceptions
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        version = getattr(record, "version", None)
        if version is not None:
            payload["version"] = version

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: str = "WARNING", *, structured: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Parameters
    ----------
    level:
        Root log level name, e.g. ``"INFO"``.
    structured:
        Emit JSON lines via :class:`JSONFormatter` instead of plain text.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
