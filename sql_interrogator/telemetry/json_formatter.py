"""Single-line JSON log formatting.

Enabled with ``SQLI_STRUCTURED_LOGGING=true`` (or ``--structured-logging``
on the CLI).  Each record becomes one JSON object::

    {
        "timestamp": "2026-01-01T12:00:00.000000+00:00",
        "level": "DEBUG",
        "logger": "sql_interrogator.telemetry.profiling",
        "message": "PROFILE sqli.extract_top_number: 0.041 ms",
        "operation": "sqli.extract_top_number",   // when passed via extra=
        "duration_ms": 0.041,
        "exc_info": "Traceback ..."               // only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any

# ``extra=`` keys copied into the payload when present on a record.
CONTEXT_FIELDS: tuple[str, ...] = ("operation", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str)
