"""Logging for the CDP spec backend.

One stdout handler on the root logger, JSON lines by default
(``LOG_FORMAT=json``) or a plain text line for local runs.  Session and
timing context travel as ``extra=`` fields on the record.
"""
import json
import logging
import sys
from datetime import datetime, timezone

# Record attributes passed via ``extra=`` that end up in the output.
CONTEXT_FIELDS = ("session_id", "duration_ms")

# Third-party clients that log every request at INFO.
# supabase reaches PostgREST over httpx; Gemini calls go through requests/urllib3.
NOISY_LOGGERS = ("uvicorn.access", "supabase", "postgrest", "httpx", "httpcore", "urllib3", "PIL")


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    def format(self, record):
        line = super().format(record)
        sid = getattr(record, "session_id", None)
        return f"{line} (session={sid})" if sid else line


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
