"""
=============================================================================
ACCESS LOG
=============================================================================

One structured entry per answered request, written to the dedicated
"minihttp.access" logger so it can be routed or silenced on its own:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

Two formats:

    text   127.0.0.1 - - [2026-10-17T09:12:03+00:00] "GET /echo/abc" 200 3 0.41ms
    json   {"conn_id": "1a2b3c4d", "method": "GET", "target": "/echo/abc", ...}

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured log entry for one request/response exchange."""

    conn_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache combined-log style line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Formats and emits RequestLog entries.

    Args:
        log_format: "text" or "json".
        log_level: Level used for successful requests. 4xx/5xx are logged
                   at WARNING so they stand out.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(self, entry: RequestLog) -> None:
        level = logging.WARNING if entry.status_code >= 400 else self.log_level
        if not logger.isEnabledFor(level):
            return
        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

    @staticmethod
    def timestamp() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="seconds")
