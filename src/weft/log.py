"""
=============================================================================
LOGGING
=============================================================================

weft logs through the standard logging module with namespaced loggers:

    weft.api.compiler   compilation summary (DEBUG)
    weft.writer         zero status codes (WARNING)
    weft.mux            handler exceptions (ERROR, with traceback)
    weft.access         one record per served request (INFO)

Applications configure these like any other logger:

    logging.getLogger("weft.access").setLevel(logging.WARNING)
    logging.getLogger("weft.access").addHandler(file_handler)

=============================================================================
ACCESS LOG FORMATS
=============================================================================

    text (Apache-style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 10.0.0.7 - - [17/Oct/2026:10:55:36 +0000] "GET /quake" 200 1234 5ms │
    │ ─────────   ──────────────────────────── ──────────── ─── ──── ───  │
    │ client IP   timestamp                    method/path  code size dur │
    └─────────────────────────────────────────────────────────────────────┘

    json:
        {"request_id": "a1b2c3d4", "method": "GET", "path": "/quake", ...}

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass

access_logger = logging.getLogger("weft.access")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ACCESS_LOG_FORMATS = ("text", "json")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger and the weft logger level.

    Args:
        level: Level name ("DEBUG", "INFO", ...); unknown names mean INFO
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    logging.getLogger("weft").setLevel(numeric)


def new_request_id() -> str:
    """A short random id for correlating log lines of one request."""
    return uuid.uuid4().hex[:8]


@dataclass
class RequestLog:
    """
    Structured access-log entry for one request.

    request_id:     Short random id
    method:         HTTP method
    path:           Raw request path
    query:          Raw query string
    client_ip:      Client address, "-" if unknown
    user_agent:     User-Agent header, "-" if absent
    status_code:    Status written
    content_length: Body size in bytes (after compression)
    duration_ms:    Time spent serving the request
    timestamp:      Apache-style local time
    """

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @staticmethod
    def now() -> str:
        return time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        path = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )

    def render(self, log_format: str = "text") -> str:
        """The entry in the given access log format ("text" or "json")."""
        if log_format == "json":
            return json.dumps(self.to_dict())
        return self.to_text()

    def emit(self, log_format: str = "text", level: int = logging.INFO) -> None:
        access_logger.log(level, self.render(log_format))
