"""
=============================================================================
HTTP RESPONSE
=============================================================================

The per-request outgoing side of an exchange: a header set that handlers
and dispatch routines fill in, an explicit error-presentation marker, and
a sink the response writer flushes the status line and body into.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    make_handler()          dispatch routine          write()
    creates Response  ───►  handler sets headers ───► resolves status,
    (Vary, Surrogate-       and error_style           headers, body;
     Control preset)                                   write_head() + write()
                                                            │
                                                            ▼
                                                  transport reads status,
                                                  headers and body
                                                  (WSGI adapter, to_bytes())

=============================================================================
THE ERROR-PRESENTATION MARKER
=============================================================================

A handler that fails decides how the error body should look:

    response.error_style = ErrorStyle.PAGE      # canned HTML error page
    response.error_style = ErrorStyle.MESSAGE   # Result.msg as text/plain
    (unset)                                     # same as MESSAGE

Older handlers signal the same thing with a "Weft-Error: page|msg" response
header. The writer honours that header and always strips it: it must never
reach the client.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Union
from wsgiref.headers import Headers

from .status_codes import reason_phrase


# Header names used across weft.
CONTENT_TYPE = "Content-Type"
CONTENT_ENCODING = "Content-Encoding"
CONTENT_LENGTH = "Content-Length"
SURROGATE_CONTROL = "Surrogate-Control"
VARY = "Vary"
ERROR_STYLE_HEADER = "Weft-Error"


class ErrorStyle(str, Enum):
    """How the body of a non-200 response is presented."""

    UNSET = ""
    PAGE = "page"
    MESSAGE = "message"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ErrorStyle":
        """
        Interpret a marker value.

        "msg" is accepted as a synonym of "message"; unknown values fall
        back to UNSET (which the writer treats as MESSAGE).
        """
        value = (value or "").strip().lower()
        if value == "page":
            return cls.PAGE
        if value in ("message", "msg"):
            return cls.MESSAGE
        return cls.UNSET


class ResponseAlreadyWritten(RuntimeError):
    """Raised when a status line is written twice for one response."""


@dataclass
class Response:
    """
    Outgoing response for a single request.

    Attributes:
        headers:     Outgoing headers (case-insensitive)
        error_style: Error-presentation marker for non-200 results
        status:      Status code once written, None before
        body:        Bytes written so far
        version:     HTTP version for the status line
    """

    headers: Headers = field(default_factory=lambda: Headers([]))
    error_style: ErrorStyle = ErrorStyle.UNSET
    status: Optional[int] = None
    body: bytearray = field(default_factory=bytearray)
    version: str = "HTTP/1.1"

    # =========================================================================
    # HEADER HELPERS
    # =========================================================================

    def set_header(self, name: str, value: str) -> "Response":
        """Set (replace) a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def get_header(self, name: str, default: str = "") -> str:
        value = self.headers.get(name)
        return default if value is None else value

    # =========================================================================
    # WRITING
    # =========================================================================

    @property
    def head_written(self) -> bool:
        return self.status is not None

    def write_head(self, status: int) -> None:
        """
        Commit the status code. After this, headers are final.

        Raises:
            ResponseAlreadyWritten: If a status was already written
        """
        if self.status is not None:
            raise ResponseAlreadyWritten(
                f"status {self.status} already written, refusing {status}"
            )
        self.status = int(status)

    def write(self, data: Union[bytes, bytearray]) -> int:
        """
        Append body bytes, committing a 200 status first if none was written.

        Returns:
            Number of bytes written
        """
        if self.status is None:
            self.write_head(200)
        self.body.extend(data)
        return len(data)

    # =========================================================================
    # SERIALIZATION (for transports)
    # =========================================================================

    @property
    def status_line(self) -> str:
        """
        The HTTP status line.

        Example: "HTTP/1.1 404 Not Found"
        """
        status = self.status if self.status is not None else 200
        return f"{self.version} {status} {reason_phrase(status)}"

    @property
    def wsgi_status(self) -> str:
        """The status string a WSGI start_response expects, e.g. "200 OK"."""
        status = self.status if self.status is not None else 200
        return f"{status} {reason_phrase(status)}"

    def header_items(self) -> List[Tuple[str, str]]:
        """Headers as a list of (name, value), with Content-Length added."""
        items = [(k, v) for k, v in self.headers.items() if k.lower() != "content-length"]
        items.append((CONTENT_LENGTH, str(len(self.body))))
        return items

    def to_bytes(self) -> bytes:
        """
        Serialize the whole response for a raw socket transport.

            HTTP/1.1 200 OK\\r\\n
            Content-Type: application/json\\r\\n
            Content-Length: 27\\r\\n
            Date: Wed, 01 Jan 2026 12:00:00 GMT\\r\\n
            \\r\\n
            {"message": "Hello"}
        """
        lines = [self.status_line]
        for name, value in self.header_items():
            lines.append(f"{name}: {value}")
        if self.headers.get("Date") is None:
            lines.append(f"Date: {format_http_date(datetime.now(timezone.utc))}")
        lines.append("")
        return "\r\n".join(lines).encode("latin-1") + b"\r\n" + bytes(self.body)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231), always in GMT.

    Example: Wed, 01 Jan 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
