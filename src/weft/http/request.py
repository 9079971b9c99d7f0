"""
=============================================================================
HTTP REQUEST
=============================================================================

The per-request view of an incoming request that dispatch routines,
query validation and handlers work with.

weft does not parse HTTP. The transport (a WSGI server, a test, another
framework) hands over a method, a request target and headers; this module
turns them into an HTTPRequest.

=============================================================================
THE RAW PATH MATTERS
=============================================================================

    GET /quake;cachebust=1?publicID=2016p858000 HTTP/1.1
        ──────────┬────────── ─────────┬─────────
                  │                    │
                path                query

Some caching proxies ignore everything after ';' in the path segment while
still caching by the full path. A request like the one above can poison the
cache entry for /quake. Query validation rejects any path containing ';',
so the path is kept exactly as received:

    urlparse("/quake;x=1")  → path="/quake", params="x=1"   ✗ (loses ';')
    urlsplit("/quake;x=1")  → path="/quake;x=1"             ✓

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qs, urlsplit


def _decode_wsgi(value: str) -> str:
    """Re-read a PEP 3333 native string (latin-1 code points) as UTF-8."""
    try:
        return value.encode("latin-1").decode("utf-8", "replace")
    except UnicodeEncodeError:
        # Not a native string (code points above U+00FF): keep as is
        return value


@dataclass
class HTTPRequest:
    """
    A request as seen by weft.

    Attributes:
        method:         HTTP method, uppercase ("GET", "PUT", ...)
        path:           Raw request path, without the query string,
                        including any ';' segment
        headers:        Header name → value, names lowercased
        query_params:   Parsed query string, name → list of values.
                        Blank values are kept: "?a&b=" → {"a": [""], "b": [""]}
        query_string:   The raw query string
        client_address: (ip, port) of the client, if known
    """

    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    query_string: str = ""
    client_address: tuple[str, int] = ("", 0)

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        headers: Optional[Mapping[str, str]] = None,
        client_address: tuple[str, int] = ("", 0),
    ) -> "HTTPRequest":
        """
        Build a request from a method and a request target.

        Args:
            method: HTTP method (any case)
            target: Request target, e.g. "/quake?publicID=1"
            headers: Request headers (any case)
            client_address: (ip, port) of the client

        Example:
            request = HTTPRequest.from_target(
                "GET", "/quake?publicID=1", {"Accept": "application/json"}
            )
        """
        parts = urlsplit(target)
        return cls(
            method=method.upper(),
            path=parts.path or "/",
            headers={k.lower(): v for k, v in (headers or {}).items()},
            query_params=parse_qs(parts.query, keep_blank_values=True),
            query_string=parts.query,
            client_address=client_address,
        )

    @classmethod
    def from_environ(cls, environ: Mapping[str, object]) -> "HTTPRequest":
        """
        Build a request from a WSGI environ (PEP 3333).

        HTTP_* keys become headers: HTTP_ACCEPT_ENCODING → "accept-encoding".
        CONTENT_TYPE and CONTENT_LENGTH are not prefixed in WSGI and are
        copied over explicitly.

        PATH_INFO and QUERY_STRING arrive as latin-1 "bytes-as-str" and are
        decoded as UTF-8, so "/café" matches a URI registered as "/café".
        """
        headers: Dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = str(value)
        for key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            if environ.get(key):
                headers[key.replace("_", "-").lower()] = str(environ[key])

        query = _decode_wsgi(str(environ.get("QUERY_STRING", "") or ""))
        try:
            port = int(environ.get("REMOTE_PORT", 0) or 0)
        except ValueError:
            port = 0

        return cls(
            method=str(environ.get("REQUEST_METHOD", "GET")).upper(),
            path=_decode_wsgi(str(environ.get("PATH_INFO", "") or "/")),
            headers=headers,
            query_params=parse_qs(query, keep_blank_values=True),
            query_string=query,
            client_address=(str(environ.get("REMOTE_ADDR", "") or ""), port),
        )

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def accept(self) -> str:
        """The Accept header, verbatim ("" when absent)."""
        return self.headers.get("accept", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    def accepts_gzip(self) -> bool:
        """True if the client's Accept-Encoding mentions gzip."""
        return "gzip" in self.headers.get("accept-encoding", "")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("Accept-Encoding")
        """
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the first value of a query parameter.

        Example:
            # URL: /quake?publicID=1&publicID=2
            request.get_query("publicID")  # Returns "1"
        """
        values = self.query_params.get(name, [])
        return values[0] if values else default
