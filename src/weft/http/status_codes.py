"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes an API built with weft actually produces, with their
reason phrases for the status line.

=============================================================================
WHICH CODES MATTER HERE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Code │ Who produces it                                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │ 200  │ handlers, and the writer when a handler returns code 0       │
    │ 400  │ query validation (missing / extra params, cache buster)      │
    │ 404  │ the mux for unregistered URIs, handlers for missing data     │
    │ 405  │ dispatch routines for undeclared methods                     │
    │ 406  │ dispatch routines when no Accept value matches               │
    │ 500  │ handlers wrapping an error, make_handler on an exception     │
    │ 503  │ handlers wrapping an upstream outage                         │
    └─────────────────────────────────────────────────────────────────────┘

Handlers are free to return any integer code. Codes that are not members
of the enum still get a status line, with the reason phrase "Unknown".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by weft.

    Being an IntEnum, members compare equal to plain integers, so a
    ``Result(code=404)`` and ``HTTPStatus.NOT_FOUND`` are interchangeable:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301
    FOUND = 302
    NOT_MODIFIED = 304

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400                   # Query contract violated
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404                     # Unregistered URI or missing data
    METHOD_NOT_ALLOWED = 405            # Method not declared by the endpoint
    NOT_ACCEPTABLE = 406                # No GET variant for the Accept header
    GONE = 410
    TOO_MANY_REQUESTS = 429

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

    @property
    def phrase(self) -> str:
        """The reason phrase that follows the code in a status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_ACCEPTABLE: "Not Acceptable",
    HTTPStatus.GONE: "Gone",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.BAD_GATEWAY: "Bad Gateway",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.GATEWAY_TIMEOUT: "Gateway Timeout",
}


def reason_phrase(code: int) -> str:
    """
    Get the reason phrase for any integer status code.

    Args:
        code: Status code, known to the enum or not (e.g. 999)

    Returns:
        The phrase, or "Unknown" for codes outside the enum
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"
