"""
=============================================================================
RESPONSE WRITER / CONTENT NEGOTIATION
=============================================================================

Turns a handler's Result and output buffer into the response on the wire:
status code, cache directives, Content-Type, optional gzip, and for errors
a synthesized body.

=============================================================================
ONE WRITE, FOUR STATES
=============================================================================

    ┌──────────┐  resolve    ┌────────────────┐  resolve   ┌──────────────┐
    │   INIT   │ ──status──► │ STATUS_RESOLVED│ ──body───► │ BODY_RESOLVED│
    └──────────┘             └────────────────┘            └──────┬───────┘
                                                                  │ flush
                                                                  ▼
                                                           ┌──────────────┐
                                                           │   FLUSHED    │
                                                           └──────────────┘

    INIT → STATUS_RESOLVED
        code 0 becomes 200 (with a warning: a handler forgot to set it).
        Surrogate-Control defaults to max-age=10 unless already set.

    STATUS_RESOLVED → BODY_RESOLVED      (non-200 only)
        error body from the error-presentation marker:
            page     → text/html, canned page for the status
            message  → text/plain, Result.msg           (the default)
        Surrogate-Control from the fixed status table, overriding the caller.
        The Weft-Error header is stripped in every case.

    BODY_RESOLVED → FLUSHED
        sniff Content-Type if unset, add Vary: Accept-Encoding, gzip when
        the client accepts it and the body is big and compressible, then
        write the status line followed by the body.

=============================================================================
SURROGATE-CONTROL TABLE
=============================================================================

    ┌───────────────────┬────────────────┬────────────────────────────────┐
    │ Status            │ Directive      │ Reason                         │
    ├───────────────────┼────────────────┼────────────────────────────────┤
    │ 200               │ max-age=10     │ unless the handler set one     │
    │ 400, 405          │ max-age=86400  │ a bad URL stays bad            │
    │ 404, 500, 503     │ max-age=10     │ may become available soon      │
    │ anything else     │ max-age=10     │                                │
    └───────────────────┴────────────────┴────────────────────────────────┘

Surrogate-Control is read by CDNs and caching proxies, not by browsers.

=============================================================================
"""

import gzip
import io
import logging
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .http.mime_types import (
    TEXT_HTML_UTF8,
    TEXT_PLAIN_UTF8,
    is_compressible,
    sniff_content_type,
)
from .http.request import HTTPRequest
from .http.response import (
    CONTENT_ENCODING,
    CONTENT_TYPE,
    ERROR_STYLE_HEADER,
    SURROGATE_CONTROL,
    VARY,
    ErrorStyle,
    Response,
)
from .http.status_codes import HTTPStatus
from .pages import error_page
from .result import Result

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# CACHE DIRECTIVES
# ─────────────────────────────────────────────────────────────────────────────
MAX_AGE_SHORT = "max-age=10"
MAX_AGE_LONG = "max-age=86400"

SURROGATE_DIRECTIVES: Mapping[int, str] = MappingProxyType({
    HTTPStatus.NOT_FOUND: MAX_AGE_SHORT,
    HTTPStatus.SERVICE_UNAVAILABLE: MAX_AGE_SHORT,
    HTTPStatus.INTERNAL_SERVER_ERROR: MAX_AGE_SHORT,
    HTTPStatus.BAD_REQUEST: MAX_AGE_LONG,
    HTTPStatus.METHOD_NOT_ALLOWED: MAX_AGE_LONG,
})

# Bodies this size or smaller are never compressed.
MIN_COMPRESS_SIZE = 20

DEFAULT_GZIP_LEVEL = 6


def surrogate_directive(code: int) -> str:
    """The Surrogate-Control directive for a non-200 status."""
    return SURROGATE_DIRECTIVES.get(code, MAX_AGE_SHORT)


class WriteState(Enum):
    """Progress of a single write."""

    INIT = "init"
    STATUS_RESOLVED = "status_resolved"
    BODY_RESOLVED = "body_resolved"
    FLUSHED = "flushed"


class ResponseWriter:
    """
    Writes Results to Responses.

    A writer holds only read-only settings, so one instance serves any
    number of concurrent requests. The module-level write() uses a shared
    default instance.

    Usage:
        writer = ResponseWriter(gzip_level=9)
        writer.write(response, request, result, buffer)
    """

    def __init__(self, gzip_level: int = DEFAULT_GZIP_LEVEL):
        """
        Args:
            gzip_level: Compression level 1-9 (1 fastest, 9 smallest)
        """
        if not 1 <= gzip_level <= 9:
            raise ValueError(f"gzip_level must be 1-9, got {gzip_level}")
        self.gzip_level = gzip_level

    def write(
        self,
        response: Response,
        request: HTTPRequest,
        result: Result,
        buffer: Optional[io.BytesIO],
    ) -> WriteState:
        """
        Write result and buffer to response.

        If buffer is None only headers and the status are written. For
        non-200 results an existing buffer is emptied and refilled with the
        error body. The buffer is read, never drained, so the same buffer
        can be written again.

        Returns:
            WriteState.FLUSHED
        """
        state = WriteState.INIT

        code = self._resolve_status(response, result)
        state = WriteState.STATUS_RESOLVED

        if code != HTTPStatus.OK:
            self._resolve_error_body(response, result, code, buffer)
        del response.headers[ERROR_STYLE_HEADER]
        state = WriteState.BODY_RESOLVED

        self._flush(response, request, code, buffer)
        state = WriteState.FLUSHED
        return state

    # =========================================================================
    # INIT → STATUS_RESOLVED
    # =========================================================================

    def _resolve_status(self, response: Response, result: Result) -> int:
        code = result.code
        if code == 0:
            logger.warning("received Result with code 0, serving 200")
            code = HTTPStatus.OK

        if response.headers.get(SURROGATE_CONTROL) is None:
            response.headers[SURROGATE_CONTROL] = MAX_AGE_SHORT

        return code

    # =========================================================================
    # STATUS_RESOLVED → BODY_RESOLVED
    # =========================================================================

    def _resolve_error_body(
        self,
        response: Response,
        result: Result,
        code: int,
        buffer: Optional[io.BytesIO],
    ) -> None:
        style = response.error_style
        if style == ErrorStyle.UNSET:
            style = ErrorStyle.parse(response.headers.get(ERROR_STYLE_HEADER))

        if style == ErrorStyle.PAGE:
            response.headers[CONTENT_TYPE] = TEXT_HTML_UTF8
            body = error_page(code)
        else:
            response.headers[CONTENT_TYPE] = TEXT_PLAIN_UTF8
            body = result.msg.encode("utf-8")

        if buffer is not None:
            buffer.seek(0)
            buffer.truncate()
            buffer.write(body)

        response.headers[SURROGATE_CONTROL] = surrogate_directive(code)

    # =========================================================================
    # BODY_RESOLVED → FLUSHED
    # =========================================================================

    def _flush(
        self,
        response: Response,
        request: HTTPRequest,
        code: int,
        buffer: Optional[io.BytesIO],
    ) -> None:
        data = buffer.getvalue() if buffer is not None else None

        content_type = response.headers.get(CONTENT_TYPE)
        if not content_type:
            content_type = sniff_content_type(data or b"")
            response.headers[CONTENT_TYPE] = content_type

        vary = response.headers.get(VARY) or ""
        if "accept-encoding" not in vary.lower():
            response.headers[VARY] = f"{vary}, Accept-Encoding".lstrip(", ")

        if (
            request.accepts_gzip()
            and data is not None
            and len(data) > MIN_COMPRESS_SIZE
            and is_compressible(content_type)
        ):
            response.headers[CONTENT_ENCODING] = "gzip"
            response.write_head(code)
            response.write(gzip.compress(data, compresslevel=self.gzip_level, mtime=0))
            return

        response.write_head(code)
        if data:
            response.write(data)


default_writer = ResponseWriter()


def write(
    response: Response,
    request: HTTPRequest,
    result: Result,
    buffer: Optional[io.BytesIO],
) -> WriteState:
    """Write result and buffer to response with the default writer."""
    return default_writer.write(response, request, result, buffer)
