"""
Canned HTML error pages, written by the response writer for non-200
results when the handler asked for page-style errors.

The table is built once at import time and exposed read-only. Services that
want their own branded pages load them outside weft and write them into the
buffer with message-style errors instead.
"""

from types import MappingProxyType
from typing import Mapping

from .http.status_codes import HTTPStatus, reason_phrase


_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{code} {phrase}</title>
</head>
<body>
<h1>{code} {phrase}</h1>
<p>{detail}</p>
</body>
</html>
"""


def _page(code: int, detail: str) -> bytes:
    return _TEMPLATE.format(code=code, phrase=reason_phrase(code), detail=detail).encode("utf-8")


ERROR_PAGES: Mapping[int, bytes] = MappingProxyType({
    HTTPStatus.BAD_REQUEST: _page(400, "The request was not understood. Check the query parameters."),
    HTTPStatus.NOT_FOUND: _page(404, "Sorry, the page you were looking for could not be found."),
    HTTPStatus.METHOD_NOT_ALLOWED: _page(405, "The request method is not supported for this resource."),
    HTTPStatus.INTERNAL_SERVER_ERROR: _page(500, "Something went wrong. Please try again later."),
    HTTPStatus.SERVICE_UNAVAILABLE: _page(503, "The service is temporarily unavailable. Please try again later."),
})


def error_page(code: int) -> bytes:
    """The canned page for code, or the internal-error page if none is registered."""
    return ERROR_PAGES.get(code, ERROR_PAGES[HTTPStatus.INTERNAL_SERVER_ERROR])
