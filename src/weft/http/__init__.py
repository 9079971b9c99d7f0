"""
=============================================================================
HTTP PRIMITIVES
=============================================================================

The small HTTP vocabulary the rest of weft is written in:

    request.py       HTTPRequest: method, raw path, headers, parsed query
    response.py      Response: outgoing headers, error marker, body sink
    status_codes.py  HTTPStatus enum and reason phrases
    mime_types.py    content sniffing and the gzip allow-list

Nothing here parses HTTP off a socket; a transport does that and builds an
HTTPRequest (see HTTPRequest.from_target / from_environ).

=============================================================================
"""

from .request import HTTPRequest
from .response import Response, ErrorStyle, ResponseAlreadyWritten
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import sniff_content_type, is_compressible, base_type

__all__ = [
    # Request
    "HTTPRequest",

    # Response
    "Response",
    "ErrorStyle",
    "ResponseAlreadyWritten",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "sniff_content_type",
    "is_compressible",
    "base_type",
]
