"""
=============================================================================
MIME TYPES: SNIFFING AND COMPRESSIBILITY
=============================================================================

Two questions the response writer has to answer about a body:

1. WHAT IS IT?  When a handler never set Content-Type, the writer sniffs
   the type from the first bytes of the buffer.

2. IS IT WORTH GZIPPING?  Only types on a fixed allow-list are compressed.

=============================================================================
CONTENT SNIFFING
=============================================================================

Sniffing follows the WHATWG MIME sniffing algorithm (the same one browsers
use), restricted to the signatures that matter for an API server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Leading bytes                   │ Detected type                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │  (empty)                         │ text/plain; charset=utf-8        │
    │  <!DOCTYPE HTML, <html, <p, ...  │ text/html; charset=utf-8         │
    │  <?xml                           │ text/xml; charset=utf-8          │
    │  %PDF-                           │ application/pdf                  │
    │  \\x89PNG\\r\\n\\x1a\\n                │ image/png                        │
    │  GIF87a / GIF89a                 │ image/gif                        │
    │  \\xff\\xd8\\xff                     │ image/jpeg                       │
    │  PK\\x03\\x04                       │ application/zip                  │
    │  \\x1f\\x8b\\x08                     │ application/x-gzip               │
    │  no binary control bytes         │ text/plain; charset=utf-8        │
    │  anything else                   │ application/octet-stream         │
    └─────────────────────────────────────────────────────────────────────┘

Only the first 512 bytes are ever inspected.

Note that JSON, CSV and friends are NOT detectable: they sniff as
text/plain. Handlers serving those types get the right Content-Type from
the dispatch routine (the matched GET variant's Accept value) or set it
themselves.

=============================================================================
WHY AN ALLOW-LIST FOR COMPRESSION?
=============================================================================

Images, video and archives are already compressed. Gzipping them burns CPU
and can make them larger. Text, markup, fonts and a few text-based domain
formats (GeoJSON, CAP alerts, CSV) compress very well.

=============================================================================
"""

from typing import FrozenSet


# Content types the writer sets itself.
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"
TEXT_HTML_UTF8 = "text/html; charset=utf-8"
TEXT_XML_UTF8 = "text/xml; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

# =============================================================================
# COMPRESSIBLE TYPES
# =============================================================================
#
# Base types only (no parameters). Compare against base_type(content_type).
# From https://www.fastly.com/blog/new-gzip-settings-and-deciding-what-compress
# plus the domain formats weft services return.
#
# =============================================================================
COMPRESSIBLE_TYPES: FrozenSet[str] = frozenset({
    # Text and markup
    "text/html",
    "text/css",
    "text/plain",
    "text/xml",
    "text/javascript",
    "text/csv",
    "application/javascript",
    "application/x-javascript",
    "application/json",
    "application/xml",

    # Fonts and icons
    "application/vnd.ms-fontobject",
    "application/x-font-opentype",
    "application/x-font-truetype",
    "application/x-font-ttf",
    "font/eot",
    "font/opentype",
    "font/otf",
    "image/svg+xml",
    "image/vnd.microsoft.icon",

    # Domain formats
    "application/vnd.geo+json",
    "application/cap+xml",
})

# How many leading bytes sniffing looks at.
SNIFF_LENGTH = 512

# =============================================================================
# SIGNATURE TABLES
# =============================================================================

# HTML tags, matched case-insensitively after leading whitespace and
# followed by a space or '>'.
_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
)

# Exact prefixes, checked in order.
_PREFIX_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN_UTF8),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
)

_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never appear in text (WHATWG "binary data bytes").
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def base_type(content_type: str) -> str:
    """
    Strip parameters from a Content-Type value.

    "text/csv; charset=utf-8" → "text/csv"
    """
    return content_type.split(";", 1)[0].strip().lower()


def is_compressible(content_type: str) -> bool:
    """True if the base type of content_type is on the gzip allow-list."""
    return base_type(content_type) in COMPRESSIBLE_TYPES


def sniff_content_type(data: bytes) -> str:
    """
    Determine a Content-Type from the leading bytes of a body.

    Always returns a valid MIME type; application/octet-stream when
    nothing more specific matches.

    Args:
        data: The body (only the first 512 bytes are inspected)

    Returns:
        A Content-Type header value

    Examples:
        >>> sniff_content_type(b"")
        'text/plain; charset=utf-8'
        >>> sniff_content_type(b"  <html><body>hi</body></html>")
        'text/html; charset=utf-8'
        >>> sniff_content_type(b'{"id": 1}')
        'text/plain; charset=utf-8'
    """
    data = bytes(data[:SNIFF_LENGTH])

    if not data:
        return TEXT_PLAIN_UTF8

    # ─────────────────────────────────────────────────────────────────────
    # MARKUP (leading whitespace allowed)
    # ─────────────────────────────────────────────────────────────────────
    stripped = data.lstrip(_WHITESPACE)
    upper = stripped.upper()

    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(upper) > len(tag):
            if upper[len(tag)] in b" >":
                return TEXT_HTML_UTF8

    if stripped.startswith(b"<?xml"):
        return TEXT_XML_UTF8

    # ─────────────────────────────────────────────────────────────────────
    # BINARY SIGNATURES (exact position 0)
    # ─────────────────────────────────────────────────────────────────────
    for prefix, mime in _PREFIX_SIGNATURES:
        if data.startswith(prefix):
            return mime

    if data[:4] == b"RIFF" and data[8:14] == b"WEBPVP":
        return "image/webp"

    # ─────────────────────────────────────────────────────────────────────
    # TEXT vs BINARY
    # ─────────────────────────────────────────────────────────────────────
    if any(b in _BINARY_BYTES for b in data):
        return OCTET_STREAM

    return TEXT_PLAIN_UTF8
