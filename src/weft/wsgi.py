"""
=============================================================================
WSGI ADAPTER
=============================================================================

WeftApp exposes a ServeMux as a PEP 3333 application, so a compiled API
runs under any WSGI server (gunicorn, uWSGI, mod_wsgi, wsgiref):

    environ ──► HTTPRequest.from_environ ──► mux.serve ──► Response
                                                              │
    [body] ◄── start_response(wsgi_status, header_items) ◄────┘

One access-log record is emitted on "weft.access" per request.

For development, serve() runs the app on wsgiref's single-threaded server:

    from weft.wsgi import WeftApp, serve
    serve(WeftApp(mux), port=8080)

=============================================================================
"""

import logging
import time
from typing import Iterable
from wsgiref.simple_server import WSGIRequestHandler, make_server

from .http.request import HTTPRequest
from .log import ACCESS_LOG_FORMATS, RequestLog, new_request_id
from .mux import ServeMux

logger = logging.getLogger(__name__)


class WeftApp:
    """
    WSGI application over a ServeMux.

    Usage:
        mux = ServeMux()
        compile_api(api).register(mux)
        application = WeftApp(mux)          # point the WSGI server here
    """

    def __init__(self, mux: ServeMux, access_log_format: str = "text"):
        """
        Args:
            mux: The request table to serve
            access_log_format: "text" (Apache-style) or "json"
        """
        if access_log_format not in ACCESS_LOG_FORMATS:
            raise ValueError(f"access_log_format must be one of {', '.join(ACCESS_LOG_FORMATS)}")
        self.mux = mux
        self.access_log_format = access_log_format

    def __call__(self, environ, start_response) -> Iterable[bytes]:
        start_time = time.time()
        request = HTTPRequest.from_environ(environ)

        response = self.mux.serve(request)

        start_response(response.wsgi_status, response.header_items())
        body = bytes(response.body)

        RequestLog(
            request_id=new_request_id(),
            method=request.method,
            path=request.path,
            query=request.query_string,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=response.status,
            content_length=len(body),
            duration_ms=(time.time() - start_time) * 1000,
            timestamp=RequestLog.now(),
        ).emit(self.access_log_format)

        return [body]


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

class _QuietHandler(WSGIRequestHandler):
    """wsgiref request handler that leaves access logging to WeftApp."""

    def log_message(self, format, *args):
        logger.debug(format % args)


def serve(app: WeftApp, host: str = "127.0.0.1", port: int = 8080) -> None:
    """
    Serve app until interrupted. Single-threaded; for development only.
    """
    with make_server(host, port, app, handler_class=_QuietHandler) as httpd:
        logger.info(f"Serving {len(app.mux)} route(s) on http://{host}:{port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
