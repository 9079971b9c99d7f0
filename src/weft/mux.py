"""
=============================================================================
SERVE MUX
=============================================================================

An exact-URI request table plus the wrapper that turns a dispatch routine
into something a transport can call.

    ┌───────────┐   lookup(path)   ┌───────────────────────────────────────┐
    │ ServeMux  │ ───────────────► │ make_handler(routine)                 │
    │           │                  │   Response + Vary / Surrogate preset  │
    │ "/quake"  │                  │   fresh io.BytesIO buffer             │
    │ "/quake/" │                  │   result = routine(req, resp, buf)    │
    │  ...      │                  │   writer.write(resp, req, result, buf)│
    └───────────┘                  └───────────────────────────────────────┘
          │
          │ no entry
          ▼
    404 "not found" through the same writer

URIs match exactly: "/quake" does not serve "/quake/" or "/quake/1".
Registration happens before serving; lookups never mutate the table.

=============================================================================
"""

import io
import logging
from typing import Callable, Dict, List, Optional

from .http.request import HTTPRequest
from .http.response import SURROGATE_CONTROL, VARY, Response
from .result import NOT_FOUND, Result, internal_server_error
from .writer import MAX_AGE_SHORT, ResponseWriter, default_writer

logger = logging.getLogger(__name__)

DispatchRoutine = Callable[[HTTPRequest, Response, io.BytesIO], Result]
Handler = Callable[[HTTPRequest], Response]


def new_response() -> Response:
    """A Response carrying the headers every dispatched request starts with."""
    response = Response()
    response.headers[VARY] = "Accept"
    response.headers[SURROGATE_CONTROL] = MAX_AGE_SHORT
    return response


def make_handler(
    routine: DispatchRoutine,
    writer: Optional[ResponseWriter] = None,
) -> Handler:
    """
    Wrap a dispatch routine into a request → Response callable.

    An exception escaping the routine is logged with its traceback and
    written as a 500 carrying str(exc). A routine returning anything other
    than a Result is logged and written as a 500 too. Anything the routine
    already put in the buffer is replaced by the error body.

    Args:
        routine: (request, response, buffer) → Result
        writer:  ResponseWriter to use (the shared default if None)

    Example:
        handler = make_handler(compiled["/quake"])
        response = handler(HTTPRequest.from_target("GET", "/quake?publicID=1"))
    """
    out = writer or default_writer

    def handler(request: HTTPRequest) -> Response:
        response = new_response()
        buffer = io.BytesIO()
        try:
            result = routine(request, response, buffer)
        except Exception as exc:
            logger.exception(f"Handler error: {request.method} {request.path}: {exc}")
            result = internal_server_error(exc)
        if not isinstance(result, Result):
            logger.error(
                f"Handler returned {type(result).__name__}, not Result: "
                f"{request.method} {request.path}"
            )
            result = internal_server_error(
                TypeError(f"handler returned {type(result).__name__}, expected Result")
            )
        out.write(response, request, result, buffer)
        return response

    handler.__name__ = getattr(routine, "__name__", "handler")
    handler.__qualname__ = handler.__name__
    handler.__wrapped__ = routine
    return handler


class ServeMux:
    """
    Exact-URI request multiplexer.

    Usage:
        mux = ServeMux()
        compile_api(api).register(mux)
        response = mux.serve(request)
    """

    def __init__(self, writer: Optional[ResponseWriter] = None):
        """
        Args:
            writer: ResponseWriter for the 404 path and for routines
                    registered through handle_routine or CompiledAPI.register
        """
        self.writer = writer or default_writer
        self._handlers: Dict[str, Handler] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def handle(self, uri: str, handler: Handler) -> None:
        """
        Register handler for exactly uri.

        Raises:
            ValueError: If uri is empty or already registered
        """
        if not uri:
            raise ValueError("cannot register an empty URI")
        if uri in self._handlers:
            raise ValueError(f"URI already registered: {uri}")
        self._handlers[uri] = handler

    def handle_routine(self, uri: str, routine: DispatchRoutine) -> None:
        """Register a bare dispatch routine, wrapping it with this mux's writer."""
        self.handle(uri, make_handler(routine, self.writer))

    # =========================================================================
    # LOOKUP / SERVING
    # =========================================================================

    def lookup(self, path: str) -> Optional[Handler]:
        return self._handlers.get(path)

    def routes(self) -> List[str]:
        """Registered URIs in registration order."""
        return list(self._handlers)

    def __contains__(self, uri: object) -> bool:
        return uri in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def serve(self, request: HTTPRequest) -> Response:
        """
        Serve one request.

        Unregistered paths get a 404 "not found" written through the writer,
        with the same preset headers a registered handler starts from.
        """
        handler = self._handlers.get(request.path)
        if handler is not None:
            return handler(request)

        response = new_response()
        self.writer.write(response, request, NOT_FOUND, io.BytesIO())
        return response
