"""
=============================================================================
WEFT - Endpoint Specification Compiler and Response Writer
=============================================================================

weft turns a declarative description of an HTTP API into request dispatch
routines, and writes handler results back as cache-friendly responses.

=============================================================================
OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  API / Endpoint / Request / Parameter      (weft.api.model)          │
    │        │                                                            │
    │        ▼ compile_api()                     (weft.api.compiler)       │
    │  one dispatch routine per URI:                                      │
    │        method switch → Accept switch → check_query → handler        │
    │        │                                   (weft.query)              │
    │        ▼                                                            │
    │  Result + buffer                           (weft.result)             │
    │        │                                                            │
    │        ▼ write()                           (weft.writer)             │
    │  status, Surrogate-Control, Content-Type, Vary, gzip, error body    │
    └─────────────────────────────────────────────────────────────────────┘

Transport pieces around the core:

    weft.mux      ServeMux (exact-URI table) and make_handler()
    weft.wsgi     WeftApp, a WSGI application over a ServeMux
    weft.config   WeftConfig (from_env / validate)
    weft.log      logging setup and access-log records
    python -m weft module:attribute      CLI

=============================================================================
QUICK START
=============================================================================

    from weft import API, Endpoint, Request, Parameter, STATUS_OK
    from weft import ServeMux, WeftApp, compile_api

    def quake_json(request, response, buffer):
        buffer.write(b'{"type": "Feature"}')
        return STATUS_OK

    api = API([
        Endpoint("/quake", get=[
            Request(quake_json, accept="application/vnd.geo+json", default=True,
                    parameters=[Parameter("publicID", required=True)]),
        ]),
    ])

    mux = ServeMux()
    compile_api(api).register(mux)
    application = WeftApp(mux)

=============================================================================
"""

__version__ = "1.0.0"

from .result import (
    Result,
    STATUS_OK,
    METHOD_NOT_ALLOWED,
    NOT_FOUND,
    NOT_ACCEPTABLE,
    bad_request,
    internal_server_error,
    service_unavailable,
)
from .query import check_query
from .writer import ResponseWriter, WriteState, write
from .api import (
    API,
    Endpoint,
    Request,
    Parameter,
    CompiledAPI,
    SpecificationError,
    compile_api,
    handler_name,
)
from .mux import ServeMux, make_handler
from .wsgi import WeftApp
from .config import WeftConfig
from .http import HTTPRequest, Response, ErrorStyle

__all__ = [
    # Results
    "Result",
    "STATUS_OK",
    "METHOD_NOT_ALLOWED",
    "NOT_FOUND",
    "NOT_ACCEPTABLE",
    "bad_request",
    "internal_server_error",
    "service_unavailable",

    # Query validation
    "check_query",

    # Writer
    "ResponseWriter",
    "WriteState",
    "write",

    # Specification
    "API",
    "Endpoint",
    "Request",
    "Parameter",
    "CompiledAPI",
    "SpecificationError",
    "compile_api",
    "handler_name",

    # Serving
    "ServeMux",
    "make_handler",
    "WeftApp",
    "WeftConfig",

    # HTTP
    "HTTPRequest",
    "Response",
    "ErrorStyle",
]
