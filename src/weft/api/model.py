"""
=============================================================================
ENDPOINT SPECIFICATION MODEL
=============================================================================

Plain value objects that describe an API. They are written once, at
specification-authoring time, and fed to compile_api().

=============================================================================
ANATOMY OF AN API
=============================================================================

    API(endpoints=[
        Endpoint(
            uri="/quake",                              ← exact path
            get=[                                      ← Accept negotiation
                Request(quake_json, accept="application/vnd.geo+json",
                        default=True,                  ← fallback variant
                        parameters=[Parameter("publicID", required=True)]),
                Request(quake_csv, accept="text/csv",
                        parameters=[Parameter("publicID", required=True)]),
            ],
            put=Request(quake_update),                 ← optional
            delete=None,                               ← optional
        ),
    ])

Each Request's parameters are the whole legal query string for that
variant: anything else is a 400.

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from ..http.request import HTTPRequest
from ..http.response import Response
from ..result import Result

# Application handler signature. The buffer is an io.BytesIO the handler
# writes the body into; it must not be kept after the call.
RequestHandler = Callable[[HTTPRequest, Response, io.BytesIO], Result]


@dataclass(frozen=True)
class Parameter:
    """A query parameter name and whether it is required."""

    name: str
    required: bool = False


@dataclass(frozen=True)
class Request:
    """
    One method / content-type variant of an endpoint.

    Attributes:
        handler:    Application handler to call
        accept:     Accept value this variant serves (GET only)
        default:    Serve this variant when no Accept value matches (GET only)
        parameters: The query-parameter contract
    """

    handler: RequestHandler
    accept: str = ""
    default: bool = False
    parameters: Tuple[Parameter, ...] = ()

    def __post_init__(self):
        # Accept any iterable of parameters, store an immutable tuple.
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @property
    def required(self) -> Tuple[str, ...]:
        """Names of required parameters, in declaration order."""
        return tuple(p.name for p in self.parameters if p.required)

    @property
    def optional(self) -> Tuple[str, ...]:
        """Names of optional parameters, in declaration order."""
        return tuple(p.name for p in self.parameters if not p.required)


@dataclass(frozen=True)
class Endpoint:
    """
    A registered URI and its request variants.

    Attributes:
        uri:    The literal request path; no patterns
        get:    GET variants in negotiation order, one per Accept value
        put:    Optional PUT variant
        delete: Optional DELETE variant
    """

    uri: str
    get: Tuple[Request, ...] = ()
    put: Optional[Request] = None
    delete: Optional[Request] = None

    def __post_init__(self):
        object.__setattr__(self, "get", tuple(self.get))

    @property
    def has_requests(self) -> bool:
        return bool(self.get) or self.put is not None or self.delete is not None

    @property
    def methods(self) -> Tuple[str, ...]:
        """The HTTP methods this endpoint declares."""
        methods = []
        if self.get:
            methods.append("GET")
        if self.put is not None:
            methods.append("PUT")
        if self.delete is not None:
            methods.append("DELETE")
        return tuple(methods)


@dataclass(frozen=True)
class API:
    """A named set of endpoints."""

    endpoints: Tuple[Endpoint, ...] = field(default_factory=tuple)
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "endpoints", tuple(self.endpoints))
