"""
=============================================================================
ENDPOINT SPECIFICATION COMPILER
=============================================================================

compile_api() validates an API description and turns every Endpoint into a
dispatch routine: a closure with a method switch and, for GET, an Accept
switch that runs query validation before calling the matched handler.

=============================================================================
WHAT A DISPATCH ROUTINE DOES
=============================================================================

    request ──► method?
                 │
                 ├── GET ──► Accept header?
                 │            ├── declared variant ──► check_query ──► set
                 │            │                        Content-Type ──► handler
                 │            ├── no match, default ─► default handler
                 │            └── no match ──────────► 406 NOT_ACCEPTABLE
                 │
                 ├── PUT ────► check_query ──► handler
                 ├── DELETE ─► check_query ──► handler
                 └── other ──► 405 METHOD_NOT_ALLOWED

The default (fallback) path calls its handler as is: no query check and no
Content-Type. Handlers used as a default set their own Content-Type.
compile_api(api, negotiate_fallback=True) treats the fallback exactly like
an explicit Accept match instead.

=============================================================================
VALIDATION
=============================================================================

Compilation is all or nothing. The first problem found raises
SpecificationError and no routine is produced:

    pass 1, every endpoint in order:
        empty URI
        no GET, PUT or DELETE request
        URI declared twice

    pass 2, while building each routine:
        more than one GET variant marked default
        two GET variants with the same Accept value
        two URIs that derive the same routine name

=============================================================================
ROUTINE NAMES
=============================================================================

    /quake        → quakeHandler
    /quake/       → quakesHandler       (collection: pluralized)
    /quake/stats  → quakestatsHandler

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..http.request import HTTPRequest
from ..http.response import CONTENT_TYPE, Response
from ..mux import make_handler
from ..query import check_query
from ..result import METHOD_NOT_ALLOWED, NOT_ACCEPTABLE, Result
from .model import API, Endpoint, Request

logger = logging.getLogger(__name__)

DispatchRoutine = Callable[[HTTPRequest, Response, io.BytesIO], Result]


class SpecificationError(ValueError):
    """An API description that cannot be compiled."""


def handler_name(uri: str) -> str:
    """
    Derive the dispatch routine name for a URI.

    A trailing '/' marks a collection and is pluralized with 's' before
    every '/' is removed and "Handler" appended.

    Examples:
        >>> handler_name("/quake")
        'quakeHandler'
        >>> handler_name("/quake/")
        'quakesHandler'
    """
    if uri.endswith("/"):
        uri = uri + "s"
    return uri.replace("/", "") + "Handler"


@dataclass(frozen=True)
class Route:
    """One registration entry: an exact URI and its dispatch routine."""

    uri: str
    name: str
    routine: DispatchRoutine
    endpoint: Endpoint


@dataclass(frozen=True)
class CompiledAPI:
    """
    The result of compiling an API: one Route per Endpoint, in declaration
    order.

    Usage:
        compiled = compile_api(api)
        compiled.register(mux)          # exact-URI registration
        routine = compiled["/quake"]    # or call routines directly
    """

    routes: Tuple[Route, ...]
    _by_uri: Mapping[str, DispatchRoutine] = field(repr=False, compare=False, default=None)

    def __post_init__(self):
        table = MappingProxyType({r.uri: r.routine for r in self.routes})
        object.__setattr__(self, "_by_uri", table)

    def __getitem__(self, uri: str) -> DispatchRoutine:
        return self._by_uri[uri]

    def __contains__(self, uri: object) -> bool:
        return uri in self._by_uri

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self):
        return iter(self.routes)

    def register(self, mux) -> None:
        """
        Register every route against mux (a weft.mux.ServeMux or anything
        with the same handle(uri, handler) method).
        """
        for route in self.routes:
            mux.handle(route.uri, make_handler(route.routine, getattr(mux, "writer", None)))
            logger.debug(f"Registered {route.uri} -> {route.name}")

    def describe(self) -> str:
        """
        A human-readable route listing.

            /quake   quakeHandler   GET[application/vnd.geo+json*, text/csv] PUT
        """
        lines = []
        width = max((len(r.uri) for r in self.routes), default=0)
        name_width = max((len(r.name) for r in self.routes), default=0)
        for route in self.routes:
            endpoint = route.endpoint
            methods = list(endpoint.methods)
            if endpoint.get:
                accepts = ", ".join(
                    (v.accept or '""') + ("*" if v.default else "") for v in endpoint.get
                )
                methods[0] = f"GET[{accepts}]"
            lines.append(f"{route.uri:<{width}}  {route.name:<{name_width}}  {' '.join(methods)}")
        return "\n".join(lines)


# =============================================================================
# COMPILATION
# =============================================================================

def compile_api(api: API, negotiate_fallback: bool = False) -> CompiledAPI:
    """
    Validate api and build a dispatch routine for every endpoint.

    Args:
        api: The API description
        negotiate_fallback: If True, the default GET variant is validated
                            and sets Content-Type like an explicit match.
                            If False (compatible behaviour) it is called
                            directly.

    Returns:
        CompiledAPI with one Route per Endpoint

    Raises:
        SpecificationError: On the first invalid part of the description
    """
    _validate_endpoints(api.endpoints)

    routes: List[Route] = []
    names: Dict[str, str] = {}

    for endpoint in api.endpoints:
        name = handler_name(endpoint.uri)
        if name in names:
            raise SpecificationError(
                f"{endpoint.uri} and {names[name]} both map to dispatch routine {name}"
            )
        names[name] = endpoint.uri

        routine = _build_routine(endpoint, negotiate_fallback)
        routine.__name__ = name
        routine.__qualname__ = name
        routes.append(Route(uri=endpoint.uri, name=name, routine=routine, endpoint=endpoint))

    logger.debug(f"Compiled {len(routes)} endpoint(s) for API {api.name or '(unnamed)'}")
    return CompiledAPI(routes=tuple(routes))


def _validate_endpoints(endpoints: Tuple[Endpoint, ...]) -> None:
    seen = set()
    for endpoint in endpoints:
        if not endpoint.uri:
            raise SpecificationError("found empty URI")
        if not endpoint.has_requests:
            raise SpecificationError(f"found no requests (GET, PUT, DELETE) for {endpoint.uri}")
        if endpoint.uri in seen:
            raise SpecificationError(f"found duplicate URI {endpoint.uri}")
        seen.add(endpoint.uri)


def _build_routine(endpoint: Endpoint, negotiate_fallback: bool) -> DispatchRoutine:
    """Build the method-switch closure for one endpoint."""
    by_accept: Dict[str, Request] = {}
    fallback: Optional[Request] = None

    for variant in endpoint.get:
        if variant.default:
            if fallback is not None:
                raise SpecificationError(f"found multiple defaults for {endpoint.uri} GET")
            fallback = variant
        if variant.accept in by_accept:
            raise SpecificationError(
                f"found duplicate Accept {variant.accept!r} for {endpoint.uri} GET"
            )
        by_accept[variant.accept] = variant

    has_get = bool(endpoint.get)
    put = endpoint.put
    delete = endpoint.delete

    def negotiated(variant: Request, request, response, buffer) -> Result:
        res = check_query(request, variant.required, variant.optional)
        if not res.ok:
            return res
        response.headers[CONTENT_TYPE] = variant.accept
        return variant.handler(request, response, buffer)

    def checked(variant: Request, request, response, buffer) -> Result:
        res = check_query(request, variant.required, variant.optional)
        if not res.ok:
            return res
        return variant.handler(request, response, buffer)

    def dispatch(request: HTTPRequest, response: Response, buffer: io.BytesIO) -> Result:
        method = request.method

        if method == "GET" and has_get:
            variant = by_accept.get(request.accept)
            if variant is not None:
                return negotiated(variant, request, response, buffer)
            if fallback is None:
                return NOT_ACCEPTABLE
            if negotiate_fallback:
                return negotiated(fallback, request, response, buffer)
            return fallback.handler(request, response, buffer)

        if method == "PUT" and put is not None:
            return checked(put, request, response, buffer)

        if method == "DELETE" and delete is not None:
            return checked(delete, request, response, buffer)

        return METHOD_NOT_ALLOWED

    return dispatch
