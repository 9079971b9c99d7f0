"""
=============================================================================
QUERY VALIDATION
=============================================================================

Every Request variant in an API declares exactly which query parameters it
accepts. check_query() enforces that contract before a handler runs:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. ';' in the path?             → 400 "cache buster"               │
    │  2. nothing declared?            → OK only if the query is empty    │
    │  3. required param missing?      → 400 "missing required ..."       │
    │  4. undeclared param present?    → 400 "found additional ..."       │
    │  5. otherwise                    → STATUS_OK                        │
    └─────────────────────────────────────────────────────────────────────┘

A strict query surface keeps the number of distinct cacheable URLs small.
Any variation a client invents (?foo=1, ?_=123456) is rejected instead of
becoming yet another cache entry.

A parameter given with an empty value (?publicID=) counts as missing.

=============================================================================
"""

from typing import Iterable, List

from .http.request import HTTPRequest
from .result import Result, STATUS_OK, bad_request


def check_query(
    request: HTTPRequest,
    required: Iterable[str] = (),
    optional: Iterable[str] = (),
) -> Result:
    """
    Check the request's query parameters against a required/optional contract.

    Args:
        request: The incoming request
        required: Parameters that must be present with a non-empty value
        optional: Parameters that may be present

    Returns:
        STATUS_OK, or a 400 Result naming the problem
    """
    if ";" in request.path:
        return bad_request("cache buster")

    required = list(required)
    optional = list(optional)
    params = request.query_params

    if not required and not optional:
        if params:
            return bad_request("found unexpected query parameters")
        return STATUS_OK

    missing: List[str] = []
    for name in required:
        values = params.get(name)
        if not values or values[0] == "":
            missing.append(name)

    if len(missing) == 1:
        return bad_request("missing required query parameter: " + missing[0])
    if missing:
        return bad_request("missing required query parameters: " + ", ".join(missing))

    allowed = set(required) | set(optional)
    if any(name not in allowed for name in params):
        return bad_request("found additional query parameters")

    return STATUS_OK
