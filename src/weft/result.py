"""
=============================================================================
RESULT
=============================================================================

The outcome of an application handler: a success flag, the HTTP status
code to write back, and a human-readable message.

Handlers never raise for request-level problems. They return a Result, and
the response writer turns it into a status line, cache headers and (for
errors) a body:

    def quake(request, response, buffer):
        row = db.find(request.get_query("publicID"))
        if row is None:
            return NOT_FOUND
        buffer.write(row.to_json())
        return STATUS_OK

The shared constants below are immutable and safe to return from any
number of concurrent requests.

=============================================================================
"""

from dataclasses import dataclass

from .http.status_codes import HTTPStatus


@dataclass(frozen=True)
class Result:
    """
    Outcome of handling one request.

    Attributes:
        ok:   True when the handler succeeded
        code: HTTP status code. 0 is treated as 200 by the writer
              (with a logged warning)
        msg:  Error message, written as the body of text error responses
    """

    ok: bool = False
    code: int = 0
    msg: str = ""


# =============================================================================
# SHARED OUTCOMES
# =============================================================================

STATUS_OK = Result(ok=True, code=HTTPStatus.OK, msg="")
METHOD_NOT_ALLOWED = Result(ok=False, code=HTTPStatus.METHOD_NOT_ALLOWED, msg="method not allowed")
NOT_FOUND = Result(ok=False, code=HTTPStatus.NOT_FOUND, msg="not found")
NOT_ACCEPTABLE = Result(ok=False, code=HTTPStatus.NOT_ACCEPTABLE, msg="specify accept")


# =============================================================================
# FACTORIES
# =============================================================================

def bad_request(message: str) -> Result:
    """A 400 result carrying message."""
    return Result(ok=False, code=HTTPStatus.BAD_REQUEST, msg=message)


def internal_server_error(err: BaseException) -> Result:
    """A 500 result wrapping an underlying failure; the message is str(err)."""
    return Result(ok=False, code=HTTPStatus.INTERNAL_SERVER_ERROR, msg=str(err))


def service_unavailable(err: BaseException) -> Result:
    """A 503 result wrapping an upstream or dependency outage."""
    return Result(ok=False, code=HTTPStatus.SERVICE_UNAVAILABLE, msg=str(err))
