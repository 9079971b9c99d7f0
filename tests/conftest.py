"""
pytest configuration and fixtures.
"""

import io
from typing import Callable, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from weft import (
    API,
    Endpoint,
    Parameter,
    Request,
    STATUS_OK,
    ServeMux,
    compile_api,
)
from weft.http import HTTPRequest, Response


# Bodies comfortably above the 20-byte compression threshold.
QUAKE_JSON = b'{"type": "Feature", "properties": {"publicID": "2016p858000", "magnitude": 7.8}}'
QUAKE_CSV = b"publicID,magnitude\n2016p858000,7.8\n"


def quake_json(request, response, buffer):
    buffer.write(QUAKE_JSON)
    return STATUS_OK


def quake_csv(request, response, buffer):
    buffer.write(QUAKE_CSV)
    return STATUS_OK


def quake_update(request, response, buffer):
    return STATUS_OK


@pytest.fixture
def make_request() -> Callable[..., HTTPRequest]:
    """Build an HTTPRequest from a method, a target and optional headers."""

    def _make(method: str = "GET", target: str = "/", headers: Optional[dict] = None) -> HTTPRequest:
        return HTTPRequest.from_target(method, target, headers or {})

    return _make


@pytest.fixture
def response() -> Response:
    """A fresh, unwritten Response."""
    return Response()


@pytest.fixture
def buffer() -> io.BytesIO:
    """A fresh output buffer."""
    return io.BytesIO()


@pytest.fixture
def quake_api() -> API:
    """
    The canonical example service:

        /quake   GET  application/vnd.geo+json (default), text/csv
                      publicID required
                 PUT  publicID required
    """
    params = [Parameter("publicID", required=True)]
    return API(
        name="quake",
        endpoints=[
            Endpoint(
                uri="/quake",
                get=[
                    Request(quake_json, accept="application/vnd.geo+json", default=True, parameters=params),
                    Request(quake_csv, accept="text/csv", parameters=params),
                ],
                put=Request(quake_update, parameters=params),
            ),
        ],
    )


@pytest.fixture
def quake_mux(quake_api: API) -> ServeMux:
    """A ServeMux with the example service registered."""
    mux = ServeMux()
    compile_api(quake_api).register(mux)
    return mux
