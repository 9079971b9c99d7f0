"""
Unit tests for the WSGI adapter and access logging.
"""

import gzip
import json
import logging

import pytest

from weft import API, Endpoint, Parameter, Request, STATUS_OK, ServeMux, compile_api
from weft.log import RequestLog
from weft.result import NOT_FOUND
from weft.wsgi import WeftApp


class StartResponse:
    """Records what the application passed to start_response."""

    def __init__(self):
        self.status = None
        self.headers = None

    def __call__(self, status, headers, exc_info=None):
        self.status = status
        self.headers = headers

    def header(self, name):
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


def environ_for(path, query="", **headers):
    environ = {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "REMOTE_ADDR": "10.0.0.7",
    }
    for name, value in headers.items():
        environ["HTTP_" + name.upper()] = value
    return environ


class TestWeftApp:
    """Tests for the WSGI round trip."""

    def test_ok(self, quake_mux):
        app = WeftApp(quake_mux)
        start = StartResponse()

        body = b"".join(app(environ_for("/quake", "publicID=1", accept="text/csv"), start))

        assert start.status == "200 OK"
        assert start.header("Content-Type") == "text/csv"
        assert start.header("Content-Length") == str(len(body))
        assert start.header("Vary") == "Accept, Accept-Encoding"
        assert body.startswith(b"publicID,magnitude")

    def test_not_found(self, quake_mux):
        start = StartResponse()

        body = b"".join(WeftApp(quake_mux)(environ_for("/missing"), start))

        assert start.status == "404 Not Found"
        assert start.header("Surrogate-Control") == "max-age=10"
        assert body == b"not found"

    def test_gzip(self, quake_mux):
        start = StartResponse()

        body = b"".join(WeftApp(quake_mux)(
            environ_for("/quake", "publicID=1", accept="text/csv", accept_encoding="gzip"),
            start,
        ))

        assert start.header("Content-Encoding") == "gzip"
        assert gzip.decompress(body).startswith(b"publicID")

    def test_error_marker_never_sent(self):
        """A handler-set Weft-Error header picks the page and is stripped."""

        def missing(request, response, buffer):
            response.headers["Weft-Error"] = "page"
            return NOT_FOUND

        mux = ServeMux()
        compile_api(API([Endpoint("/gone", get=[Request(missing, accept="text/html", default=True)])])).register(mux)
        start = StartResponse()

        body = b"".join(WeftApp(mux)(environ_for("/gone"), start))

        assert start.header("Weft-Error") is None
        assert start.header("Content-Type") == "text/html; charset=utf-8"
        assert b"404 Not Found" in body

    def test_non_ascii_uri(self):
        """A UTF-8 path arrives latin-1 encoded per PEP 3333 and still matches."""

        def cafe(request, response, buffer):
            buffer.write(request.get_query("name").encode("utf-8"))
            return STATUS_OK

        mux = ServeMux()
        api = API([Endpoint("/café", get=[
            Request(cafe, accept="text/plain", default=True, parameters=[Parameter("name")]),
        ])])
        compile_api(api).register(mux)
        start = StartResponse()

        body = b"".join(WeftApp(mux)(environ_for(
            "/café".encode("utf-8").decode("latin-1"),
            "name=crème".encode("utf-8").decode("latin-1"),
        ), start))

        assert start.status == "200 OK"
        assert body == "crème".encode("utf-8")

    def test_access_log_text(self, quake_mux, caplog):
        with caplog.at_level(logging.INFO, logger="weft.access"):
            b"".join(WeftApp(quake_mux)(environ_for("/quake", "publicID=1"), StartResponse()))

        record = caplog.records[-1]
        assert record.name == "weft.access"
        assert '"GET /quake?publicID=1" 200' in record.getMessage()
        assert record.getMessage().startswith("10.0.0.7 - - [")

    def test_access_log_json(self, quake_mux, caplog):
        with caplog.at_level(logging.INFO, logger="weft.access"):
            b"".join(WeftApp(quake_mux, access_log_format="json")(environ_for("/missing"), StartResponse()))

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["path"] == "/missing"
        assert entry["status_code"] == 404
        assert entry["content_length"] == len(b"not found")
        assert entry["client_ip"] == "10.0.0.7"

    def test_bad_log_format(self, quake_mux):
        with pytest.raises(ValueError):
            WeftApp(quake_mux, access_log_format="xml")


class TestRequestLog:
    """Tests for access-log rendering."""

    @pytest.fixture
    def entry(self):
        return RequestLog(
            request_id="a1b2c3d4",
            method="GET",
            path="/quake",
            query="",
            client_ip="10.0.0.7",
            user_agent="-",
            status_code=200,
            content_length=1234,
            duration_ms=5.4321,
            timestamp="17/Oct/2026:10:55:36 +0000",
        )

    def test_text(self, entry):
        assert entry.to_text() == '10.0.0.7 - - [17/Oct/2026:10:55:36 +0000] "GET /quake" 200 1234 5.43ms'

    def test_dict_rounds_duration(self, entry):
        assert entry.to_dict()["duration_ms"] == 5.43

    def test_render_json(self, entry):
        assert json.loads(entry.render("json"))["request_id"] == "a1b2c3d4"
