"""
Unit tests for the endpoint specification compiler.
"""

import io

import pytest

from weft.api import (
    API,
    CompiledAPI,
    Endpoint,
    Parameter,
    Request,
    SpecificationError,
    compile_api,
    handler_name,
)
from weft.http import Response
from weft.mux import ServeMux
from weft.result import METHOD_NOT_ALLOWED, NOT_ACCEPTABLE, STATUS_OK


def ok_handler(request, response, buffer):
    buffer.write(b"ok")
    return STATUS_OK


def tagging_handler(tag):
    """A handler that records which variant ran in the buffer."""

    def handler(request, response, buffer):
        buffer.write(tag.encode())
        return STATUS_OK

    return handler


def dispatch(compiled, uri, request):
    response = Response()
    buffer = io.BytesIO()
    result = compiled[uri](request, response, buffer)
    return result, response, buffer


class TestHandlerName:
    """Tests for dispatch routine name derivation."""

    @pytest.mark.parametrize("uri,expected", [
        ("/quake", "quakeHandler"),
        ("/quake/", "quakesHandler"),
        ("/quake/stats", "quakestatsHandler"),
        ("/", "sHandler"),
    ])
    def test_names(self, uri, expected):
        assert handler_name(uri) == expected

    def test_routine_carries_name(self, quake_api):
        """Compiled routines are named after their URI."""
        compiled = compile_api(quake_api)

        assert compiled["/quake"].__name__ == "quakeHandler"
        assert compiled.routes[0].name == "quakeHandler"


class TestValidation:
    """Tests for specification errors."""

    def test_empty_uri(self):
        api = API([Endpoint("", get=[Request(ok_handler, accept="text/plain")])])

        with pytest.raises(SpecificationError, match="found empty URI"):
            compile_api(api)

    def test_no_requests(self):
        with pytest.raises(SpecificationError, match=r"found no requests \(GET, PUT, DELETE\) for /quake"):
            compile_api(API([Endpoint("/quake")]))

    def test_duplicate_uri(self):
        endpoint = Endpoint("/quake", get=[Request(ok_handler, accept="text/plain")])

        with pytest.raises(SpecificationError, match="duplicate URI /quake"):
            compile_api(API([endpoint, endpoint]))

    def test_multiple_defaults(self):
        """Two defaults on one endpoint is an error naming the URI."""
        api = API([Endpoint("/quake", get=[
            Request(ok_handler, accept="application/json", default=True),
            Request(ok_handler, accept="text/csv", default=True),
        ])])

        with pytest.raises(SpecificationError, match="found multiple defaults for /quake GET"):
            compile_api(api)

    def test_duplicate_accept(self):
        api = API([Endpoint("/quake", get=[
            Request(ok_handler, accept="text/csv"),
            Request(ok_handler, accept="text/csv"),
        ])])

        with pytest.raises(SpecificationError, match="duplicate Accept"):
            compile_api(api)

    def test_colliding_names(self):
        """/a/b and /ab both derive abHandler."""
        api = API([
            Endpoint("/a/b", get=[Request(ok_handler, accept="text/plain")]),
            Endpoint("/ab", get=[Request(ok_handler, accept="text/plain")]),
        ])

        with pytest.raises(SpecificationError, match="abHandler"):
            compile_api(api)

    def test_first_pass_errors_win(self):
        """An endpoint-level error later in the list beats a GET error earlier."""
        api = API([
            Endpoint("/quake", get=[
                Request(ok_handler, accept="a", default=True),
                Request(ok_handler, accept="b", default=True),
            ]),
            Endpoint(""),
        ])

        with pytest.raises(SpecificationError, match="found empty URI"):
            compile_api(api)

    def test_specification_error_is_value_error(self):
        assert issubclass(SpecificationError, ValueError)

    def test_empty_api_compiles(self):
        compiled = compile_api(API())

        assert isinstance(compiled, CompiledAPI)
        assert len(compiled) == 0


class TestGetNegotiation:
    """Tests for Accept-header dispatch."""

    @pytest.fixture
    def compiled(self):
        return compile_api(API([Endpoint("/quake", get=[
            Request(tagging_handler("json"), accept="application/json", default=True,
                    parameters=[Parameter("publicID", required=True)]),
            Request(tagging_handler("csv"), accept="text/csv",
                    parameters=[Parameter("publicID", required=True)]),
        ])]))

    def test_exact_match_sets_content_type(self, compiled, make_request):
        request = make_request("GET", "/quake?publicID=1", {"Accept": "text/csv"})

        result, response, buffer = dispatch(compiled, "/quake", request)

        assert result == STATUS_OK
        assert buffer.getvalue() == b"csv"
        assert response.headers["Content-Type"] == "text/csv"

    def test_match_validates_query(self, compiled, make_request):
        """A matched variant with a bad query never reaches the handler."""
        request = make_request("GET", "/quake", {"Accept": "text/csv"})

        result, response, buffer = dispatch(compiled, "/quake", request)

        assert result.code == 400
        assert result.msg == "missing required query parameter: publicID"
        assert buffer.getvalue() == b""
        assert response.headers.get("Content-Type") is None

    def test_accept_compared_verbatim(self, compiled, make_request):
        """No q-value parsing: 'text/csv;q=0.9' is not 'text/csv'."""
        request = make_request("GET", "/quake?publicID=1", {"Accept": "text/csv;q=0.9"})

        _, _, buffer = dispatch(compiled, "/quake", request)

        assert buffer.getvalue() == b"json"

    def test_fallback_skips_query_and_content_type(self, compiled, make_request):
        """By default the fallback is called as is."""
        request = make_request("GET", "/quake")

        result, response, buffer = dispatch(compiled, "/quake", request)

        assert result == STATUS_OK
        assert buffer.getvalue() == b"json"
        assert response.headers.get("Content-Type") is None

    def test_negotiated_fallback(self, make_request):
        """negotiate_fallback=True validates and sets Content-Type on the fallback."""
        api = API([Endpoint("/quake", get=[
            Request(tagging_handler("json"), accept="application/json", default=True,
                    parameters=[Parameter("publicID", required=True)]),
        ])])
        compiled = compile_api(api, negotiate_fallback=True)

        result, _, _ = dispatch(compiled, "/quake", make_request("GET", "/quake"))
        assert result.code == 400

        _, response, buffer = dispatch(compiled, "/quake", make_request("GET", "/quake?publicID=1"))
        assert buffer.getvalue() == b"json"
        assert response.headers["Content-Type"] == "application/json"

    def test_no_match_no_default_is_406(self, make_request):
        compiled = compile_api(API([Endpoint("/quake", get=[
            Request(ok_handler, accept="text/csv"),
        ])]))

        result, _, _ = dispatch(compiled, "/quake", make_request("GET", "/quake"))

        assert result == NOT_ACCEPTABLE
        assert result.code == 406
        assert result.msg == "specify accept"


class TestMethodDispatch:
    """Tests for the method switch."""

    def test_put_runs_query_check_then_handler(self, quake_api, make_request):
        compiled = compile_api(quake_api)

        result, _, _ = dispatch(compiled, "/quake", make_request("PUT", "/quake"))
        assert result.code == 400

        result, _, _ = dispatch(compiled, "/quake", make_request("PUT", "/quake?publicID=1"))
        assert result == STATUS_OK

    def test_delete_without_declaration_is_405(self, quake_api, make_request):
        compiled = compile_api(quake_api)

        result, _, _ = dispatch(compiled, "/quake", make_request("DELETE", "/quake"))

        assert result == METHOD_NOT_ALLOWED

    def test_get_without_declaration_is_405(self, make_request):
        compiled = compile_api(API([Endpoint("/quake", delete=Request(ok_handler))]))

        result, _, _ = dispatch(compiled, "/quake", make_request("GET", "/quake"))

        assert result.code == 405
        assert result.msg == "method not allowed"

    @pytest.mark.parametrize("method", ["POST", "PATCH", "HEAD", "OPTIONS"])
    def test_other_methods_are_405(self, quake_api, make_request, method):
        compiled = compile_api(quake_api)

        result, _, _ = dispatch(compiled, "/quake", make_request(method, "/quake"))

        assert result == METHOD_NOT_ALLOWED


class TestCompiledAPI:
    """Tests for registration and description."""

    def test_routes_in_declaration_order(self):
        api = API([
            Endpoint("/b", get=[Request(ok_handler, accept="x")]),
            Endpoint("/a/", get=[Request(ok_handler, accept="x")]),
        ])

        compiled = compile_api(api)

        assert [r.uri for r in compiled] == ["/b", "/a/"]
        assert "/a/" in compiled
        assert "/c" not in compiled

    def test_register_adds_exact_uris(self, quake_api):
        mux = ServeMux()

        compile_api(quake_api).register(mux)

        assert mux.routes() == ["/quake"]

    def test_register_twice_fails(self, quake_api):
        mux = ServeMux()
        compiled = compile_api(quake_api)
        compiled.register(mux)

        with pytest.raises(ValueError):
            compiled.register(mux)

    def test_describe(self, quake_api):
        listing = compile_api(quake_api).describe()

        assert "/quake" in listing
        assert "quakeHandler" in listing
        assert "GET[application/vnd.geo+json*, text/csv]" in listing
        assert "PUT" in listing

    def test_describe_without_get(self):
        api = API([Endpoint("/quake/", delete=Request(lambda request, response, buffer: STATUS_OK))])

        listing = compile_api(api).describe()

        assert listing.split() == ["/quake/", "quakesHandler", "DELETE"]
