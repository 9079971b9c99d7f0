"""
=============================================================================
WEFT CLI ENTRY POINT
=============================================================================

    # List the routes an API compiles to
    python -m weft myservice.api:API --routes

    # Serve it on the development server
    python -m weft myservice.api:API --port 9000

    # Settings also come from the environment
    WEFT_PORT=9000 WEFT_LOG_FORMAT=json python -m weft myservice.api:API

The target is "module:attribute". The attribute may be an API description,
an already compiled API, or a ServeMux.

Exit status:
    0   ok
    1   the API does not compile, or a setting is invalid
    2   the target cannot be imported

=============================================================================
"""

import argparse
import importlib
import os
import sys

from . import __version__
from .api import API, CompiledAPI, SpecificationError, compile_api
from .config import WeftConfig
from .log import ACCESS_LOG_FORMATS, setup_logging
from .mux import ServeMux
from .writer import ResponseWriter
from .wsgi import WeftApp, serve


class TargetError(Exception):
    """The module:attribute target cannot be loaded."""


def load_target(target: str):
    """
    Import "module:attribute" and return the attribute.

    The current directory is importable, as with `python -m`.

    Raises:
        TargetError: On a malformed target, a failed import or a missing
                     attribute
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise TargetError(f"target must be module:attribute, got {target!r}")

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f"cannot import {module_name}: {e}") from e

    obj = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetError(f"{module_name} has no attribute {attribute}") from e
    return obj


def build_mux(obj, config: WeftConfig) -> ServeMux:
    """Turn a loaded target into a ServeMux."""
    if isinstance(obj, ServeMux):
        return obj

    if isinstance(obj, API):
        obj = compile_api(obj, negotiate_fallback=config.negotiate_fallback)

    if isinstance(obj, CompiledAPI):
        mux = ServeMux(writer=ResponseWriter(gzip_level=config.gzip_level))
        obj.register(mux)
        return mux

    raise TargetError(f"cannot serve a {type(obj).__name__}; expected API, CompiledAPI or ServeMux")


def main(argv=None) -> int:
    env = WeftConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="weft",
        description="Compile an endpoint specification and serve it over WSGI",
    )

    parser.add_argument("target", help="module:attribute naming an API, CompiledAPI or ServeMux")

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=env.host,
                        help=f"Host to bind to (default: {env.host})")
    parser.add_argument("--port", "-p", type=int, default=env.port,
                        help=f"Port to listen on (default: {env.port})")

    # ─────────────────────────────────────────────────────────────────────
    # BEHAVIOUR ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--routes", action="store_true",
                        help="Print the compiled routes and exit")
    parser.add_argument("--negotiate-fallback", action="store_true",
                        default=env.negotiate_fallback,
                        help="Validate the query and set Content-Type on default GET variants")
    parser.add_argument("--log-level", "-l", default=env.log_level,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        type=str.upper,
                        help=f"Logging level (default: {env.log_level})")
    parser.add_argument("--log-format", default=env.log_format,
                        choices=ACCESS_LOG_FORMATS,
                        help=f"Access log format (default: {env.log_format})")

    parser.add_argument("--version", "-v", action="version", version=f"weft {__version__}")

    args = parser.parse_args(argv)

    config = WeftConfig(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_format=args.log_format,
        gzip_level=env.gzip_level,
        negotiate_fallback=args.negotiate_fallback,
    )

    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    try:
        obj = load_target(args.target)
    except TargetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.routes:
        if isinstance(obj, ServeMux):
            print("\n".join(obj.routes()))
            return 0
        if isinstance(obj, API):
            try:
                obj = compile_api(obj, negotiate_fallback=config.negotiate_fallback)
            except SpecificationError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        if isinstance(obj, CompiledAPI):
            print(obj.describe())
            return 0

    try:
        mux = build_mux(obj, config)
    except SpecificationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except TargetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    serve(WeftApp(mux, access_log_format=config.log_format), config.host, config.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
