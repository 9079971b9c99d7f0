"""
Endpoint specifications: the description model and its compiler.

    from weft.api import API, Endpoint, Request, Parameter, compile_api

    compiled = compile_api(API([Endpoint("/quake", get=[...])]))
"""

from .model import API, Endpoint, Parameter, Request, RequestHandler
from .compiler import (
    CompiledAPI,
    DispatchRoutine,
    Route,
    SpecificationError,
    compile_api,
    handler_name,
)

__all__ = [
    # Model
    "API",
    "Endpoint",
    "Parameter",
    "Request",
    "RequestHandler",

    # Compiler
    "CompiledAPI",
    "DispatchRoutine",
    "Route",
    "SpecificationError",
    "compile_api",
    "handler_name",
]
