"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw socket bytes and handler functions:

- request:      HTTPRequest + RequestParser (line-by-line, off a Connection)
- response:     HTTPResponse + ResponseBuilder (byte-exact serialization)
- router:       ordered exact/prefix route table
- errors:       HTTPError hierarchy, one subclass per error status
- status_codes: HTTPStatus enum with reason phrases

=============================================================================
"""

from .request import HTTPRequest, RequestParser
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ContentEncoding,
    accepts_gzip,
    ok,
    created,
    error_response,
    bad_request,
    not_found,
    internal_error,
)
from .router import Router, Route, RouteMatch, MatchKind
from .errors import (
    HTTPError,
    MalformedRequestLine,
    MalformedContentLength,
    BodyReadShort,
    UnsupportedMethod,
    RouteNotFound,
    FileNotFound,
    FileWriteFailure,
    PathOutsideRoot,
)
from .status_codes import HTTPStatus

__all__ = [
    # Requests
    "HTTPRequest",
    "RequestParser",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "ContentEncoding",
    "accepts_gzip",
    "ok",
    "created",
    "error_response",
    "bad_request",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "MatchKind",

    # Errors
    "HTTPError",
    "MalformedRequestLine",
    "MalformedContentLength",
    "BodyReadShort",
    "UnsupportedMethod",
    "RouteNotFound",
    "FileNotFound",
    "FileWriteFailure",
    "PathOutsideRoot",

    # Status codes
    "HTTPStatus",
]
