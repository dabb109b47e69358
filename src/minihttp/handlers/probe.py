"""
Handlers that answer from the request alone: root probe, echo and
user-agent reflection.
"""

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, ContentEncoding,
    ok, bad_request, accepts_gzip,
)


def root(request: HTTPRequest, _: str = "") -> HTTPResponse:
    """GET / → 200 "OK". Headers are ignored."""
    return ok("OK")


def echo(request: HTTPRequest, message: str) -> HTTPResponse:
    """
    GET /echo/{message} → 200 with message as a text/plain body.

    The message is the raw target remainder (no URL decoding). When the
    client's Accept-Encoding mentions gzip the body goes out compressed.
    """
    encoding = ContentEncoding.PLAIN
    if accepts_gzip(request.get_header("Accept-Encoding")):
        encoding = ContentEncoding.GZIP

    return (ResponseBuilder()
        .text(message)
        .encoding(encoding)
        .build())


def user_agent(request: HTTPRequest, _: str = "") -> HTTPResponse:
    """GET /user-agent → 200 echoing User-Agent, or 400 if absent/empty."""
    agent = request.user_agent
    if not agent:
        return bad_request()
    return ok(agent)
