"""
=============================================================================
PROTOCOL ERRORS
=============================================================================

Every failure that the server answers with an error status is raised as a
subclass of HTTPError. Each subclass carries the status it maps to, so the
dispatch loop needs exactly one except clause:

    try:
        response = match.dispatch(request)
    except HTTPError as e:
        response = error_response(e.status)

    ┌──────────────────────────┬──────┬─────────────────────────────────┐
    │  Exception               │ Code │ Raised by                       │
    ├──────────────────────────┼──────┼─────────────────────────────────┤
    │  MalformedRequestLine    │ 400  │ RequestParser.parse             │
    │  MalformedContentLength  │ 400  │ RequestParser.read_body         │
    │  PathOutsideRoot         │ 403  │ FileHandler (resolve)           │
    │  RouteNotFound           │ 404  │ Router.match (GET only)         │
    │  FileNotFound            │ 404  │ FileHandler.read                │
    │  UnsupportedMethod       │ 405  │ Router.match                    │
    │  BodyReadShort           │ 500  │ RequestParser.read_body         │
    │  FileWriteFailure        │ 500  │ FileHandler.write               │
    └──────────────────────────┴──────┴─────────────────────────────────┘

Socket-level failures are NOT HTTPErrors: the peer is gone, so there is
nobody to send a status to. Those surface as ConnectionClosed / OSError
from minihttp.core.connection.

=============================================================================
"""

from .status_codes import HTTPStatus


class HTTPError(Exception):
    """
    Base class for errors that turn into an HTTP error response.

    Attributes:
        status: The status to answer with.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status: HTTPStatus = None):
        super().__init__(message or self.__class__.__name__)
        if status is not None:
            self.status = status


class MalformedRequestLine(HTTPError):
    """Request line is not exactly METHOD SP TARGET SP VERSION."""

    status = HTTPStatus.BAD_REQUEST


class MalformedContentLength(HTTPError):
    """Content-Length is missing, non-numeric or negative on a body-bearing route."""

    status = HTTPStatus.BAD_REQUEST


class BodyReadShort(HTTPError):
    """The peer closed before delivering Content-Length body bytes."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, expected: int, received: int):
        super().__init__(f"Incomplete body: expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received


class UnsupportedMethod(HTTPError):
    status = HTTPStatus.METHOD_NOT_ALLOWED


class RouteNotFound(HTTPError):
    status = HTTPStatus.NOT_FOUND


class FileNotFound(HTTPError):
    """The requested file is missing, is a directory, or cannot be read."""

    status = HTTPStatus.NOT_FOUND


class FileWriteFailure(HTTPError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class PathOutsideRoot(HTTPError):
    """A file name resolved to a location outside the serving directory."""

    status = HTTPStatus.FORBIDDEN
