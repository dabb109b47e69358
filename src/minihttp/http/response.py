"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds byte-exact HTTP/1.1 responses.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                      ← status line            │
    │  Content-Type: text/plain\r\n             ← headers, in order      │
    │  Content-Encoding: gzip\r\n                                         │
    │  Content-Length: 23\r\n                   ← always derived, last   │
    │  \r\n                                     ← blank line             │
    │  <23 body bytes>                          ← body                   │
    └─────────────────────────────────────────────────────────────────────┘

Nothing else is added: no Date, no Server, no Connection header. Every
connection is closed after one response, so the client reads the body by
Content-Length (or to EOF).

=============================================================================
CONTENT ENCODING
=============================================================================

A handler does not compress anything itself. It picks an encoding:

    ContentEncoding.PLAIN  → body sent as-is
    ContentEncoding.GZIP   → body gzip-compressed at serialization time,
                             "Content-Encoding: gzip" added

Content-Length is computed from the bytes that actually go on the wire, so
it always reflects the compressed size when GZIP is chosen.

=============================================================================
"""

import gzip
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union

from .status_codes import HTTPStatus

DEFAULT_CONTENT_TYPE = "text/plain"


class ContentEncoding(Enum):
    PLAIN = "identity"
    GZIP = "gzip"


def accepts_gzip(accept_encoding: str) -> bool:
    """
    Check an Accept-Encoding value for gzip support.

    A substring match is enough: "gzip", "deflate, gzip" and "gzip;q=1.0"
    all qualify. Matching is case-sensitive, as sent by real clients.
    """
    return "gzip" in accept_encoding


def gzip_body(body: bytes) -> bytes:
    # mtime=0 keeps output deterministic for identical bodies.
    return gzip.compress(body, mtime=0)


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Attributes:
        status:   HTTPStatus (code + reason phrase).
        headers:  Ordered (name, value) pairs. Content-Length here is ignored.
        body:     Uncompressed body bytes.
        version:  Protocol version for the status line.
        encoding: How the body is encoded on the wire.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"
    encoding: ContentEncoding = ContentEncoding.PLAIN

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def get_header(self, name: str, default: str = "") -> str:
        for key, value in self.headers:
            if key == name:
                return value
        return default

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a header, replacing an existing one of the same name in place.

        Returns self for method chaining.
        """
        for i, (key, _) in enumerate(self.headers):
            if key == name:
                self.headers[i] = (name, value)
                return self
        self.headers.append((name, value))
        return self

    def wire_body(self) -> bytes:
        """The body exactly as it will be sent."""
        if self.encoding is ContentEncoding.GZIP:
            return gzip_body(self.body)
        return self.body

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            {version} {code} {reason}\\r\\n
            {name}: {value}\\r\\n          (each header, in order)
            Content-Encoding: gzip\\r\\n   (GZIP only)
            Content-Length: {n}\\r\\n      (derived from the wire body)
            \\r\\n
            {body}
        """
        body = self.wire_body()

        lines = [self.status_line]
        for name, value in self.headers:
            if name in ("Content-Length", "Content-Encoding"):
                continue
            lines.append(f"{name}: {value}")
        if self.encoding is ContentEncoding.GZIP:
            lines.append(f"Content-Encoding: {ContentEncoding.GZIP.value}")
        lines.append(f"Content-Length: {len(body)}")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n\r\n"
        return header_bytes + body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .encoding(ContentEncoding.GZIP)
            .build())

    Every method returns self except build(). build() adds
    "Content-Type: text/plain" if no content type was set.
    """

    def __init__(self, version: str = "HTTP/1.1"):
        self._status = HTTPStatus.OK
        self._headers: List[Tuple[str, str]] = []
        self._body: bytes = b""
        self._version = version
        self._encoding = ContentEncoding.PLAIN

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def version(self, version: str) -> "ResponseBuilder":
        self._version = version
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a header. A later call with the same name replaces the value."""
        self._headers = [(k, v) for k, v in self._headers if k != name]
        self._headers.append((name, value))
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body with "Content-Type: text/plain"."""
        return self.content_type(DEFAULT_CONTENT_TYPE).body(text)

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Opaque bytes with "Content-Type: application/octet-stream"."""
        return self.content_type("application/octet-stream").body(data)

    def encoding(self, encoding: ContentEncoding) -> "ResponseBuilder":
        self._encoding = encoding
        return self

    def build(self) -> HTTPResponse:
        headers = list(self._headers)
        if not any(name == "Content-Type" for name, _ in headers):
            headers.insert(0, ("Content-Type", DEFAULT_CONTENT_TYPE))
        return HTTPResponse(
            status=self._status,
            headers=headers,
            body=self._body,
            version=self._version,
            encoding=self._encoding,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes] = b"") -> HTTPResponse:
    """200 OK with a text/plain body."""
    return ResponseBuilder().status(HTTPStatus.OK).body(body).build()


def created() -> HTTPResponse:
    """201 Created with an empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def error_response(status: HTTPStatus, version: str = "HTTP/1.1") -> HTTPResponse:
    """An error status with an empty text/plain body."""
    return ResponseBuilder(version).status(status).build()


def bad_request(version: str = "HTTP/1.1") -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST, version)


def not_found(version: str = "HTTP/1.1") -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND, version)


def internal_error(version: str = "HTTP/1.1") -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, version)
