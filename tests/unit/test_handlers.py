"""
Unit tests for route handlers.
"""

import gzip
from pathlib import Path

import pytest

from minihttp.handlers import FileHandler, root, echo, user_agent
from minihttp.http.request import HTTPRequest
from minihttp.http.response import ContentEncoding, HTTPStatus
from minihttp.http.errors import FileNotFound, FileWriteFailure, PathOutsideRoot


def get(target: str, **headers) -> HTTPRequest:
    return HTTPRequest(method="GET", target=target, headers=headers)


def post(target: str, body: bytes) -> HTTPRequest:
    return HTTPRequest(
        method="POST",
        target=target,
        headers={"Content-Length": str(len(body))},
        body=body,
    )


class TestProbeHandlers:

    def test_root(self):
        response = root(get("/", **{"X-Anything": "ignored"}))

        assert response.status == HTTPStatus.OK
        assert response.body == b"OK"
        assert response.get_header("Content-Type") == "text/plain"

    def test_echo_plain(self):
        response = echo(get("/echo/abc"), "abc")

        assert response.status == HTTPStatus.OK
        assert response.body == b"abc"
        assert response.encoding is ContentEncoding.PLAIN
        assert b"Content-Length: 3\r\n" in response.to_bytes()

    def test_echo_is_not_url_decoded(self):
        response = echo(get("/echo/a%20b"), "a%20b")
        assert response.body == b"a%20b"

    def test_echo_empty_message(self):
        response = echo(get("/echo/"), "")
        assert response.body == b""

    @pytest.mark.parametrize("accept", ["gzip", "deflate, gzip", "br, gzip;q=0.5"])
    def test_echo_gzip(self, accept):
        response = echo(get("/echo/abc", **{"Accept-Encoding": accept}), "abc")

        assert response.encoding is ContentEncoding.GZIP
        head, _, body = response.to_bytes().partition(b"\r\n\r\n")
        assert b"Content-Encoding: gzip" in head
        assert gzip.decompress(body) == b"abc"

    @pytest.mark.parametrize("accept", ["", "invalid-encoding", "deflate"])
    def test_echo_without_gzip(self, accept):
        response = echo(get("/echo/abc", **{"Accept-Encoding": accept}), "abc")

        assert response.encoding is ContentEncoding.PLAIN
        assert b"Content-Encoding" not in response.to_bytes()

    def test_user_agent(self):
        response = user_agent(get("/user-agent", **{"User-Agent": "foo/1.2.3"}))

        assert response.status == HTTPStatus.OK
        assert response.body == b"foo/1.2.3"

    def test_user_agent_lowercase_header(self):
        response = user_agent(get("/user-agent", **{"user-agent": "curl/8"}))
        assert response.body == b"curl/8"

    @pytest.mark.parametrize("headers", [{}, {"User-Agent": ""}])
    def test_user_agent_missing(self, headers):
        response = user_agent(get("/user-agent", **headers))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b""


class TestFileRead:

    def test_read_existing_file(self, served_dir: Path):
        (served_dir / "data.bin").write_bytes(b"\x00binary\xff")
        handler = FileHandler(str(served_dir))

        response = handler.read(get("/files/data.bin"), "data.bin")

        assert response.status == HTTPStatus.OK
        assert response.body == b"\x00binary\xff"
        assert response.get_header("Content-Type") == "application/octet-stream"

    def test_read_in_subdirectory(self, served_dir: Path):
        (served_dir / "sub").mkdir()
        (served_dir / "sub" / "a.txt").write_bytes(b"nested")

        response = FileHandler(str(served_dir)).read(get("/files/sub/a.txt"), "sub/a.txt")
        assert response.body == b"nested"

    def test_read_missing_file(self, served_dir: Path):
        with pytest.raises(FileNotFound) as exc_info:
            FileHandler(str(served_dir)).read(get("/files/nope"), "nope")
        assert exc_info.value.status == 404

    def test_read_directory_is_not_found(self, served_dir: Path):
        (served_dir / "sub").mkdir()

        with pytest.raises(FileNotFound):
            FileHandler(str(served_dir)).read(get("/files/sub"), "sub")

    def test_read_without_directory(self):
        with pytest.raises(FileNotFound):
            FileHandler(None).read(get("/files/a"), "a")

    def test_read_nonexistent_directory(self, tmp_path: Path):
        handler = FileHandler(str(tmp_path / "missing"))

        with pytest.raises(FileNotFound):
            handler.read(get("/files/a"), "a")

    @pytest.mark.parametrize("name", ["../secret", "sub/../../secret", "a/../../../etc/passwd"])
    def test_read_traversal_rejected(self, served_dir: Path, name: str):
        (served_dir.parent / "secret").write_bytes(b"nope")

        with pytest.raises(PathOutsideRoot) as exc_info:
            FileHandler(str(served_dir)).read(get("/files/" + name), name)
        assert exc_info.value.status == 403


class TestFileWrite:

    def test_write_creates_file(self, served_dir: Path):
        response = FileHandler(str(served_dir)).write(post("/files/new.txt", b"hello"), "new.txt")

        assert response.status == HTTPStatus.CREATED
        assert response.body == b""
        assert (served_dir / "new.txt").read_bytes() == b"hello"

    def test_write_truncates_existing(self, served_dir: Path):
        (served_dir / "f").write_bytes(b"a much longer previous content")

        FileHandler(str(served_dir)).write(post("/files/f", b"short"), "f")
        assert (served_dir / "f").read_bytes() == b"short"

    def test_write_empty_body(self, served_dir: Path):
        FileHandler(str(served_dir)).write(post("/files/empty", b""), "empty")
        assert (served_dir / "empty").read_bytes() == b""

    def test_write_missing_subdirectory(self, served_dir: Path):
        with pytest.raises(FileWriteFailure) as exc_info:
            FileHandler(str(served_dir)).write(post("/files/no/such", b"x"), "no/such")

        assert exc_info.value.status == 500
        assert not (served_dir / "no").exists()

    def test_write_without_directory(self):
        with pytest.raises(FileWriteFailure):
            FileHandler(None).write(post("/files/a", b"x"), "a")

    def test_write_traversal_rejected(self, served_dir: Path):
        with pytest.raises(PathOutsideRoot):
            FileHandler(str(served_dir)).write(post("/files/../escape", b"x"), "../escape")

        assert not (served_dir.parent / "escape").exists()
