"""
Unit tests for the buffered connection reader.
"""

import socket

import pytest

from minihttp.core.connection import Connection, ConnectionClosed, ConnectionState


class TestReadLine:
    """Tests for Connection.read_line()."""

    def test_strips_crlf(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"GET / HTTP/1.1\r\n")

        assert conn.read_line() == "GET / HTTP/1.1"

    def test_bare_lf_terminator(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"Host: example\n")

        assert conn.read_line() == "Host: example"

    def test_empty_line(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"\r\n")

        assert conn.read_line() == ""

    def test_multiple_lines_in_one_chunk(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"one\r\ntwo\r\n\r\n")

        assert conn.read_line() == "one"
        assert conn.read_line() == "two"
        assert conn.read_line() == ""

    def test_line_split_across_chunks(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"User-Ag")
        peer.sendall(b"ent: curl\r")
        peer.sendall(b"\n")

        assert conn.read_line() == "User-Agent: curl"

    def test_eof_before_newline_raises(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"GET / HTT")
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(ConnectionClosed) as exc_info:
            conn.read_line()

        assert exc_info.value.partial == b"GET / HTT"

    def test_eof_on_empty_stream(self, conn_pair):
        conn, peer = conn_pair
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(ConnectionClosed):
            conn.read_line()


class TestReadExact:
    """Tests for Connection.read_exact()."""

    def test_reads_leftover_after_line(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"Content-Length: 5\r\n\r\nhello")

        assert conn.read_line() == "Content-Length: 5"
        assert conn.read_line() == ""
        assert conn.read_exact(5) == b"hello"

    def test_waits_for_remaining_bytes(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"hel")
        peer.sendall(b"lo world")

        assert conn.read_exact(5) == b"hello"
        assert conn.read_exact(6) == b" world"

    def test_binary_data_untouched(self, conn_pair):
        conn, peer = conn_pair
        payload = bytes(range(256))
        peer.sendall(payload)

        assert conn.read_exact(256) == payload

    def test_zero_bytes(self, conn_pair):
        conn, _ = conn_pair
        assert conn.read_exact(0) == b""

    def test_short_read_raises_with_partial(self, conn_pair):
        conn, peer = conn_pair
        peer.sendall(b"0123456789")
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(ConnectionClosed) as exc_info:
            conn.read_exact(100)

        assert exc_info.value.partial == b"0123456789"

    @pytest.mark.parametrize("n", [4_000_000_000, 99999999999999999999])
    def test_huge_length_short_read(self, conn_pair, n):
        """A length far beyond what arrives ends in ConnectionClosed, not an overflow."""
        conn, peer = conn_pair
        peer.sendall(b"0123456789")
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(ConnectionClosed) as exc_info:
            conn.read_exact(n)

        assert exc_info.value.partial == b"0123456789"

    def test_negative_length_rejected(self, conn_pair):
        conn, _ = conn_pair
        with pytest.raises(ValueError):
            conn.read_exact(-1)


class TestSendAndClose:
    """Tests for sending and closing."""

    def test_send_response(self, conn_pair):
        conn, peer = conn_pair

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert conn.state == ConnectionState.WRITING_RESPONSE
        assert peer.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_close_sends_eof_and_is_idempotent(self, conn_pair):
        conn, peer = conn_pair
        peer.shutdown(socket.SHUT_WR)

        conn.close()
        conn.close()

        assert conn.is_closed
        assert peer.recv(1024) == b""

    def test_context_manager_closes(self):
        server_sock, client_sock = socket.socketpair()
        client_sock.shutdown(socket.SHUT_WR)

        with Connection(socket=server_sock, address=("127.0.0.1", 1)) as conn:
            assert conn.state == ConnectionState.ACCEPTED

        assert conn.state == ConnectionState.CLOSED
        client_sock.close()
