"""
Core networking: the listening socket, per-connection buffered I/O and the
per-connection thread registry.
"""

from .connection import Connection, ConnectionClosed, ConnectionState
from .socket_server import SocketServer
from .threads import ConnectionThreads

__all__ = [
    "Connection",
    "ConnectionClosed",
    "ConnectionState",
    "SocketServer",
    "ConnectionThreads",
]
