"""
=============================================================================
PER-CONNECTION THREADS
=============================================================================

One thread per accepted connection. No pool, no queue, no upper bound:
a slow client or a slow disk stalls only its own thread.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   acceptor thread          ConnectionThreads                        │
    │   ───────────────          ─────────────────                        │
    │   accept() → conn ──────►  spawn(handle, conn)                      │
    │                               │                                     │
    │                               ├─► Thread "conn-1a2b3c4d"            │
    │                               ├─► Thread "conn-5e6f7a8b"            │
    │                               └─► ...                               │
    │                                                                      │
    │   stop(wait=True) ───────►  join_all(timeout)                       │
    └─────────────────────────────────────────────────────────────────────┘

The registry is the explicit replacement for a process-wide "running"
flag plus wait group: the server knows exactly which units are in flight
and can wait for them on shutdown.

=============================================================================
"""

import logging
import threading
import time
from typing import Callable, Optional, Set

from .connection import Connection

logger = logging.getLogger(__name__)


class ConnectionThreads:
    """
    Spawns and tracks the thread handling each connection.

    Usage:
        threads = ConnectionThreads()
        threads.spawn(process_connection, conn)
        ...
        threads.join_all(timeout=30.0)
    """

    def __init__(self):
        self._threads: Set[threading.Thread] = set()
        self._lock = threading.Lock()
        self._spawned = 0

    def spawn(self, target: Callable[[Connection], None], conn: Connection) -> threading.Thread:
        """
        Start a daemon thread running target(conn).

        Daemon threads do not keep the interpreter alive: a client that
        never finishes its request cannot block process exit.
        """
        thread = threading.Thread(
            target=self._run,
            args=(target, conn),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
            self._spawned += 1
        thread.start()
        return thread

    def _run(self, target: Callable[[Connection], None], conn: Connection):
        try:
            target(conn)
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    @property
    def active(self) -> int:
        """Number of connection threads still running."""
        with self._lock:
            return len(self._threads)

    @property
    def spawned(self) -> int:
        """Total threads started since creation."""
        return self._spawned

    def join_all(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every in-flight connection thread to finish.

        Args:
            timeout: Overall limit in seconds. None waits forever.

        Returns:
            True if all threads finished, False if the timeout expired.
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            with self._lock:
                pending = list(self._threads)
            if not pending:
                return True

            for thread in pending:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    logger.warning(f"{self.active} connection(s) still running after {timeout}s")
                    return False
                thread.join(remaining)
