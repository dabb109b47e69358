"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. It is built once at startup (from CLI
arguments, environment variables or code) and never mutated afterwards.

    # From code:
    config = ServerConfig(directory="/tmp/data")

    # From environment:
    MINIHTTP_DIRECTORY=/tmp/data MINIHTTP_LOG_LEVEL=DEBUG python -m minihttp

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_PORT = 4221

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size
    FILES       directory
    LOGGING     log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Interface to bind. "0.0.0.0" listens on every interface."""

    port: int = DEFAULT_PORT
    """TCP port. 0 asks the OS for a free port (used by the tests)."""

    backlog: int = 128
    """Queued, not yet accepted connections before the OS refuses more."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    shutdown_timeout: Optional[float] = 10.0
    """
    How long a stopping server waits for in-flight connections.
    None waits forever. Connection reads have no timeout, so a client
    that never finishes its request can hold shutdown for this long.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Serving directory for /files/ routes.
    None is allowed: file routes then fail per request (404 / 500).
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" (Apache-like) or "json"."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        MINIHTTP_HOST        bind address        (default: 0.0.0.0)
        MINIHTTP_PORT        port                (default: 4221)
        MINIHTTP_DIRECTORY   serving directory   (default: unset)
        MINIHTTP_LOG_LEVEL   logging level       (default: INFO)
        MINIHTTP_LOG_FORMAT  text | json         (default: text)
        """
        return cls(
            host=os.getenv("MINIHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("MINIHTTP_PORT", str(DEFAULT_PORT))),
            directory=os.getenv("MINIHTTP_DIRECTORY") or None,
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("MINIHTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values. Called by HTTPServer at construction
        so a bad config fails at startup, not on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")
        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")
        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")
        if self.shutdown_timeout is not None and self.shutdown_timeout < 0:
            raise ValueError("shutdown_timeout must be >= 0")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}")

    @property
    def has_directory(self) -> bool:
        """True when a serving directory is set and currently exists."""
        return self.directory is not None and os.path.isdir(self.directory)
