"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m minihttp --directory /tmp/data
    minihttp --directory /tmp/data --port 8080 --log-level DEBUG

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig, DEFAULT_PORT, LOG_LEVELS, LOG_FORMATS
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server built from raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                          # Run with defaults
  python -m minihttp --directory /tmp/data    # Enable /files/ routes
  python -m minihttp --port 8080              # Custom port
  python -m minihttp --log-format json        # JSON access log
        """
    )

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory to serve /files/ from (default: none, file routes fail)"
    )
    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Access log format (default: text)"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        directory=args.directory,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
