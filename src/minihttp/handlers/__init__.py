"""
Route handlers and the fixed route table.

    ┌────────┬──────────────────────┬─────────────────────────────────────┐
    │ Method │ Target               │ Handler                             │
    ├────────┼──────────────────────┼─────────────────────────────────────┤
    │ GET    │ /            (exact) │ probe.root                          │
    │ GET    │ /echo/      (prefix) │ probe.echo                          │
    │ GET    │ /user-agent  (exact) │ probe.user_agent                    │
    │ GET    │ /files/     (prefix) │ FileHandler.read                    │
    │ POST   │ /files/     (prefix) │ FileHandler.write  (reads body)     │
    └────────┴──────────────────────┴─────────────────────────────────────┘

Anything else is 404 for GET and 405 for every other method (see Router).
"""

from typing import Optional

from ..http.router import Router
from .probe import root, echo, user_agent
from .files import FileHandler


def build_router(directory: Optional[str] = None) -> Router:
    """Create a Router with the five routes, in precedence order."""
    files = FileHandler(directory)

    router = Router()
    router.add_route("GET", "/", root)
    router.add_route("GET", "/echo/", echo, prefix=True)
    router.add_route("GET", "/user-agent", user_agent)
    router.add_route("GET", "/files/", files.read, prefix=True, name="file_read")
    router.add_route("POST", "/files/", files.write, prefix=True, reads_body=True, name="file_write")
    return router


__all__ = [
    "build_router",
    "FileHandler",
    "root",
    "echo",
    "user_agent",
]
