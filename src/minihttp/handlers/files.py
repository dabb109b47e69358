"""
=============================================================================
FILE HANDLERS
=============================================================================

Whole-file read and write under a single serving directory.

    GET  /files/notes.txt   → read  <directory>/notes.txt
    POST /files/notes.txt   → write <directory>/notes.txt  (create/truncate)

=============================================================================
PATH RESOLUTION
=============================================================================

The file name is the raw target remainder after "/files/". It is joined
onto the serving directory and resolved (".." and symlinks followed):

    directory = /srv/data
    "notes.txt"          → /srv/data/notes.txt          OK
    "/notes.txt"         → /srv/data/notes.txt          leading "/" dropped
    "../etc/passwd"      → /srv/etc/passwd              403 PathOutsideRoot
    "sub/notes.txt"      → /srv/data/sub/notes.txt      OK if sub/ exists

Subdirectories are never created. Concurrent writers to one path are not
coordinated; the last write wins.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Type

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, created
from ..http.errors import HTTPError, FileNotFound, FileWriteFailure, PathOutsideRoot

logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves reads and writes for the /files/ routes.

    Args:
        directory: Serving directory. When None, every read answers 404 and
                   every write answers 500.
    """

    def __init__(self, directory: Optional[str]):
        self.root: Optional[Path] = Path(directory).resolve() if directory else None

    def read(self, request: HTTPRequest, name: str) -> HTTPResponse:
        """
        Return the whole file as application/octet-stream.

        Raises:
            FileNotFound: Missing file, a directory, unreadable, or no
                          serving directory configured.
            PathOutsideRoot: name resolves outside the serving directory.
        """
        path = self._resolve(name, FileNotFound)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise FileNotFound(f"Cannot read {path}: {e}") from e

        logger.debug(f"Read {len(content)} bytes from {path}")
        return ResponseBuilder().binary(content).build()

    def write(self, request: HTTPRequest, name: str) -> HTTPResponse:
        """
        Write the request body to the file, creating or truncating it.

        Raises:
            FileWriteFailure: Cannot create/write the file, or no serving
                              directory configured.
            PathOutsideRoot: name resolves outside the serving directory.
        """
        path = self._resolve(name, FileWriteFailure)
        body = request.body or b""
        try:
            path.write_bytes(body)
        except OSError as e:
            raise FileWriteFailure(f"Cannot write {path}: {e}") from e

        logger.debug(f"Wrote {len(body)} bytes to {path}")
        return created()

    def _resolve(self, name: str, missing: Type[HTTPError]) -> Path:
        """
        Join name onto the serving directory and check containment.

        Args:
            name: File name from the request target.
            missing: Error to raise when no usable path can be produced.
        """
        if self.root is None:
            raise missing("No serving directory configured")

        try:
            path = (self.root / name.lstrip("/")).resolve()
        except (OSError, ValueError) as e:
            raise missing(f"Invalid file name {name!r}: {e}") from e

        try:
            path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            raise PathOutsideRoot(f"{name!r} is outside the serving directory")

        return path
