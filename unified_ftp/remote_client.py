"""
Remote client protocol definition.

Defines the interface that both FTPClient and SFTPClient implement,
allowing TransferClient to route every operation to either transport.
"""

from __future__ import annotations

import stat
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from .config import ConnectionInfo
from .exceptions import LocalIOError


class PathType(Enum):
    """Classification of a path. Always derived on demand, never cached."""

    FILE = "file"
    DIRECTORY = "directory"


def get_local_path_type(path: str) -> PathType:
    """Classify a local path from filesystem metadata.

    Raises:
        LocalIOError: If the path does not exist or cannot be inspected.
    """
    try:
        mode = Path(path).stat().st_mode
    except OSError as e:
        raise LocalIOError(path, "inspect", e) from e
    return PathType.DIRECTORY if stat.S_ISDIR(mode) else PathType.FILE


def read_local_file(path: str) -> bytes:
    """Read a whole local file into memory."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise LocalIOError(path, "read", e) from e


def write_local_file(path: str, data: bytes) -> None:
    """Create or truncate a local file and write ``data`` to it."""
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise LocalIOError(path, "write", e) from e


@runtime_checkable
class RemoteClient(Protocol):
    """Protocol defining the per-transport driver interface.

    Every method opens its own session, performs exactly one remote operation
    and releases the session before returning. Names are relative to
    ``conn.path``.
    """

    def list_directory(self, conn: ConnectionInfo) -> list[str]:
        """List entry names of the working directory in server order."""
        ...

    def upload(self, conn: ConnectionInfo, source_path: str, destination_name: str) -> None:
        """Upload a local file.

        Raises:
            UnsupportedOperationError: If source_path is a local directory.
            LocalIOError: If the local file cannot be read.
            RemoteOperationError: If the server rejects the transfer.
        """
        ...

    def download(self, conn: ConnectionInfo, source_name: str, destination_full_path: str) -> None:
        """Download a remote file to a local path.

        Raises:
            UnsupportedOperationError: For directory downloads.
            LocalIOError: If the local file cannot be written.
            RemoteOperationError: If the server rejects the transfer.
        """
        ...

    def delete_file(self, conn: ConnectionInfo, name: str) -> None:
        """Delete a remote file."""
        ...

    def rename(self, conn: ConnectionInfo, name: str, new_name: str) -> None:
        """Rename a remote file or directory."""
        ...

    def make_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Create a remote directory."""
        ...

    def remove_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Remove a remote directory (must be empty)."""
        ...

    def get_path_type(self, conn: ConnectionInfo, name: str) -> PathType:
        """Classify a remote name as file or directory."""
        ...
