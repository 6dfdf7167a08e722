"""
Unified transfer client.

TransferClient exposes one set of file operations and hands each call to
the driver registered for ``conn.protocol``. Argument validation happens
here, before any driver is involved, so a bad call never reaches the
network.
"""

from __future__ import annotations

import logging
import os

from .config import ConnectionInfo, Protocol, TransferConfig
from .exceptions import InvalidArgumentError, UnsupportedOperationError
from .ftp_client import FTPClient
from .remote_client import PathType, RemoteClient
from .sftp_client import SFTPClient

logger = logging.getLogger(__name__)


def _require(value, argument: str) -> None:
    """Raise InvalidArgumentError for None or empty values."""
    if value is None or value == "":
        raise InvalidArgumentError(argument)


class TransferClient:
    """
    Protocol-agnostic facade over FTPClient and SFTPClient.

    The protocol to driver map is fixed at construction. Exactly one driver
    runs per call; there is no fallback between protocols.
    """

    def __init__(
        self,
        transfer_config: TransferConfig | None = None,
        drivers: dict[Protocol, RemoteClient] | None = None,
    ):
        self.transfer_config = transfer_config or TransferConfig()
        if drivers is None:
            drivers = {
                Protocol.FTP: FTPClient(self.transfer_config),
                Protocol.SFTP: SFTPClient(self.transfer_config),
            }
        self._drivers = dict(drivers)

    def _driver(self, conn: ConnectionInfo) -> RemoteClient:
        try:
            driver = self._drivers[conn.protocol]
        except KeyError:
            raise UnsupportedOperationError(f"No driver registered for {conn.protocol}")
        logger.debug("Dispatching to %s for %s", type(driver).__name__, conn.host)
        return driver

    def list_directory(self, conn: ConnectionInfo) -> list[str]:
        """
        List files and directories under the working path.

        Returns:
            list[str]: Entry names in the order the server reports them.
        """
        _require(conn, "conn")
        return self._driver(conn).list_directory(conn)

    def upload(
        self, conn: ConnectionInfo, source_path: str, destination_name: str | None = None
    ) -> None:
        """
        Upload a local file.

        Args:
            conn: Connection descriptor.
            source_path: Local file to upload.
            destination_name: Remote name; defaults to the base name of source_path.

        Raises:
            InvalidArgumentError: If conn or source_path is missing.
            UnsupportedOperationError: If source_path is a directory.
        """
        _require(conn, "conn")
        _require(source_path, "source_path")
        if not destination_name:
            destination_name = os.path.basename(os.path.normpath(source_path))

        self._driver(conn).upload(conn, source_path, destination_name)

    def download(
        self,
        conn: ConnectionInfo,
        source_name: str,
        destination_path: str,
        destination_name: str | None = None,
    ) -> None:
        """
        Download a remote file into a local directory.

        Args:
            conn: Connection descriptor.
            source_name: Remote name inside the working path.
            destination_path: Local directory to write into.
            destination_name: Local file name; defaults to source_name.

        Raises:
            InvalidArgumentError: If a required argument is missing.
            UnsupportedOperationError: For directory downloads.
        """
        _require(conn, "conn")
        _require(source_name, "source_name")
        _require(destination_path, "destination_path")
        if not destination_name:
            destination_name = source_name

        destination_full_path = os.path.join(destination_path, destination_name)
        self._driver(conn).download(conn, source_name, destination_full_path)

    def delete_file(self, conn: ConnectionInfo, name: str) -> None:
        """Delete a remote file."""
        _require(conn, "conn")
        _require(name, "name")
        self._driver(conn).delete_file(conn, name)

    def rename_file(self, conn: ConnectionInfo, name: str, new_name: str) -> None:
        """Rename a remote file or directory."""
        _require(conn, "conn")
        _require(name, "name")
        _require(new_name, "new_name")
        self._driver(conn).rename(conn, name, new_name)

    def make_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Create a remote directory."""
        _require(conn, "conn")
        _require(name, "name")
        self._driver(conn).make_directory(conn, name)

    def remove_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Remove a remote directory."""
        _require(conn, "conn")
        _require(name, "name")
        self._driver(conn).remove_directory(conn, name)

    def get_path_type(self, conn: ConnectionInfo, name: str) -> PathType:
        """Classify a remote name as file or directory. Never cached."""
        _require(conn, "conn")
        _require(name, "name")
        return self._driver(conn).get_path_type(conn, name)
