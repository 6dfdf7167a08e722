"""
URI based FTP helpers.

Thin functions addressing the server with an ``ftp://host[:port]/path`` URI
and a Credentials value instead of a ConnectionInfo. They predate
TransferClient and are kept for callers that already hold a URI; each one
converts the URI and delegates to FTPClient.
"""

import logging
import os
from urllib.parse import unquote, urlsplit

from .config import ConnectionInfo, Credentials, Protocol, TransferConfig
from .exceptions import InvalidArgumentError, LocalIOError
from .ftp_client import FTP_SCHEME, FTPClient

logger = logging.getLogger(__name__)


def _connection_from_uri(uri: str, credentials: Credentials) -> ConnectionInfo:
    if not uri:
        raise InvalidArgumentError("uri")
    if credentials is None:
        raise InvalidArgumentError("credentials")

    parts = urlsplit(uri)
    if parts.scheme.lower() != FTP_SCHEME or not parts.hostname:
        raise ValueError(f"Not an FTP URI: {uri}")

    conn = ConnectionInfo(
        host=parts.hostname,
        port=parts.port,
        username=credentials.username,
        password=credentials.password,
        protocol=Protocol.FTP,
        path=unquote(parts.path),
    )
    logger.debug("Resolved FTP URI to %r", conn)
    return conn


def _require(value: str, argument: str) -> None:
    if not value:
        raise InvalidArgumentError(argument)


def list_files(
    uri: str, credentials: Credentials, transfer_config: TransferConfig | None = None
) -> list[str]:
    """List the names under ``uri``."""
    conn = _connection_from_uri(uri, credentials)
    return FTPClient(transfer_config).list_directory(conn)


def upload_file(
    uri: str,
    credentials: Credentials,
    upload_file_path: str,
    ftp_file_name: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    """Upload ``upload_file_path`` as ``ftp_file_name`` under ``uri``."""
    conn = _connection_from_uri(uri, credentials)
    _require(upload_file_path, "upload_file_path")
    _require(ftp_file_name, "ftp_file_name")
    if not os.path.isfile(upload_file_path):
        raise LocalIOError(
            upload_file_path, "find", FileNotFoundError(f"No such file: {upload_file_path}")
        )

    FTPClient(transfer_config).upload(conn, upload_file_path, ftp_file_name)


def download_file(
    uri: str,
    credentials: Credentials,
    ftp_file_name: str,
    download_file_path: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    """Download ``ftp_file_name`` under ``uri`` to the local file ``download_file_path``."""
    conn = _connection_from_uri(uri, credentials)
    _require(ftp_file_name, "ftp_file_name")
    _require(download_file_path, "download_file_path")
    FTPClient(transfer_config).download(conn, ftp_file_name, download_file_path)


def delete_file(
    uri: str,
    credentials: Credentials,
    ftp_file_name: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    conn = _connection_from_uri(uri, credentials)
    _require(ftp_file_name, "ftp_file_name")
    FTPClient(transfer_config).delete_file(conn, ftp_file_name)


def rename_file(
    uri: str,
    credentials: Credentials,
    ftp_file_name: str,
    new_name: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    conn = _connection_from_uri(uri, credentials)
    _require(ftp_file_name, "ftp_file_name")
    _require(new_name, "new_name")
    FTPClient(transfer_config).rename(conn, ftp_file_name, new_name)


def make_directory(
    uri: str,
    credentials: Credentials,
    directory: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    conn = _connection_from_uri(uri, credentials)
    _require(directory, "directory")
    FTPClient(transfer_config).make_directory(conn, directory)


def remove_directory(
    uri: str,
    credentials: Credentials,
    directory: str,
    transfer_config: TransferConfig | None = None,
) -> None:
    conn = _connection_from_uri(uri, credentials)
    _require(directory, "directory")
    FTPClient(transfer_config).remove_directory(conn, directory)
