"""
FTP driver built on ftplib.

Every operation is a single request: open a session, log in, issue one
command against a target derived from the request URI, and quit. Nothing is
kept between calls.
"""

import ftplib
import logging
import posixpath
from collections.abc import Iterable
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from urllib.parse import quote, unquote, urlsplit

from .config import DEFAULT_FTP_PORT, ConnectionInfo, TransferConfig
from .exceptions import InvalidArgumentError, RemoteOperationError, UnsupportedOperationError
from .remote_client import PathType, get_local_path_type, read_local_file, write_local_file

logger = logging.getLogger(__name__)

FTP_SCHEME = "ftp"

# Classification of a failed NLST probe, keyed by reply code.
# A successful probe means DIRECTORY; codes not listed here also mean
# DIRECTORY. Servers that answer a missing or plain file with a different
# code are misclassified.
PROBE_FAILURE_PATH_TYPES = {
    "550": PathType.FILE,  # requested action not taken, file unavailable
}
PROBE_FAILURE_DEFAULT = PathType.DIRECTORY


def build_base_uri(conn: ConnectionInfo) -> str:
    """Build ``ftp://host[:port]/path`` for the working path.

    The port is only written when it is set and non-zero; otherwise the
    scheme default (21) is implied.
    """
    netloc = conn.host
    if conn.port:
        netloc = f"{netloc}:{conn.port}"
    path = conn.path.replace("\\", "/").strip("/")
    return f"{FTP_SCHEME}://{netloc}/{quote(path)}"


def build_uri(conn: ConnectionInfo, name: str | None = None) -> str:
    """Build the request URI for ``name`` inside the working path.

    Only the base name of ``name`` is used; trailing separators are ignored.

    Raises:
        InvalidArgumentError: If ``name`` has no base name, e.g. ``"/"``.
    """
    base = build_base_uri(conn)
    if not name:
        return base
    file_name = posixpath.basename(name.replace("\\", "/").rstrip("/"))
    if not file_name:
        raise InvalidArgumentError("name")
    return f"{base.rstrip('/')}/{quote(file_name)}"


def uri_to_remote_path(uri: str) -> str:
    """Decode the URI path into a name relative to the login directory."""
    return unquote(urlsplit(uri).path).lstrip("/")


def read_listing(lines: Iterable[str]) -> list[str]:
    """Collect listing lines up to and including the first empty line.

    End of stream reads as that empty line, so the result always ends
    with ``""``. Entries after a blank line are dropped.
    """
    result = []
    for line in lines:
        result.append(line)
        if not line:
            return result
    result.append("")
    return result


def _reply_code(error: Exception) -> str | None:
    """Extract the three digit reply code from an ftplib error."""
    if isinstance(error, ftplib.Error):
        code = str(error)[:3]
        if code.isdigit():
            return code
    return None


class FTPClient:
    """
    Request-per-operation FTP driver.

    Targets are addressed by request URIs built from the connection
    descriptor (see build_uri); ftplib receives the decoded URI path.
    """

    def __init__(self, transfer_config: TransferConfig | None = None):
        self.transfer_config = transfer_config or TransferConfig()

    @contextmanager
    def _session(self, conn: ConnectionInfo):
        """Open, authenticate and always close one FTP session."""
        port = conn.port or DEFAULT_FTP_PORT
        ftp = ftplib.FTP()
        ftp.encoding = self.transfer_config.encoding

        try:
            logger.debug("Connecting to FTP server %s:%d", conn.host, port)
            ftp.connect(host=conn.host, port=port, timeout=self.transfer_config.timeout_seconds)

            # Login - anonymous if no username
            if conn.username:
                logger.debug("Logging in as user: %s", conn.username)
                ftp.login(user=conn.username, passwd=conn.password)
            else:
                logger.debug("Logging in anonymously")
                ftp.login()

            ftp.set_pasv(self.transfer_config.passive_mode)
        except ftplib.all_errors as e:
            ftp.close()
            logger.error("FTP connection to %s:%d failed: %s", conn.host, port, e)
            raise RemoteOperationError(
                "connect to", f"{conn.host}:{port}", e, status=_reply_code(e)
            ) from e

        try:
            yield ftp
        finally:
            try:
                ftp.quit()
            except ftplib.all_errors as e:
                logger.debug("FTP quit failed, forcing close: %s", e)
                ftp.close()

    def _request(self, conn: ConnectionInfo, operation: str, uri: str, func):
        """Run ``func(ftp, remote_path)`` in a fresh session.

        ftplib failures are raised as RemoteOperationError carrying the
        reply code.
        """
        remote_path = uri_to_remote_path(uri)
        logger.debug("FTP %s: %s", operation, uri)

        with self._session(conn) as ftp:
            try:
                return func(ftp, remote_path)
            except ftplib.all_errors as e:
                logger.error("FTP %s failed for %s: %s", operation, uri, e)
                raise RemoteOperationError(operation, uri, e, status=_reply_code(e)) from e

    def list_directory(self, conn: ConnectionInfo) -> list[str]:
        """
        List entry names of the working directory.

        Returns:
            list[str]: Names in server order, terminated by an empty entry.
        """
        uri = build_base_uri(conn)

        def _list(ftp: ftplib.FTP, remote_path: str) -> list[str]:
            lines: list[str] = []
            ftp.retrlines(f"NLST {remote_path}" if remote_path else "NLST", lines.append)
            return read_listing(lines)

        result = self._request(conn, "list", uri, _list)
        logger.debug("Listed %d entries in %s", len(result), uri)
        return result

    def get_path_type(self, conn: ConnectionInfo, name: str) -> PathType:
        """
        Classify a remote name by probing it with NLST.

        A successful listing means DIRECTORY. A rejected one is looked up in
        PROBE_FAILURE_PATH_TYPES by reply code. This is a heuristic: a server
        that lists plain files successfully will report them as directories.
        """
        uri = build_uri(conn, name)

        def _probe(ftp: ftplib.FTP, remote_path: str) -> PathType:
            try:
                ftp.retrlines(f"NLST {remote_path}", lambda line: None)
            except ftplib.Error as e:
                path_type = PROBE_FAILURE_PATH_TYPES.get(_reply_code(e), PROBE_FAILURE_DEFAULT)
                logger.debug("NLST probe of %s rejected (%s): %s", uri, e, path_type.value)
                return path_type
            return PathType.DIRECTORY

        return self._request(conn, "classify", uri, _probe)

    def upload(self, conn: ConnectionInfo, source_path: str, destination_name: str) -> None:
        """
        Upload a local file with STOR.

        Args:
            conn: Connection descriptor.
            source_path: Local file to send.
            destination_name: Remote name inside the working path.
        """
        if get_local_path_type(source_path) is PathType.DIRECTORY:
            raise UnsupportedOperationError(
                f"Unable to upload directory '{source_path}': no recursive transfer"
            )

        data = read_local_file(source_path)
        uri = build_uri(conn, destination_name)

        def _store(ftp: ftplib.FTP, remote_path: str) -> None:
            ftp.storbinary(f"STOR {remote_path}", BytesIO(data))

        self._request(conn, "upload", uri, _store)
        logger.info("Uploaded %s to %s (%d bytes)", source_path, uri, len(data))

    def download(self, conn: ConnectionInfo, source_name: str, destination_full_path: str) -> None:
        """
        Download a remote file with RETR.

        The destination is classified locally first: an existing local
        directory means a directory transfer, which is not supported.
        """
        if Path(destination_full_path).is_dir():
            raise UnsupportedOperationError(
                f"Unable to download into directory '{destination_full_path}': "
                "no recursive transfer"
            )

        uri = build_uri(conn, source_name)

        def _retrieve(ftp: ftplib.FTP, remote_path: str) -> bytes:
            buffer = BytesIO()
            ftp.retrbinary(f"RETR {remote_path}", buffer.write)
            return buffer.getvalue()

        data = self._request(conn, "download", uri, _retrieve)
        write_local_file(destination_full_path, data)
        logger.info("Downloaded %s to %s (%d bytes)", uri, destination_full_path, len(data))

    def delete_file(self, conn: ConnectionInfo, name: str) -> None:
        """Delete a file with DELE."""
        self._request(conn, "delete", build_uri(conn, name), lambda ftp, path: ftp.delete(path))

    def rename(self, conn: ConnectionInfo, name: str, new_name: str) -> None:
        """Rename with RNFR/RNTO.

        The RNTO target is the full request URI of ``new_name``, not a bare
        name.
        """
        rename_target = build_uri(conn, new_name)
        logger.debug("Rename target: %s", rename_target)
        self._request(
            conn,
            "rename",
            build_uri(conn, name),
            lambda ftp, path: ftp.rename(path, rename_target),
        )

    def make_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Create a directory with MKD."""
        self._request(conn, "make directory", build_uri(conn, name), lambda ftp, path: ftp.mkd(path))

    def remove_directory(self, conn: ConnectionInfo, name: str) -> None:
        """Remove a directory with RMD."""
        self._request(
            conn, "remove directory", build_uri(conn, name), lambda ftp, path: ftp.rmd(path)
        )
