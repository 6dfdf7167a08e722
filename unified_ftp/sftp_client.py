"""
SFTP driver using paramiko.

Provides the same interface as FTPClient over SSH/SFTP. Each operation
opens its own SSH connection, changes into the working path, performs one
call and closes the connection again.
"""

import logging
import stat
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path

import paramiko

from .config import DEFAULT_SFTP_PORT, ConnectionInfo, TransferConfig
from .exceptions import RemoteOperationError, UnsupportedOperationError
from .remote_client import PathType, get_local_path_type, read_local_file, write_local_file

logger = logging.getLogger(__name__)

KNOWN_HOSTS_PATH = Path.home() / ".ssh" / "known_hosts"


class TrustOnFirstUsePolicy(paramiko.MissingHostKeyPolicy):
    """
    Trust-on-first-use host key policy (same model as OpenSSH).

    - Unknown host: accept and save key to known_hosts
    - Known host, same key: accept
    - Known host, CHANGED key: reject (possible MITM attack)
    """

    def __init__(self, known_hosts_path: Path = KNOWN_HOSTS_PATH):
        self._known_hosts_path = known_hosts_path

    def missing_host_key(self, client, hostname, key):
        host_keys = client.get_host_keys()
        existing = host_keys.lookup(hostname)

        if existing is not None:
            existing_key = existing.get(key.get_name())
            if existing_key is not None and existing_key != key:
                raise paramiko.SSHException(
                    f"Host key for {hostname} has CHANGED. "
                    f"Remove the old entry from {self._known_hosts_path} "
                    f"if the server key was legitimately changed."
                )

        logger.info("Adding host key for %s to known_hosts", hostname)
        host_keys.add(hostname, key.get_name(), key)

        try:
            self._known_hosts_path.parent.mkdir(parents=True, exist_ok=True)
            host_keys.save(str(self._known_hosts_path))
        except OSError as e:
            logger.warning("Could not save known_hosts: %s", e)


class SFTPClient:
    """
    Session-per-operation SFTP driver.

    Authenticates with username and plaintext password only; names passed to
    each operation are relative to ``conn.path``.
    """

    def __init__(
        self,
        transfer_config: TransferConfig | None = None,
        known_hosts_path: Path = KNOWN_HOSTS_PATH,
    ):
        self.transfer_config = transfer_config or TransferConfig()
        self.known_hosts_path = known_hosts_path

    @contextmanager
    def _session(self, conn: ConnectionInfo):
        """Connect, open SFTP, chdir into the working path; always close both."""
        port = conn.port or DEFAULT_SFTP_PORT
        target = f"{conn.host}:{port}"

        ssh = paramiko.SSHClient()
        sftp = None
        try:
            ssh.load_system_host_keys()
            try:
                ssh.load_host_keys(str(self.known_hosts_path))
            except FileNotFoundError:
                pass
            ssh.set_missing_host_key_policy(TrustOnFirstUsePolicy(self.known_hosts_path))

            logger.debug("Connecting to SSH %s with password", target)
            ssh.connect(
                hostname=conn.host,
                port=port,
                username=conn.username or None,
                password=conn.password,
                timeout=self.transfer_config.timeout_seconds,
                allow_agent=False,
                look_for_keys=False,
            )
            sftp = ssh.open_sftp()
            logger.debug("Connected to SSH server %s", target)
        except paramiko.AuthenticationException as e:
            ssh.close()
            logger.error("SSH authentication failed: %s", e)
            raise RemoteOperationError("authenticate to", target, e) from e
        except (paramiko.SSHException, OSError) as e:
            ssh.close()
            logger.error("SSH connection failed: %s", e)
            raise RemoteOperationError(
                "connect to", target, e, status=getattr(e, "errno", None)
            ) from e

        try:
            if conn.path:
                try:
                    sftp.chdir(conn.path)
                except (OSError, paramiko.SSHException) as e:
                    logger.error("Cannot change into %s: %s", conn.path, e)
                    raise RemoteOperationError(
                        "change directory to", conn.path, e, status=getattr(e, "errno", None)
                    ) from e
            yield sftp
        finally:
            sftp.close()
            ssh.close()

    def _request(self, conn: ConnectionInfo, operation: str, target: str, func):
        """Run ``func(sftp)`` in a fresh session.

        paramiko raises IOError (with the SFTP status mapped to errno) or
        SSHException; both surface as RemoteOperationError.
        """
        logger.debug("SFTP %s: %s", operation, target)

        with self._session(conn) as sftp:
            try:
                return func(sftp)
            except (OSError, paramiko.SSHException) as e:
                logger.error("SFTP %s failed for %s: %s", operation, target, e)
                raise RemoteOperationError(
                    operation, target, e, status=getattr(e, "errno", None)
                ) from e

    def list_directory(self, conn: ConnectionInfo) -> list[str]:
        """List entry names of the working directory, unsorted."""

        def _list(sftp: paramiko.SFTPClient) -> list[str]:
            return [attr.filename for attr in sftp.listdir_attr(".")]

        result = self._request(conn, "list", conn.path or ".", _list)
        logger.debug("Listed %d entries in %s", len(result), conn.path or ".")
        return result

    def get_path_type(self, conn: ConnectionInfo, name: str) -> PathType:
        """Classify a remote name from the directory flag of its attributes."""

        def _stat(sftp: paramiko.SFTPClient) -> PathType:
            attr = sftp.stat(name)
            if attr.st_mode is not None and stat.S_ISDIR(attr.st_mode):
                return PathType.DIRECTORY
            return PathType.FILE

        return self._request(conn, "classify", name, _stat)

    def upload(self, conn: ConnectionInfo, source_path: str, destination_name: str) -> None:
        """Upload a local file into the working path."""
        if get_local_path_type(source_path) is PathType.DIRECTORY:
            raise UnsupportedOperationError(
                f"Unable to upload directory '{source_path}': no recursive transfer"
            )

        data = read_local_file(source_path)
        self._request(
            conn,
            "upload",
            destination_name,
            lambda sftp: sftp.putfo(BytesIO(data), destination_name),
        )
        logger.info("Uploaded %s to %s (%d bytes)", source_path, destination_name, len(data))

    def download(self, conn: ConnectionInfo, source_name: str, destination_full_path: str) -> None:
        """
        Download a remote file.

        The remote source is classified first, in its own session; directories
        are not supported.
        """
        if self.get_path_type(conn, source_name) is PathType.DIRECTORY:
            raise UnsupportedOperationError(
                f"Unable to download directory '{source_name}': no recursive transfer"
            )

        def _retrieve(sftp: paramiko.SFTPClient) -> bytes:
            buffer = BytesIO()
            sftp.getfo(source_name, buffer)
            return buffer.getvalue()

        data = self._request(conn, "download", source_name, _retrieve)
        write_local_file(destination_full_path, data)
        logger.info("Downloaded %s to %s (%d bytes)", source_name, destination_full_path, len(data))

    def delete_file(self, conn: ConnectionInfo, name: str) -> None:
        self._request(conn, "delete", name, lambda sftp: sftp.remove(name))

    def rename(self, conn: ConnectionInfo, name: str, new_name: str) -> None:
        """Rename using bare names relative to the working path."""
        self._request(conn, "rename", name, lambda sftp: sftp.rename(name, new_name))

    def make_directory(self, conn: ConnectionInfo, name: str) -> None:
        self._request(conn, "make directory", name, lambda sftp: sftp.mkdir(name))

    def remove_directory(self, conn: ConnectionInfo, name: str) -> None:
        self._request(conn, "remove directory", name, lambda sftp: sftp.rmdir(name))
