"""
Shared pytest fixtures for unified-ftp tests.

Besides plain MagicMock transports, this module provides a small in-memory
remote filesystem with fake ftplib.FTP and paramiko sessions on top of it,
so whole operations (upload, list, rename, download) can be exercised
without a server.
"""

import errno
import ftplib
import stat
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from unified_ftp.config import ConnectionInfo, Protocol, TransferConfig
from unified_ftp.ftp_client import uri_to_remote_path


class FakeRemoteStore:
    """In-memory remote tree. ``None`` values are directories.

    Entries keep insertion order, which stands in for the server's
    listing order.
    """

    def __init__(self, password: str | None = None):
        self.entries: dict[str, bytes | None] = {}
        self.password = password
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.connect_calls: list[dict] = []

    @staticmethod
    def _parent(path: str) -> str:
        return path.rsplit("/", 1)[0] if "/" in path else ""

    def is_dir(self, path: str) -> bool:
        return path == "" or (path in self.entries and self.entries[path] is None)

    def is_file(self, path: str) -> bool:
        return self.entries.get(path) is not None

    def children(self, path: str) -> list[str]:
        if not self.is_dir(path):
            raise FileNotFoundError(errno.ENOENT, "No such directory", path)
        prefix = f"{path}/" if path else ""
        return [
            entry[len(prefix) :]
            for entry in self.entries
            if entry.startswith(prefix) and "/" not in entry[len(prefix) :]
        ]

    def read(self, path: str) -> bytes:
        if not self.is_file(path):
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        return self.entries[path]

    def write(self, path: str, data: bytes) -> None:
        if not self.is_dir(self._parent(path)):
            raise FileNotFoundError(errno.ENOENT, "No such directory", path)
        if self.is_dir(path):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        self.entries[path] = data

    def delete(self, path: str) -> None:
        if not self.is_file(path):
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        del self.entries[path]

    def mkdir(self, path: str) -> None:
        if path in self.entries:
            raise FileExistsError(errno.EEXIST, "File exists", path)
        if not self.is_dir(self._parent(path)):
            raise FileNotFoundError(errno.ENOENT, "No such directory", path)
        self.entries[path] = None

    def rmdir(self, path: str) -> None:
        if not self.is_dir(path) or path == "":
            raise FileNotFoundError(errno.ENOENT, "No such directory", path)
        if self.children(path):
            raise OSError(errno.ENOTEMPTY, "Directory not empty", path)
        del self.entries[path]

    def rename(self, old: str, new: str) -> None:
        if old not in self.entries:
            raise FileNotFoundError(errno.ENOENT, "No such file", old)
        if new in self.entries:
            raise FileExistsError(errno.EEXIST, "File exists", new)
        moved = {
            entry: value
            for entry, value in self.entries.items()
            if entry == old or entry.startswith(f"{old}/")
        }
        for entry in moved:
            del self.entries[entry]
        for entry, value in moved.items():
            self.entries[new + entry[len(old) :]] = value


class FakeFTP:
    """Stand-in for ftplib.FTP backed by a FakeRemoteStore.

    Paths are relative to the login directory. RNTO targets given as full
    ftp:// URIs are resolved to their path. NLST of anything but a directory
    is answered with 550.
    """

    def __init__(self, store: FakeRemoteStore):
        self.store = store
        self.encoding = "utf-8"
        self.commands: list[str] = []

    def _call(self, func, *args):
        try:
            return func(*args)
        except OSError as e:
            raise ftplib.error_perm(f"550 {e.strerror}.") from e

    def connect(self, host="", port=0, timeout=None):
        self.store.sessions_opened += 1
        self.store.connect_calls.append({"host": host, "port": port, "timeout": timeout})
        return "220 Fake FTP ready"

    def login(self, user="", passwd=""):
        if self.store.password is not None and passwd != self.store.password:
            raise ftplib.error_perm("530 Login incorrect.")
        return "230 Login successful."

    def set_pasv(self, val):
        pass

    def retrlines(self, cmd, callback=None):
        self.commands.append(cmd)
        path = cmd[len("NLST ") :] if cmd.startswith("NLST ") else ""
        if not self.store.is_dir(path):
            raise ftplib.error_perm("550 No such file or directory.")
        for name in self.store.children(path):
            callback(name)
        return "226 Transfer complete."

    def storbinary(self, cmd, fp, blocksize=8192, callback=None, rest=None):
        self.commands.append(cmd)
        self._call(self.store.write, cmd[len("STOR ") :], fp.read())
        return "226 Transfer complete."

    def retrbinary(self, cmd, callback, blocksize=8192, rest=None):
        self.commands.append(cmd)
        callback(self._call(self.store.read, cmd[len("RETR ") :]))
        return "226 Transfer complete."

    def delete(self, filename):
        self.commands.append(f"DELE {filename}")
        self._call(self.store.delete, filename)
        return "250 File deleted."

    def rename(self, fromname, toname):
        self.commands.append(f"RNFR {fromname}")
        self.commands.append(f"RNTO {toname}")
        if toname.startswith("ftp://"):
            toname = uri_to_remote_path(toname)
        self._call(self.store.rename, fromname, toname)
        return "250 Rename successful."

    def mkd(self, dirname):
        self.commands.append(f"MKD {dirname}")
        self._call(self.store.mkdir, dirname)
        return dirname

    def rmd(self, dirname):
        self.commands.append(f"RMD {dirname}")
        self._call(self.store.rmdir, dirname)
        return "250 Directory removed."

    def quit(self):
        self.store.sessions_closed += 1
        return "221 Goodbye."

    def close(self):
        pass


class FakeSFTP:
    """Stand-in for paramiko.SFTPClient backed by a FakeRemoteStore."""

    def __init__(self, store: FakeRemoteStore):
        self.store = store
        self.cwd = ""

    def _resolve(self, name: str) -> str:
        if name in ("", "."):
            return self.cwd
        return f"{self.cwd}/{name}" if self.cwd else name

    def chdir(self, path=None):
        path = (path or "").strip("/")
        if not self.store.is_dir(path):
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        self.cwd = path

    def listdir_attr(self, path="."):
        result = []
        for name in self.store.children(self._resolve(path)):
            attr = self.stat(name if path in ("", ".") else f"{path}/{name}")
            attr.filename = name
            result.append(attr)
        return result

    def stat(self, path):
        full_path = self._resolve(path)
        attr = paramiko.SFTPAttributes()
        if self.store.is_dir(full_path):
            attr.st_mode = stat.S_IFDIR | 0o755
            attr.st_size = 0
        elif self.store.is_file(full_path):
            attr.st_mode = stat.S_IFREG | 0o644
            attr.st_size = len(self.store.entries[full_path])
        else:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        return attr

    def putfo(self, fl, remotepath, file_size=0, callback=None, confirm=True):
        self.store.write(self._resolve(remotepath), fl.read())
        return self.stat(remotepath)

    def getfo(self, remotepath, fl, callback=None, prefetch=True, max_concurrent_prefetch_requests=None):
        data = self.store.read(self._resolve(remotepath))
        fl.write(data)
        return len(data)

    def remove(self, path):
        self.store.delete(self._resolve(path))

    def rename(self, oldpath, newpath):
        self.store.rename(self._resolve(oldpath), self._resolve(newpath))

    def mkdir(self, path, mode=0o777):
        self.store.mkdir(self._resolve(path))

    def rmdir(self, path):
        self.store.rmdir(self._resolve(path))

    def close(self):
        pass


class FakeSSHClient:
    """Stand-in for paramiko.SSHClient that opens FakeSFTP sessions."""

    def __init__(self, store: FakeRemoteStore):
        self.store = store
        self.policy = None

    def load_system_host_keys(self, filename=None):
        pass

    def load_host_keys(self, filename):
        raise FileNotFoundError(errno.ENOENT, "No such file", filename)

    def set_missing_host_key_policy(self, policy):
        self.policy = policy

    def connect(self, hostname, port=22, username=None, password=None, **kwargs):
        self.store.sessions_opened += 1
        self.store.connect_calls.append(
            {"hostname": hostname, "port": port, "username": username, **kwargs}
        )
        if self.store.password is not None and password != self.store.password:
            raise paramiko.AuthenticationException("Authentication failed.")

    def open_sftp(self):
        return FakeSFTP(self.store)

    def close(self):
        self.store.sessions_closed += 1


@pytest.fixture
def transfer_config() -> TransferConfig:
    """Creates a standard TransferConfig for testing."""
    return TransferConfig(timeout_seconds=5, passive_mode=True, encoding="utf-8")


@pytest.fixture
def ftp_conn() -> ConnectionInfo:
    """FTP descriptor with an explicit port and working path."""
    return ConnectionInfo(
        host="test.ftp.local",
        port=2121,
        username="testuser",
        password="testpass",
        protocol=Protocol.FTP,
        path="incoming",
    )


@pytest.fixture
def sftp_conn() -> ConnectionInfo:
    """SFTP descriptor using the default port."""
    return ConnectionInfo(
        host="test.ssh.local",
        username="testuser",
        password="testpass",
        protocol=Protocol.SFTP,
        path="incoming",
    )


@pytest.fixture
def mock_ftp() -> Generator[MagicMock, None, None]:
    """
    Creates a mocked ftplib.FTP instance.

    Returns:
        Mocked FTP object with common methods stubbed.
    """
    mock = MagicMock(spec=ftplib.FTP)
    mock.encoding = "utf-8"
    mock.login.return_value = "230 Login successful"
    mock.quit.return_value = "221 Goodbye"
    yield mock


@pytest.fixture
def patched_ftp(mock_ftp: MagicMock) -> Generator[MagicMock, None, None]:
    """Patches ftplib.FTP so every session gets ``mock_ftp``."""
    with patch("unified_ftp.ftp_client.ftplib.FTP", return_value=mock_ftp) as MockFTP:
        yield MockFTP


@pytest.fixture
def mock_sftp() -> MagicMock:
    """Creates a mocked paramiko.SFTPClient."""
    return MagicMock(spec=paramiko.SFTPClient)


@pytest.fixture
def mock_ssh_client(mock_sftp: MagicMock) -> MagicMock:
    """Creates a mocked paramiko.SSHClient that opens ``mock_sftp``."""
    mock = MagicMock(spec=paramiko.SSHClient)
    mock.open_sftp.return_value = mock_sftp
    mock.load_host_keys.side_effect = FileNotFoundError("no known_hosts")
    return mock


@pytest.fixture
def patched_ssh(mock_ssh_client: MagicMock) -> Generator[MagicMock, None, None]:
    """Patches paramiko.SSHClient so every session gets ``mock_ssh_client``."""
    with patch(
        "unified_ftp.sftp_client.paramiko.SSHClient", return_value=mock_ssh_client
    ) as MockSSH:
        yield MockSSH


@pytest.fixture
def remote_store() -> FakeRemoteStore:
    """Remote tree with an empty ``incoming`` directory."""
    store = FakeRemoteStore(password="testpass")
    store.mkdir("incoming")
    return store


@pytest.fixture
def fake_servers(remote_store: FakeRemoteStore) -> Generator[FakeRemoteStore, None, None]:
    """Routes both ftplib and paramiko sessions to ``remote_store``."""
    with patch(
        "unified_ftp.ftp_client.ftplib.FTP", side_effect=lambda: FakeFTP(remote_store)
    ), patch(
        "unified_ftp.sftp_client.paramiko.SSHClient",
        side_effect=lambda: FakeSSHClient(remote_store),
    ):
        yield remote_store


@pytest.fixture
def local_file(tmp_path: Path) -> Path:
    """A local ``report.txt`` with binary content."""
    path = tmp_path / "upload" / "report.txt"
    path.parent.mkdir()
    path.write_bytes(b"quarterly numbers\r\n\x00\x01\x02 end\n")
    return path
