__version__ = "0.1.0"

# Public API exports
from .client import TransferClient
from .config import (
    AppConfig,
    ConnectionInfo,
    Credentials,
    LogConfig,
    Protocol,
    TransferConfig,
    load_config,
)
from .credentials import Secret
from .exceptions import (
    InvalidArgumentError,
    LocalIOError,
    RemoteOperationError,
    TransferError,
    UnsupportedOperationError,
)
from .ftp_client import FTPClient
from .remote_client import PathType, RemoteClient
from .sftp_client import SFTPClient

__all__ = [
    "__version__",
    # Configuration
    "AppConfig",
    "ConnectionInfo",
    "Credentials",
    "LogConfig",
    "Protocol",
    "Secret",
    "TransferConfig",
    "load_config",
    # Clients
    "TransferClient",
    "RemoteClient",
    "FTPClient",
    "SFTPClient",
    "PathType",
    # Errors
    "TransferError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "RemoteOperationError",
    "LocalIOError",
]
