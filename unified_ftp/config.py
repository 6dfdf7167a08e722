import configparser
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .credentials import Secret
from .exceptions import InvalidArgumentError

DEFAULT_FTP_PORT = 21
DEFAULT_SFTP_PORT = 22


class Protocol(Enum):
    """Transfer protocol selector."""

    FTP = "ftp"
    SFTP = "sftp"


class ConnectionInfo:
    """
    Connection descriptor: remote endpoint, credentials and protocol choice.

    Everything except ``path`` is fixed at construction. ``path`` is the remote
    working directory and may be changed between operations.
    """

    def __init__(
        self,
        host: str,
        username: str | None = "",
        password: str | Secret | None = "",
        protocol: Protocol = Protocol.FTP,
        port: int | None = None,
        path: str = "",
    ):
        if not host:
            raise InvalidArgumentError("host")
        if password is None:
            raise InvalidArgumentError("password")

        self._host = host
        self._port = port
        self._username = username or ""
        self._secret = password if isinstance(password, Secret) else Secret(password)
        self._protocol = Protocol(protocol)
        self.path = path or ""

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int | None:
        return self._port

    @property
    def username(self) -> str:
        return self._username

    @property
    def protocol(self) -> Protocol:
        return self._protocol

    @property
    def password(self) -> str:
        """The secret as plaintext."""
        return self._secret.plaintext()

    @property
    def secure_password(self) -> memoryview:
        """The secret as a read-only protected handle."""
        return self._secret.secure()

    def __repr__(self) -> str:
        return (
            f"ConnectionInfo(host={self._host!r}, port={self._port!r}, "
            f"username={self._username!r}, protocol={self._protocol.name}, path={self.path!r})"
        )


@dataclass
class Credentials:
    """Username/password pair for the URI based API."""

    username: str = ""
    password: Secret = field(default_factory=Secret)

    def __post_init__(self):
        if not isinstance(self.password, Secret):
            self.password = Secret(self.password)


@dataclass
class TransferConfig:
    timeout_seconds: int = 30
    passive_mode: bool = True
    encoding: str = "utf-8"


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = "unified-ftp.log"
    console: bool = True


@dataclass
class AppConfig:
    connection: ConnectionInfo
    transfer: TransferConfig
    logging: LogConfig


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_int(section: configparser.SectionProxy, key: str) -> int:
    try:
        return int(section.get(key))
    except ValueError:
        raise ValueError(
            f"Invalid {key} value in config: '{section.get(key)}' - must be an integer"
        )


def load_config(config_path: str | None = None, **cli_args) -> AppConfig:
    """
    Load configuration from an INI file and/or CLI arguments.
    CLI arguments take precedence over config file.

    Args:
        config_path: Path to the INI configuration file.
        **cli_args: Key-value pairs from command line arguments.

    Returns:
        AppConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If host is missing or a value cannot be parsed.
    """
    connection_config = {
        "host": None,
        "port": None,
        "username": "",
        "password": "",
        "path": "",
        "protocol": "ftp",
    }
    transfer_config = {
        "timeout_seconds": 30,
        "passive_mode": True,
        "encoding": "utf-8",
    }
    log_config = {
        "level": "INFO",
        "file": "unified-ftp.log",
        "console": True,
    }

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        if parser.has_section("connection"):
            conn_section = parser["connection"]
            for key in ("host", "username", "password", "path"):
                if conn_section.get(key):
                    connection_config[key] = conn_section.get(key)
            if conn_section.get("port"):
                connection_config["port"] = _parse_int(conn_section, "port")
            if conn_section.get("protocol"):
                connection_config["protocol"] = conn_section.get("protocol").lower()

        if parser.has_section("transfer"):
            transfer_section = parser["transfer"]
            if transfer_section.get("timeout_seconds"):
                transfer_config["timeout_seconds"] = _parse_int(
                    transfer_section, "timeout_seconds"
                )
            if transfer_section.get("passive_mode"):
                transfer_config["passive_mode"] = _parse_bool(transfer_section.get("passive_mode"))
            if transfer_section.get("encoding"):
                transfer_config["encoding"] = transfer_section.get("encoding")

        if parser.has_section("logging"):
            log_section = parser["logging"]
            if log_section.get("level"):
                log_config["level"] = log_section.get("level")
            if log_section.get("file"):
                log_config["file"] = log_section.get("file")
            if log_section.get("console"):
                log_config["console"] = _parse_bool(log_section.get("console"))

    # Override with CLI arguments (cli_args take precedence)
    for key in ("host", "username", "password", "path"):
        if cli_args.get(key) is not None:
            connection_config[key] = cli_args[key]
    if cli_args.get("port") is not None:
        connection_config["port"] = int(cli_args["port"])
    if cli_args.get("protocol") is not None:
        connection_config["protocol"] = cli_args["protocol"].lower()
    if cli_args.get("timeout") is not None:
        transfer_config["timeout_seconds"] = int(cli_args["timeout"])
    if cli_args.get("debug"):
        log_config["level"] = "DEBUG"
        log_config["console"] = True

    if not connection_config["host"]:
        raise ValueError("Missing required configuration fields: host")

    try:
        protocol = Protocol(connection_config["protocol"])
    except ValueError:
        raise ValueError(
            f"Invalid protocol: {connection_config['protocol']}. Must be 'ftp' or 'sftp'."
        )

    return AppConfig(
        connection=ConnectionInfo(
            host=connection_config["host"],
            port=connection_config["port"],
            username=connection_config["username"],
            password=connection_config["password"],
            protocol=protocol,
            path=connection_config["path"],
        ),
        transfer=TransferConfig(
            timeout_seconds=transfer_config["timeout_seconds"],
            passive_mode=transfer_config["passive_mode"],
            encoding=transfer_config["encoding"],
        ),
        logging=LogConfig(
            level=log_config["level"],
            file=log_config["file"],
            console=log_config["console"],
        ),
    )
