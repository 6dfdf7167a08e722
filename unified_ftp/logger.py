import logging
import sys
from pathlib import Path

from .config import LogConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless we are debugging
NOISY_LOGGERS = ("paramiko", "paramiko.transport")


def setup_logging(config: LogConfig) -> None:
    """
    Route unified-ftp's module loggers to the log file and/or stderr.

    Called once by the CLI after load_config. Calling it again replaces the
    handlers from the previous call. Driver loggers report completed transfers at
    INFO, and connections and each FTP/SFTP command at DEBUG.
    paramiko's own loggers stay at WARNING unless config.level is DEBUG,
    so SSH packet traces only show up with --verbose.

    Args:
        config: Level name (unknown names fall back to INFO), optional log file
            path (parent directories are created) and console switch.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if config.file:
        log_path = Path(config.file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)
