"""Exception hierarchy for unified-ftp.

Every error raised by the transfer layer derives from ``TransferError`` and
also from the closest built-in exception, so callers that only know about
``ValueError`` or ``OSError`` keep working.
"""


class TransferError(Exception):
    """Base exception for all transfer errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class InvalidArgumentError(TransferError, ValueError):
    """A required argument was missing or empty."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"Argument '{argument}' is required")


class UnsupportedOperationError(TransferError, NotImplementedError):
    """The requested operation is not available (directory transfers)."""


class RemoteOperationError(TransferError, OSError):
    """The protocol call against the remote server failed.

    ``status`` holds the FTP reply code or the SFTP errno when one is known.
    """

    def __init__(
        self,
        operation: str,
        target: str,
        original_error: Exception | None = None,
        status: str | int | None = None,
    ):
        self.operation = operation
        self.target = target
        self.status = status
        TransferError.__init__(self, f"Failed to {operation} '{target}'", original_error)


class LocalIOError(TransferError, OSError):
    """A local file could not be opened, read or written."""

    def __init__(self, path: str, operation: str, original_error: OSError | None = None):
        self.path = path
        self.operation = operation
        TransferError.__init__(self, f"Cannot {operation} local path '{path}'", original_error)
        self.errno = getattr(original_error, "errno", None)
        self.strerror = getattr(original_error, "strerror", None)
        self.filename = path
