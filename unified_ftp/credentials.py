"""
Opaque credential storage.

A Secret keeps the password in a private mutable buffer so it can be wiped
when the holder is released. Only two read paths exist: the plaintext string
(for protocols that need it, e.g. SSH password auth) and a read-only
memoryview handle (for consumers that accept the protected form).
"""

from __future__ import annotations


class Secret:
    """Immutable holder for a password or passphrase."""

    __slots__ = ("_buffer", "_encoding")

    def __init__(self, value: str | bytes | bytearray | None = "", encoding: str = "utf-8"):
        if value is None:
            value = ""
        if isinstance(value, str):
            data = value.encode(encoding)
        elif isinstance(value, (bytes, bytearray)):
            data = bytes(value)
        else:
            raise TypeError(f"Secret value must be str or bytes, not {type(value).__name__}")
        self._buffer = bytearray(data)
        self._encoding = encoding

    def plaintext(self) -> str:
        """Return the secret as a plain string."""
        return self._buffer.decode(self._encoding)

    def secure(self) -> memoryview:
        """Return a read-only handle over the stored bytes."""
        return memoryview(self._buffer).toreadonly()

    def clear(self) -> None:
        """Zero the backing buffer."""
        buffer = getattr(self, "_buffer", None)
        if buffer is None:
            return
        for i in range(len(buffer)):
            buffer[i] = 0

    def __bool__(self) -> bool:
        return any(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return self._buffer == other._buffer

    __hash__ = None

    def __repr__(self) -> str:
        return "Secret('********')"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("Secret objects cannot be pickled")

    def __copy__(self) -> Secret:
        return self

    def __deepcopy__(self, memo) -> Secret:
        return self

    def __del__(self):
        self.clear()
