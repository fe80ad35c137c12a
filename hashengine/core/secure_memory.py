"""Secure memory handling utilities.

Provides functions for handling key material and intermediate
cryptographic state in memory:
- Secure zeroization of byte arrays
- Scoped scratch buffers that are zeroed on every exit path
- In-place XOR helpers for HMAC pad keys and PBKDF2 accumulators
- Constant-time equality comparison

Only mutable bytearrays can be wiped. Engine code keeps every buffer
that holds key material or intermediate state in a bytearray and
releases it through one of the context managers below.
"""

import ctypes
from contextlib import contextmanager
from typing import Generator


def secure_zero(data: bytearray) -> None:
    """Securely zero out a bytearray.

    Uses ctypes.memset to overwrite memory, which is less likely
    to be optimized away than element-wise assignment.

    Args:
        data: The bytearray to zero. Must be a mutable bytearray, not bytes.
    """
    if not isinstance(data, bytearray):
        raise TypeError("secure_zero requires a bytearray, not bytes")

    if len(data) == 0:
        return

    buffer_type = ctypes.c_char * len(data)
    buffer = buffer_type.from_buffer(data)
    ctypes.memset(ctypes.addressof(buffer), 0, len(data))


class SecureBytes:
    """A bytearray wrapper that zeros memory on deletion.

    Used for key buffers that outlive a single call, such as the pad
    key stored by an HMAC-mode hash context. The data is zeroed on
    clear(), when exiting the context manager, or on deletion.

    Example:
        with SecureBytes(key_material) as secure_key:
            digest = hmac_round(descriptor, state, secure_key.data, message)
        # Key is zeroed here
    """

    def __init__(self, data: bytes | bytearray):
        """Initialize with sensitive data.

        Args:
            data: The sensitive data to protect. Will be copied to internal buffer.
        """
        self._data = bytearray(data)
        self._cleared = False

    @classmethod
    def zeroed(cls, size: int) -> "SecureBytes":
        """Allocate a zero-filled buffer of the given size."""
        return cls(bytearray(size))

    @property
    def data(self) -> bytearray:
        """Access the underlying data."""
        if self._cleared:
            raise ValueError("SecureBytes has been cleared")
        return self._data

    @property
    def cleared(self) -> bool:
        return self._cleared

    def copy(self) -> "SecureBytes":
        """Independent copy; clearing one never affects the other."""
        return SecureBytes(self.data)

    def __bytes__(self) -> bytes:
        """Convert to bytes (creates a copy - use sparingly)."""
        if self._cleared:
            raise ValueError("SecureBytes has been cleared")
        return bytes(self._data)

    def __len__(self) -> int:
        """Return length of data."""
        return len(self._data)

    def clear(self) -> None:
        """Securely clear the data."""
        if not self._cleared:
            secure_zero(self._data)
            self._cleared = True

    def __enter__(self) -> "SecureBytes":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - clears data."""
        self.clear()

    def __del__(self) -> None:
        """Destructor - clears data."""
        if hasattr(self, "_data"):
            self.clear()


@contextmanager
def scratch_buffer(size: int) -> Generator[bytearray, None, None]:
    """Context manager for a zero-filled scratch buffer.

    The buffer is zeroed when the context exits, whether normally or
    through an exception.

    Args:
        size: Buffer length in bytes

    Yields:
        A bytearray of ``size`` zero bytes
    """
    buffer = bytearray(size)
    try:
        yield buffer
    finally:
        secure_zero(buffer)


def xor_byte(buffer: bytearray, value: int) -> None:
    """XOR every byte of ``buffer`` in place with a single byte value."""
    for i in range(len(buffer)):
        buffer[i] ^= value


def xor_into(target: bytearray, other: bytes | bytearray) -> None:
    """XOR ``other`` into ``target`` in place; both must be the same length."""
    if len(target) != len(other):
        raise ValueError("xor_into requires equal-length buffers")
    for i, b in enumerate(other):
        target[i] ^= b


def constant_time_equals(known: bytes | bytearray, user: bytes | bytearray) -> bool:
    """Compare two byte sequences in time independent of their content.

    A difference in length returns False immediately and so leaks the
    length; hiding lengths is not a goal here. For equal lengths every
    byte is visited and differences are accumulated without branching.

    Args:
        known: The expected value
        user: The value supplied by the caller

    Returns:
        True if equal, False otherwise
    """
    if len(known) != len(user):
        return False

    # Security sensitive: do not optimize this loop.
    result = 0
    for x, y in zip(known, user):
        result |= x ^ y

    return result == 0
