"""Base digest plug-in interface.

All digest implementations must implement this interface so the
engine can drive any algorithm through the same four operations:
init, update, final and copy.

Plug-in state is always a DigestState allocated by the engine. A
plug-in keeps its running state either in the state's byte buffer or
in a single in-memory backend object that supports copy(). File
handles, sockets and other external resources are never stored in a
state, which is what makes cloning a live context safe.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from ..secure_memory import secure_zero


class CopyableBackend(Protocol):
    """In-memory hashing object a plug-in may keep in its state."""

    def update(self, data: bytes) -> None: ...

    def copy(self) -> "CopyableBackend": ...


class DigestState:
    """Opaque per-context algorithm state.

    Attributes:
        buffer: ``context_size`` bytes owned exclusively by one context
        backend: optional copyable hashing object, or None
    """

    __slots__ = ("buffer", "backend")

    def __init__(self, size: int):
        self.buffer = bytearray(size)
        self.backend: CopyableBackend | None = None

    def wipe(self) -> None:
        """Zero the buffer and drop any backend object."""
        secure_zero(self.buffer)
        self.backend = None


class DigestPlugin(ABC):
    """Capability interface every pluggable digest satisfies.

    Size attributes are read once when the plug-in is registered and
    must be positive integers.
    """

    context_size: int
    block_size: int
    digest_size: int
    is_crypto: bool = False

    @abstractmethod
    def init(self, state: DigestState) -> None:
        """Reset ``state`` to the algorithm's initial value."""
        pass

    @abstractmethod
    def update(self, state: DigestState, data: bytes | bytearray | memoryview) -> None:
        """Absorb ``data`` into ``state``."""
        pass

    @abstractmethod
    def final(self, state: DigestState) -> bytes:
        """Complete the computation and return ``digest_size`` bytes."""
        pass

    @abstractmethod
    def copy(self, src: DigestState, dst: DigestState) -> None:
        """Copy the running state of ``src`` into ``dst``."""
        pass


class BufferDigest(DigestPlugin):
    """Plug-in whose whole running state lives in the byte buffer.

    Subclasses implement init/update/final against ``state.buffer``;
    copying is a plain byte copy.
    """

    def copy(self, src: DigestState, dst: DigestState) -> None:
        dst.buffer[:] = src.buffer
