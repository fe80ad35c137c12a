"""Streaming hash contexts.

A HashContext drives one registered algorithm incrementally:

    ctx = HashContext.create(algorithm_registry.lookup("sha256"))
    ctx.update(b"part one")
    ctx.update(b"part two")
    digest = ctx.finalize()

Lifecycle: Active -> Finalized (finalize) or Destroyed (destroy).
Both end states are terminal; update, finalize and clone raise
InvalidContextStateError afterwards.

In HMAC mode the state is primed with the inner pad key at creation
and finalize() performs the outer round, then erases the stored key.

A context is not safe for concurrent use. Clone it to hash
diverging suffixes of a shared prefix in parallel.
"""

from enum import Enum

from .digests import DigestState
from .errors import InvalidArgumentError, InvalidContextStateError, UnsupportedAlgorithmError
from .hmac_engine import IPAD_TO_OPAD, prepare_key
from .registry import AlgorithmDescriptor
from .secure_memory import SecureBytes, xor_byte


class ContextState(str, Enum):
    """Lifecycle state of a hash context."""

    ACTIVE = "active"
    FINALIZED = "finalized"
    DESTROYED = "destroyed"


class HashContext:
    """Incremental hash or HMAC computation over one algorithm."""

    def __init__(
        self,
        descriptor: AlgorithmDescriptor,
        state: DigestState,
        key: SecureBytes | None = None,
    ):
        # Use create() / create_hmac(); this only adopts prepared state.
        self._descriptor = descriptor
        self._state = state
        self._key = key
        self._lifecycle = ContextState.ACTIVE

    @classmethod
    def create(cls, descriptor: AlgorithmDescriptor) -> "HashContext":
        """Start a plain hash computation."""
        state = DigestState(descriptor.context_size)
        descriptor.plugin.init(state)
        return cls(descriptor, state)

    @classmethod
    def create_hmac(cls, descriptor: AlgorithmDescriptor, key: bytes | bytearray) -> "HashContext":
        """Start an incremental HMAC computation.

        Unlike the one-shot HMAC, an empty key is rejected here: a
        zero-length key is no key at all.

        Raises:
            UnsupportedAlgorithmError: Algorithm is not crypto-capable
            InvalidArgumentError: Key is empty
        """
        if not descriptor.is_crypto:
            raise UnsupportedAlgorithmError(
                f"HMAC requested with a non-cryptographic hashing algorithm: {descriptor.name}",
                algorithm=descriptor.name,
            )
        if not key:
            raise InvalidArgumentError("HMAC requested without a key")

        state = DigestState(descriptor.context_size)
        pad_key = SecureBytes.zeroed(descriptor.block_size)
        try:
            prepare_key(descriptor, state, key, pad_key.data)
            descriptor.plugin.init(state)
            descriptor.plugin.update(state, pad_key.data)
        except BaseException:
            pad_key.clear()
            state.wipe()
            raise
        return cls(descriptor, state, key=pad_key)

    @property
    def descriptor(self) -> AlgorithmDescriptor:
        return self._descriptor

    @property
    def algorithm(self) -> str:
        return self._descriptor.name

    @property
    def digest_size(self) -> int:
        return self._descriptor.digest_size

    @property
    def is_hmac(self) -> bool:
        return self._key is not None

    @property
    def state(self) -> ContextState:
        return self._lifecycle

    @property
    def active(self) -> bool:
        return self._lifecycle is ContextState.ACTIVE

    def _require_active(self, operation: str) -> None:
        if self._lifecycle is not ContextState.ACTIVE:
            raise InvalidContextStateError(
                f"{operation}(): hash context is {self._lifecycle.value}"
            )

    def update(self, data: bytes | bytearray | memoryview) -> None:
        """Feed more message bytes. Chunk boundaries carry no meaning."""
        self._require_active("update")
        self._descriptor.plugin.update(self._state, data)

    def finalize(self) -> bytes:
        """Return the digest and end the context.

        In HMAC mode this runs the outer round and erases the key.
        """
        self._require_active("finalize")
        plugin = self._descriptor.plugin
        try:
            digest = plugin.final(self._state)
            if self._key is not None:
                key = self._key.data
                xor_byte(key, IPAD_TO_OPAD)
                plugin.init(self._state)
                plugin.update(self._state, key)
                plugin.update(self._state, digest)
                digest = plugin.final(self._state)
        finally:
            self._release()
            self._lifecycle = ContextState.FINALIZED
        return digest

    def clone(self) -> "HashContext":
        """Independent copy of an active context, key included."""
        if self._lifecycle is not ContextState.ACTIVE:
            raise InvalidContextStateError("Cannot copy hash")
        plugin = self._descriptor.plugin
        state = DigestState(self._descriptor.context_size)
        plugin.init(state)
        plugin.copy(self._state, state)
        key = self._key.copy() if self._key is not None else None
        return HashContext(self._descriptor, state, key=key)

    def destroy(self) -> None:
        """Release the context without producing a digest.

        An active context is finalized internally (result discarded)
        so the plug-in can release anything it holds; then the key
        and state are zeroed. Destroying a finalized or destroyed
        context is a no-op.
        """
        if self._lifecycle is not ContextState.ACTIVE:
            return
        try:
            self._descriptor.plugin.final(self._state)
        finally:
            self._release()
            self._lifecycle = ContextState.DESTROYED

    def _release(self) -> None:
        if self._key is not None:
            self._key.clear()
        self._state.wipe()

    def __enter__(self) -> "HashContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._lifecycle is ContextState.ACTIVE:
            self.destroy()

    def __del__(self) -> None:
        if getattr(self, "_lifecycle", None) is ContextState.ACTIVE:
            self.destroy()

    def __repr__(self) -> str:
        mode = "hmac" if self.is_hmac else "hash"
        return f"<HashContext {self.algorithm} {mode} {self._lifecycle.value}>"
