"""Hash and MAC Engine.

One-shot and streaming entry points over the algorithm registry:
- Hashing of byte strings and files with any registered algorithm
- Streaming contexts (plain or HMAC mode) with clone support
- HMAC over any crypto-capable algorithm, for byte strings and files
- Algorithm enumeration and constant-time comparison

Results carry the raw digest together with its lowercase hex and
base64 encodings.
"""

import base64
import os
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from .context import HashContext
from .digests import DigestState
from .hmac_engine import hmac_digest, hmac_digest_chunks
from .registry import AlgorithmDescriptor, AlgorithmRegistry, algorithm_registry
from .secure_memory import constant_time_equals
from .streams import iter_chunks, iter_file_chunks


@dataclass
class HashResult:
    """Result of a hash operation."""
    digest: bytes
    algorithm: str
    length: int  # bits
    hex: str
    base64: str

    @classmethod
    def from_digest(cls, digest: bytes, algorithm: str) -> "HashResult":
        return cls(
            digest=digest,
            algorithm=algorithm,
            length=len(digest) * 8,
            hex=digest.hex(),
            base64=base64.b64encode(digest).decode("ascii"),
        )


@dataclass
class MACResult:
    """Result of a MAC operation."""
    tag: bytes
    algorithm: str
    length: int  # bits
    hex: str
    base64: str

    @classmethod
    def from_tag(cls, tag: bytes, algorithm: str) -> "MACResult":
        return cls(
            tag=tag,
            algorithm=algorithm,
            length=len(tag) * 8,
            hex=tag.hex(),
            base64=base64.b64encode(tag).decode("ascii"),
        )


def _file_chunks(file: BinaryIO | str | os.PathLike) -> Iterable[bytes]:
    if isinstance(file, (str, os.PathLike)):
        return iter_file_chunks(file)
    return iter_chunks(file)


def _hash_chunks(descriptor: AlgorithmDescriptor, chunks: Iterable[bytes]) -> bytes:
    plugin = descriptor.plugin
    state = DigestState(descriptor.context_size)
    try:
        plugin.init(state)
        for chunk in chunks:
            plugin.update(state, chunk)
        return plugin.final(state)
    finally:
        state.wipe()


class HashEngine:
    """Handles hash operations over registered algorithms."""

    def __init__(self, registry: AlgorithmRegistry | None = None):
        self._registry = registry or algorithm_registry

    def hash(self, data: bytes, algorithm: str = "sha256") -> HashResult:
        """Compute hash of data.

        Args:
            data: Data to hash
            algorithm: Registered algorithm name (case-insensitive)

        Returns:
            HashResult with digest

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
        """
        descriptor = self._registry.lookup(algorithm)
        digest = _hash_chunks(descriptor, (data,))
        return HashResult.from_digest(digest, descriptor.name)

    def hash_file(
        self,
        file: BinaryIO | str | os.PathLike,
        algorithm: str = "sha256",
    ) -> HashResult:
        """Compute hash of a file.

        Args:
            file: File path or binary file-like object
            algorithm: Registered algorithm name

        Returns:
            HashResult with digest

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            StreamReadError: The file could not be opened or read
        """
        descriptor = self._registry.lookup(algorithm)
        digest = _hash_chunks(descriptor, _file_chunks(file))
        return HashResult.from_digest(digest, descriptor.name)

    def verify(
        self,
        data: bytes,
        expected_digest: bytes | str,
        algorithm: str = "sha256",
    ) -> bool:
        """Verify a hash.

        Args:
            data: Data to verify
            expected_digest: Expected digest (bytes or hex string)
            algorithm: Registered algorithm name

        Returns:
            True if valid
        """
        if isinstance(expected_digest, str):
            expected_digest = bytes.fromhex(expected_digest)

        result = self.hash(data, algorithm)
        return constant_time_equals(result.digest, expected_digest)

    def init(self, algorithm: str = "sha256", key: bytes | None = None) -> HashContext:
        """Create a streaming context.

        Args:
            algorithm: Registered algorithm name
            key: If given, the context computes an HMAC with this key

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            UnsupportedAlgorithmError: HMAC with a non-crypto algorithm
            InvalidArgumentError: HMAC with an empty key
        """
        descriptor = self._registry.lookup(algorithm)
        if key is None:
            return HashContext.create(descriptor)
        return HashContext.create_hmac(descriptor, key)

    def algorithms(self) -> list[str]:
        """Names of every registered algorithm."""
        return self._registry.names()

    def equals(self, known: bytes, user: bytes) -> bool:
        """Timing-safe comparison of two byte strings."""
        return constant_time_equals(known, user)


class MACEngine:
    """Handles HMAC operations over crypto-capable algorithms."""

    def __init__(self, registry: AlgorithmRegistry | None = None):
        self._registry = registry or algorithm_registry

    def mac(self, data: bytes, key: bytes, algorithm: str = "sha256") -> MACResult:
        """Compute HMAC of data.

        An empty key is accepted here (it is padded to a block of
        zeros), unlike the streaming HMAC context.

        Args:
            data: Data to authenticate
            key: MAC key
            algorithm: Crypto-capable algorithm name

        Returns:
            MACResult with tag

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            UnsupportedAlgorithmError: Non-cryptographic algorithm
        """
        descriptor = self._registry.lookup_crypto(algorithm)
        tag = hmac_digest(descriptor, key, data)
        return MACResult.from_tag(tag, descriptor.name)

    def mac_file(
        self,
        file: BinaryIO | str | os.PathLike,
        key: bytes,
        algorithm: str = "sha256",
    ) -> MACResult:
        """Compute HMAC of a file's contents.

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            UnsupportedAlgorithmError: Non-cryptographic algorithm
            StreamReadError: The file could not be opened or read
        """
        descriptor = self._registry.lookup_crypto(algorithm)
        tag = hmac_digest_chunks(descriptor, key, _file_chunks(file))
        return MACResult.from_tag(tag, descriptor.name)

    def verify(
        self,
        data: bytes,
        key: bytes,
        expected_tag: bytes | str,
        algorithm: str = "sha256",
    ) -> bool:
        """Verify an HMAC tag.

        Args:
            data: Data to verify
            key: MAC key
            expected_tag: Expected tag (bytes or hex string)
            algorithm: Crypto-capable algorithm name

        Returns:
            True if valid
        """
        if isinstance(expected_tag, str):
            expected_tag = bytes.fromhex(expected_tag)

        result = self.mac(data, key, algorithm)
        return constant_time_equals(result.tag, expected_tag)

    def algorithms(self) -> list[str]:
        """Names of algorithms usable for HMAC."""
        return self._registry.crypto_names()


# Singleton instances
hash_engine = HashEngine()
mac_engine = MACEngine()
