"""Cryptographic digests backed by the ``cryptography`` package.

Each plug-in wraps one ``cryptography.hazmat.primitives.hashes``
algorithm. The running ``hashes.Hash`` object is the state's backend;
it is an in-memory object with its own copy(), so contexts built on
these plug-ins can be cloned.

``context_size`` reports the size of the algorithm's internal state
(chaining values, bit counter and partial block buffer).
"""

from typing import Callable

from cryptography.hazmat.primitives import hashes

from .base import DigestPlugin, DigestState


class BackendDigest(DigestPlugin):
    """Digest plug-in delegating to a ``cryptography`` hash algorithm."""

    is_crypto = True

    def __init__(
        self,
        factory: Callable[[], hashes.HashAlgorithm],
        block_size: int,
        context_size: int,
    ):
        self._factory = factory
        self.digest_size = factory().digest_size
        self.block_size = block_size
        self.context_size = context_size

    def init(self, state: DigestState) -> None:
        state.backend = hashes.Hash(self._factory())

    def update(self, state: DigestState, data: bytes | bytearray | memoryview) -> None:
        state.backend.update(data)

    def final(self, state: DigestState) -> bytes:
        backend, state.backend = state.backend, None
        return backend.finalize()

    def copy(self, src: DigestState, dst: DigestState) -> None:
        dst.backend = src.backend.copy()


# name -> (factory, block size, context size), in registration order
BACKEND_DIGESTS: dict[str, tuple[Callable[[], hashes.HashAlgorithm], int, int]] = {
    "md5": (hashes.MD5, 64, 88),
    "sha1": (hashes.SHA1, 64, 92),
    "sha224": (hashes.SHA224, 64, 104),
    "sha256": (hashes.SHA256, 64, 104),
    "sha384": (hashes.SHA384, 128, 208),
    "sha512/224": (hashes.SHA512_224, 128, 208),
    "sha512/256": (hashes.SHA512_256, 128, 208),
    "sha512": (hashes.SHA512, 128, 208),
    "sha3-224": (hashes.SHA3_224, 144, 224),
    "sha3-256": (hashes.SHA3_256, 136, 224),
    "sha3-384": (hashes.SHA3_384, 104, 224),
    "sha3-512": (hashes.SHA3_512, 72, 224),
    "blake2b": (lambda: hashes.BLAKE2b(64), 128, 240),
    "blake2s": (lambda: hashes.BLAKE2s(32), 64, 120),
}


def backend_digests() -> dict[str, BackendDigest]:
    """Instantiate every built-in cryptographic digest."""
    return {
        name: BackendDigest(factory, block_size, context_size)
        for name, (factory, block_size, context_size) in BACKEND_DIGESTS.items()
    }
