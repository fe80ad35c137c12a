"""Non-cryptographic checksum digests.

These plug-ins keep their entire running value in the state buffer as
a big-endian integer and emit it big-endian. They are registered
without the crypto flag, so HMAC and the key derivation functions
refuse them.
"""

import zlib

from .base import BufferDigest, DigestState

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF


class _IntegerStateDigest(BufferDigest):
    """Checksum whose state is a single unsigned integer."""

    initial: int = 0

    def __init__(self):
        self.context_size = self.digest_size

    def _load(self, state: DigestState) -> int:
        return int.from_bytes(state.buffer, "big")

    def _store(self, state: DigestState, value: int) -> None:
        state.buffer[:] = value.to_bytes(self.digest_size, "big")

    def init(self, state: DigestState) -> None:
        self._store(state, self.initial)

    def final(self, state: DigestState) -> bytes:
        return bytes(state.buffer)


class Crc32bDigest(_IntegerStateDigest):
    """ITU-T V.42 CRC-32, as used by zlib, gzip and PNG."""

    block_size = 4
    digest_size = 4

    def update(self, state: DigestState, data) -> None:
        self._store(state, zlib.crc32(data, self._load(state)))


class Adler32Digest(_IntegerStateDigest):
    """Adler-32 checksum (RFC 1950)."""

    block_size = 4
    digest_size = 4
    initial = 1

    def update(self, state: DigestState, data) -> None:
        self._store(state, zlib.adler32(data, self._load(state)))


class FNVDigest(_IntegerStateDigest):
    """Fowler-Noll-Vo hash, FNV-1 or FNV-1a variant."""

    def __init__(self, bits: int, alternate: bool):
        if bits == 32:
            self.initial, self._prime, self._mask = 0x811C9DC5, 0x01000193, MASK32
        else:
            self.initial, self._prime, self._mask = 0xCBF29CE484222325, 0x100000001B3, MASK64
        self.digest_size = bits // 8
        self.block_size = bits // 8
        self._alternate = alternate
        super().__init__()

    def update(self, state: DigestState, data) -> None:
        value = self._load(state)
        prime, mask = self._prime, self._mask
        if self._alternate:
            for b in bytes(data):
                value = ((value ^ b) * prime) & mask
        else:
            for b in bytes(data):
                value = ((value * prime) & mask) ^ b
        self._store(state, value)


class JoaatDigest(_IntegerStateDigest):
    """Bob Jenkins' one-at-a-time hash."""

    block_size = 4
    digest_size = 4

    def update(self, state: DigestState, data) -> None:
        value = self._load(state)
        for b in bytes(data):
            value = (value + b) & MASK32
            value = (value + (value << 10)) & MASK32
            value ^= value >> 6
        self._store(state, value)

    def final(self, state: DigestState) -> bytes:
        value = self._load(state)
        value = (value + (value << 3)) & MASK32
        value ^= value >> 11
        value = (value + (value << 15)) & MASK32
        return value.to_bytes(4, "big")


def checksum_digests() -> dict[str, BufferDigest]:
    """Instantiate every built-in checksum, in registration order."""
    return {
        "adler32": Adler32Digest(),
        "crc32b": Crc32bDigest(),
        "fnv132": FNVDigest(32, alternate=False),
        "fnv1a32": FNVDigest(32, alternate=True),
        "fnv164": FNVDigest(64, alternate=False),
        "fnv1a64": FNVDigest(64, alternate=True),
        "joaat": JoaatDigest(),
    }
