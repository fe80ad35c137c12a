"""Pluggable digest implementations.

Built-in plug-ins:
- Cryptographic: MD5, SHA-1, SHA-2, SHA-3 and BLAKE2 via ``cryptography``
- Checksums: Adler-32, CRC-32, FNV-1/FNV-1a (32/64-bit), Jenkins one-at-a-time

Every plug-in implements DigestPlugin and keeps its running state in a
DigestState, so any context can be cloned mid-stream.
"""

from .backend import BackendDigest, backend_digests
from .base import BufferDigest, DigestPlugin, DigestState
from .checksums import checksum_digests

__all__ = [
    "BackendDigest",
    "BufferDigest",
    "DigestPlugin",
    "DigestState",
    "backend_digests",
    "builtin_digests",
    "checksum_digests",
]


def builtin_digests() -> dict[str, DigestPlugin]:
    """All built-in plug-ins keyed by name, cryptographic ones first."""
    plugins: dict[str, DigestPlugin] = {}
    plugins.update(backend_digests())
    plugins.update(checksum_digests())
    return plugins
