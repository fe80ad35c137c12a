"""HMAC Engine.

Generic HMAC (RFC 2104) over any crypto-capable registered algorithm:

    K0    = key, hashed first if longer than the block size, zero padded
    Ki    = K0 XOR 0x36 (ipad)
    Ko    = Ki XOR 0x6A  (0x6A = 0x36 ^ 0x5C, turns ipad into opad)
    HMAC  = H(Ko || H(Ki || message))

Pad keys and the inner digest are held in scratch buffers that are
zeroed on every exit path. The helpers here also back the streaming
HMAC mode of HashContext and the PBKDF2/HKDF derivations.
"""

from contextlib import contextmanager
from typing import Generator, Iterable

from .digests import DigestState
from .registry import AlgorithmDescriptor, AlgorithmRegistry, algorithm_registry
from .secure_memory import scratch_buffer, xor_byte

IPAD = 0x36
OPAD = 0x5C
IPAD_TO_OPAD = IPAD ^ OPAD  # 0x6A


def prepare_key(
    descriptor: AlgorithmDescriptor,
    state: DigestState,
    key: bytes | bytearray,
    out: bytearray,
) -> None:
    """Write the inner pad key for ``key`` into ``out``.

    ``out`` must be a zero-filled buffer of ``block_size`` bytes.
    ``state`` is used as scratch when the key has to be reduced.
    """
    plugin = descriptor.plugin
    if len(key) > descriptor.block_size:
        plugin.init(state)
        plugin.update(state, key)
        reduced = plugin.final(state)
        n = min(len(reduced), descriptor.block_size)
        out[:n] = reduced[:n]
    else:
        out[:len(key)] = key
    xor_byte(out, IPAD)


def hmac_round(
    descriptor: AlgorithmDescriptor,
    state: DigestState,
    pad_key: bytes | bytearray,
    *parts: bytes | bytearray | memoryview,
) -> bytes:
    """One full hash cycle over ``pad_key`` followed by ``parts``."""
    plugin = descriptor.plugin
    plugin.init(state)
    plugin.update(state, pad_key)
    for part in parts:
        plugin.update(state, part)
    return plugin.final(state)


@contextmanager
def hmac_pad_keys(
    descriptor: AlgorithmDescriptor,
    state: DigestState,
    key: bytes | bytearray,
) -> Generator[tuple[bytearray, bytearray], None, None]:
    """Yield ``(inner_pad_key, outer_pad_key)`` for ``key``.

    Both buffers are zeroed when the context exits.
    """
    with scratch_buffer(descriptor.block_size) as inner_key, \
            scratch_buffer(descriptor.block_size) as outer_key:
        prepare_key(descriptor, state, key, inner_key)
        outer_key[:] = inner_key
        xor_byte(outer_key, IPAD_TO_OPAD)
        yield inner_key, outer_key


def hmac_with_pads(
    descriptor: AlgorithmDescriptor,
    state: DigestState,
    inner_key: bytearray,
    outer_key: bytearray,
    out: bytearray,
    *parts: bytes | bytearray | memoryview,
) -> None:
    """Compute HMAC of ``parts`` with precomputed pad keys into ``out``.

    ``out`` may itself appear in ``parts``; it is only overwritten
    after the inner round has consumed it.
    """
    out[:] = hmac_round(descriptor, state, inner_key, *parts)
    out[:] = hmac_round(descriptor, state, outer_key, out)


def hmac_digest_chunks(
    descriptor: AlgorithmDescriptor,
    key: bytes | bytearray,
    chunks: Iterable[bytes | bytearray | memoryview],
) -> bytes:
    """HMAC over a message delivered as an iterable of chunks.

    If the iterable raises, pad keys and algorithm state are still
    wiped before the exception propagates.
    """
    state = DigestState(descriptor.context_size)
    plugin = descriptor.plugin
    try:
        with hmac_pad_keys(descriptor, state, key) as (inner_key, outer_key), \
                scratch_buffer(descriptor.digest_size) as inner:
            plugin.init(state)
            plugin.update(state, inner_key)
            for chunk in chunks:
                plugin.update(state, chunk)
            inner[:] = plugin.final(state)
            return hmac_round(descriptor, state, outer_key, inner)
    finally:
        state.wipe()


def hmac_digest(
    descriptor: AlgorithmDescriptor,
    key: bytes | bytearray,
    message: bytes | bytearray | memoryview,
) -> bytes:
    """One-shot HMAC of ``message``. An empty key is accepted."""
    return hmac_digest_chunks(descriptor, key, (message,))


def hmac(
    algorithm: str,
    key: bytes | bytearray,
    message: bytes | bytearray | memoryview,
    registry: AlgorithmRegistry | None = None,
) -> bytes:
    """Resolve ``algorithm`` and compute a one-shot HMAC.

    Raises:
        AlgorithmNotFoundError: Unknown algorithm
        UnsupportedAlgorithmError: Algorithm is not crypto-capable
    """
    registry = registry or algorithm_registry
    descriptor = registry.lookup_crypto(algorithm)
    return hmac_digest(descriptor, key, message)
