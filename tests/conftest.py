"""Test configuration and fixtures."""

import zlib

import pytest

from hashengine.config import get_settings
from hashengine.core.digests import BufferDigest, DigestState
from hashengine.core.registry import AlgorithmRegistry


class ToyDigest(BufferDigest):
    """Tiny crypto-flagged digest used to exercise custom registries."""

    context_size = 4
    block_size = 8
    digest_size = 4
    is_crypto = True

    def init(self, state: DigestState) -> None:
        state.buffer[:] = b"\x00\x00\x00\x00"

    def update(self, state: DigestState, data) -> None:
        value = zlib.crc32(data, int.from_bytes(state.buffer, "big"))
        state.buffer[:] = value.to_bytes(4, "big")

    def final(self, state: DigestState) -> bytes:
        return bytes(state.buffer)


class ExplodingDigest(ToyDigest):
    """Crypto-flagged digest whose update fails after a number of calls."""

    def __init__(self, fail_after: int):
        self.fail_after = fail_after
        self.calls = 0

    def update(self, state: DigestState, data) -> None:
        self.calls += 1
        if self.calls > self.fail_after:
            raise RuntimeError("digest exploded")
        super().update(state, data)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Isolate tests from the caller's HASHENGINE_* environment."""
    for name in (
        "HASHENGINE_ENVIRONMENT",
        "HASHENGINE_LOG_LEVEL",
        "HASHENGINE_LOG_JSON",
        "HASHENGINE_STREAM_CHUNK_SIZE",
        "HASHENGINE_DEFAULT_ALGORITHM",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def toy_registry():
    """A sealed registry holding only the toy digest."""
    registry = AlgorithmRegistry()
    registry.register("toy", ToyDigest())
    registry.seal()
    return registry
