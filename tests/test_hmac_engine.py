"""Tests for the HMAC engine."""

import hashlib
import io

import pytest
from cryptography.hazmat.primitives import hashes, hmac as crypto_hmac

from hashengine.core import hmac_engine, secure_memory
from hashengine.core.errors import (
    AlgorithmNotFoundError,
    StreamReadError,
    UnsupportedAlgorithmError,
)
from hashengine.core.hash_engine import MACEngine, MACResult, mac_engine
from hashengine.core.hmac_engine import hmac, hmac_digest, prepare_key
from hashengine.core.digests import DigestState
from hashengine.core.registry import algorithm_registry

REFERENCE_ALGORITHMS = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-512": hashes.SHA3_512,
}


def reference_hmac(name: str, key: bytes, message: bytes) -> bytes:
    h = crypto_hmac.HMAC(key, REFERENCE_ALGORITHMS[name]())
    h.update(message)
    return h.finalize()


class TestKnownVectors:
    """RFC 2202 and RFC 4231 test vectors."""

    def test_rfc2202_sha1_case1(self):
        """HMAC-SHA1 with 20-byte 0x0b key."""
        tag = hmac("sha1", b"\x0b" * 20, b"Hi There")
        assert tag.hex() == "b617318655057264e28bc0b6fb378c8ef146be00"

    def test_rfc2202_sha1_case2(self):
        """HMAC-SHA1 with a short key."""
        tag = hmac("sha1", b"Jefe", b"what do ya want for nothing?")
        assert tag.hex() == "effcdf6ae5eb2fa2d27416d5f184df9c259a7c79"

    def test_rfc2202_md5_case2(self):
        """HMAC-MD5 with a short key."""
        tag = hmac("md5", b"Jefe", b"what do ya want for nothing?")
        assert tag.hex() == "750c783e6ab0b503eaa86e310a5db738"

    def test_rfc4231_sha256_case1(self):
        """HMAC-SHA256 with 20-byte 0x0b key."""
        tag = hmac("sha256", b"\x0b" * 20, b"Hi There")
        assert tag.hex() == "b0344c61d8db38535ca8afceaf0bf12b881dc200c9833da726e9376c2e32cff7"

    def test_rfc4231_sha256_case6_long_key(self):
        """HMAC-SHA256 with a key larger than the block size."""
        tag = hmac(
            "sha256",
            b"\xaa" * 131,
            b"Test Using Larger Than Block-Size Key - Hash Key First",
        )
        assert tag.hex() == "60e431591ee0b67f0d8a26aacbf5b77f8e0bc6213728c5140546040f0ee37f54"


class TestHMACConstruction:
    """Tests for the generic HMAC construction."""

    @pytest.mark.parametrize("name", sorted(REFERENCE_ALGORITHMS))
    @pytest.mark.parametrize("key", [b"", b"k", b"x" * 64, b"y" * 200])
    def test_matches_reference(self, name, key):
        """Generic HMAC equals cryptography's HMAC."""
        message = b"The quick brown fox jumps over the lazy dog"
        assert hmac(name, key, message) == reference_hmac(name, key, message)

    def test_empty_key_accepted_one_shot(self):
        """The one-shot path does not reject an empty key."""
        assert hmac("sha256", b"", b"data") == reference_hmac("sha256", b"", b"data")

    def test_deterministic(self):
        """Same inputs give the same tag."""
        assert hmac("sha256", b"key", b"msg") == hmac("sha256", b"key", b"msg")

    def test_single_bit_flip_changes_tag(self):
        """Flipping any bit of key or message changes the tag."""
        key, message = bytearray(b"key!"), bytearray(b"message")
        base = hmac("sha256", key, message)

        for i in range(len(key) * 8):
            flipped = bytearray(key)
            flipped[i // 8] ^= 1 << (i % 8)
            assert hmac("sha256", flipped, message) != base

        for i in range(len(message) * 8):
            flipped = bytearray(message)
            flipped[i // 8] ^= 1 << (i % 8)
            assert hmac("sha256", key, flipped) != base

    def test_prepare_key_pads_short_key(self):
        """Short keys are zero padded then XORed with ipad."""
        descriptor = algorithm_registry.lookup("sha1")
        out = bytearray(descriptor.block_size)
        prepare_key(descriptor, DigestState(descriptor.context_size), b"\x01\x02", out)

        assert out[:2] == bytes([0x01 ^ 0x36, 0x02 ^ 0x36])
        assert out[2:] == b"\x36" * (descriptor.block_size - 2)

    def test_prepare_key_reduces_long_key(self):
        """Long keys are hashed first."""
        descriptor = algorithm_registry.lookup("sha1")
        key = b"z" * 100
        out = bytearray(descriptor.block_size)
        prepare_key(descriptor, DigestState(descriptor.context_size), key, out)

        reduced = bytes(b ^ 0x36 for b in out[:descriptor.digest_size])
        assert reduced == hashlib.sha1(key).digest()
        assert out[descriptor.digest_size:] == b"\x36" * (descriptor.block_size - descriptor.digest_size)

    def test_custom_registry(self, toy_registry):
        """HMAC works over any registered crypto plug-in."""
        descriptor = toy_registry.lookup("toy")
        tag = hmac("toy", b"key", b"message", registry=toy_registry)

        assert len(tag) == descriptor.digest_size
        assert tag == hmac_digest(descriptor, b"key", b"message")


class TestHMACErrors:
    """Tests for HMAC error handling."""

    def test_unknown_algorithm(self):
        """Unknown algorithms raise NotFound."""
        with pytest.raises(AlgorithmNotFoundError):
            hmac("sha0", b"key", b"data")

    @pytest.mark.parametrize("name", ["crc32b", "adler32", "fnv1a64", "joaat"])
    def test_non_crypto(self, name):
        """Checksums cannot be used for HMAC."""
        with pytest.raises(UnsupportedAlgorithmError, match="Non-cryptographic"):
            mac_engine.mac(b"data", b"key", name)

    def test_pad_keys_wiped_on_stream_failure(self, monkeypatch):
        """A failing message source still leaves pad keys zeroed."""
        wiped = []
        original = secure_memory.secure_zero

        def recording_zero(buffer):
            original(buffer)
            wiped.append(buffer)

        monkeypatch.setattr(secure_memory, "secure_zero", recording_zero)

        def chunks():
            yield b"first chunk"
            raise StreamReadError("disk on fire")

        descriptor = algorithm_registry.lookup("sha256")
        with pytest.raises(StreamReadError):
            hmac_engine.hmac_digest_chunks(descriptor, b"secret", chunks())

        pad_sized = [b for b in wiped if len(b) == descriptor.block_size]
        assert len(pad_sized) >= 2
        assert all(not any(b) for b in wiped)


class TestMACEngine:
    """Tests for the MAC engine facade."""

    def test_mac_result(self):
        """MACResult carries tag and encodings."""
        result = mac_engine.mac(b"Hi There", b"\x0b" * 20, "SHA1")

        assert isinstance(result, MACResult)
        assert result.algorithm == "sha1"
        assert result.length == 160
        assert result.hex == "b617318655057264e28bc0b6fb378c8ef146be00"
        assert result.hex == result.tag.hex()

    def test_verify(self):
        """verify() accepts the right tag, rejects others."""
        tag = mac_engine.mac(b"data", b"key").tag

        assert mac_engine.verify(b"data", b"key", tag)
        assert mac_engine.verify(b"data", b"key", tag.hex())
        assert not mac_engine.verify(b"data", b"other", tag)
        assert not mac_engine.verify(b"data", b"key", tag[:-1])

    def test_mac_file_object(self):
        """File-object HMAC equals in-memory HMAC."""
        data = b"file contents " * 500
        result = mac_engine.mac_file(io.BytesIO(data), b"key", "sha256")

        assert result.tag == mac_engine.mac(data, b"key", "sha256").tag

    def test_mac_file_path(self, tmp_path):
        """Path HMAC equals in-memory HMAC."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00\x01" * 3000)

        result = mac_engine.mac_file(path, b"key", "md5")
        assert result.tag == reference_hmac("md5", b"key", b"\x00\x01" * 3000)

    def test_mac_file_missing(self, tmp_path):
        """Missing files raise StreamReadError."""
        with pytest.raises(StreamReadError):
            mac_engine.mac_file(tmp_path / "absent", b"key")

    def test_algorithms(self):
        """Only crypto-capable names are listed."""
        names = MACEngine().algorithms()
        assert "sha256" in names
        assert "crc32b" not in names
