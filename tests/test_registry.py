"""Tests for the algorithm registry."""

import pytest

from hashengine.core.digests import builtin_digests
from hashengine.core.errors import (
    AlgorithmNotFoundError,
    RegistrationError,
    UnsupportedAlgorithmError,
)
from hashengine.core.registry import (
    AlgorithmDescriptor,
    AlgorithmRegistry,
    algorithm_registry,
    build_default_registry,
)

from conftest import ToyDigest

CRYPTO = [
    "md5", "sha1", "sha224", "sha256", "sha384", "sha512/224", "sha512/256",
    "sha512", "sha3-224", "sha3-256", "sha3-384", "sha3-512", "blake2b", "blake2s",
]
CHECKSUMS = ["adler32", "crc32b", "fnv132", "fnv1a32", "fnv164", "fnv1a64", "joaat"]


class TestDefaultRegistry:
    """Tests for the built-in registry."""

    def test_is_sealed(self):
        """Default registry is read-only after import."""
        assert algorithm_registry.sealed

    def test_names_in_registration_order(self):
        """All built-ins listed, crypto first."""
        assert algorithm_registry.names() == CRYPTO + CHECKSUMS

    def test_crypto_names(self):
        """Crypto listing excludes checksums."""
        assert algorithm_registry.crypto_names() == CRYPTO

    @pytest.mark.parametrize("name", CRYPTO + CHECKSUMS)
    def test_sizes_positive_and_stable(self, name):
        """Sizes are positive and identical across lookups."""
        first = algorithm_registry.lookup(name)
        second = algorithm_registry.lookup(name)

        assert first is second
        assert first.context_size > 0
        assert first.block_size > 0
        assert first.digest_size > 0

    def test_known_sizes(self):
        """Spot-check block and digest sizes."""
        sha256 = algorithm_registry.lookup("sha256")
        assert (sha256.block_size, sha256.digest_size) == (64, 32)

        sha512 = algorithm_registry.lookup("sha512")
        assert (sha512.block_size, sha512.digest_size) == (128, 64)

        sha3 = algorithm_registry.lookup("sha3-256")
        assert (sha3.block_size, sha3.digest_size) == (136, 32)

        crc = algorithm_registry.lookup("crc32b")
        assert (crc.block_size, crc.digest_size, crc.context_size) == (4, 4, 4)

    def test_lookup_case_insensitive(self):
        """Names are case-folded."""
        assert algorithm_registry.lookup("SHA256") is algorithm_registry.lookup("sha256")
        assert algorithm_registry.lookup("Sha3-512").name == "sha3-512"

    def test_unknown_algorithm(self):
        """Unknown names raise AlgorithmNotFoundError."""
        with pytest.raises(AlgorithmNotFoundError, match="Unknown hashing algorithm: nope"):
            algorithm_registry.lookup("nope")

    def test_not_found_is_lookup_error(self):
        """NotFound can be caught as a LookupError."""
        with pytest.raises(LookupError):
            algorithm_registry.lookup("sha0")

    def test_lookup_crypto_unknown(self):
        """lookup_crypto reports unknown names before capability."""
        with pytest.raises(AlgorithmNotFoundError):
            algorithm_registry.lookup_crypto("nope")

    def test_lookup_crypto_rejects_checksum(self):
        """Checksums are not crypto-capable."""
        with pytest.raises(UnsupportedAlgorithmError, match="Non-cryptographic"):
            algorithm_registry.lookup_crypto("crc32b")

    def test_register_after_seal(self):
        """Sealed registry refuses registration."""
        with pytest.raises(RegistrationError, match="sealed"):
            algorithm_registry.register("toy", ToyDigest())

    def test_build_default_registry_is_independent(self):
        """A rebuilt registry has the same names."""
        registry = build_default_registry()
        assert registry is not algorithm_registry
        assert registry.names() == algorithm_registry.names()
        assert len(registry.names()) == len(builtin_digests())


class TestCustomRegistry:
    """Tests for registering plug-ins."""

    def test_register_and_lookup(self):
        """Registered plug-in is found under its folded name."""
        registry = AlgorithmRegistry()
        descriptor = registry.register("Toy", ToyDigest())

        assert isinstance(descriptor, AlgorithmDescriptor)
        assert descriptor.name == "toy"
        assert registry.lookup("TOY") is descriptor
        assert descriptor.is_crypto

    def test_duplicate_registration(self):
        """Registering the same name twice is an error."""
        registry = AlgorithmRegistry()
        registry.register("toy", ToyDigest())

        with pytest.raises(RegistrationError, match="already registered"):
            registry.register("TOY", ToyDigest())

    @pytest.mark.parametrize("attr", ["context_size", "block_size", "digest_size"])
    @pytest.mark.parametrize("value", [0, -1, None])
    def test_rejects_bad_sizes(self, attr, value):
        """Sizes must be positive integers."""
        plugin = ToyDigest()
        setattr(plugin, attr, value)

        with pytest.raises(RegistrationError, match=attr):
            AlgorithmRegistry().register("bad", plugin)

    def test_descriptor_is_immutable(self):
        """Descriptor sizes cannot be reassigned."""
        descriptor = AlgorithmRegistry().register("toy", ToyDigest())

        with pytest.raises(AttributeError):
            descriptor.block_size = 128

    def test_sizes_captured_at_registration(self):
        """Later plug-in changes do not leak into the descriptor."""
        plugin = ToyDigest()
        descriptor = AlgorithmRegistry().register("toy", plugin)
        plugin.block_size = 999

        assert descriptor.block_size == 8

    def test_lookup_only_api(self, toy_registry):
        """Descriptors are reached through lookup, not container protocols."""
        assert toy_registry.names() == ["toy"]
        assert toy_registry.lookup("TOY").name == "toy"
        assert not hasattr(toy_registry, "get")
        assert not hasattr(toy_registry, "resolve")
