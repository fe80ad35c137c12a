"""Key Derivation Function Engine.

Provides key derivation over any crypto-capable registered algorithm,
built on the generic HMAC construction:
- PBKDF2: Password-Based KDF (RFC 8018 / RFC 2898)
- HKDF: HMAC-based Extract-and-Expand KDF (RFC 5869)

Every scratch buffer (pad keys, U/T accumulators, salt plus counter,
PRK, expand blocks) is zeroed before the call returns, whether it
returns a value or raises.

Usage:
    engine = KDFEngine()

    result = engine.derive_pbkdf2(
        password=b"correct horse",
        salt=salt,
        iterations=600_000,
        length=32,
        algorithm="sha256",
    )

    result = engine.derive_hkdf(
        input_key_material=master_key,
        length=32,
        info=b"encryption-key",
        salt=salt,
        algorithm="sha256",
    )
"""

from dataclasses import dataclass

from .digests import DigestState
from .errors import InvalidArgumentError
from .hmac_engine import hmac_pad_keys, hmac_with_pads
from .logging import log_operation
from .registry import AlgorithmDescriptor, AlgorithmRegistry, algorithm_registry
from .secure_memory import scratch_buffer, secure_zero, xor_into

# Salt plus the 4-byte block counter must fit a signed 32-bit length.
MAX_SALT_LENGTH = 2**31 - 1 - 4

# HKDF output is limited to 255 blocks (single-byte counter).
HKDF_MAX_BLOCKS = 255


@dataclass
class DeriveResult:
    """Result of a key derivation operation."""

    derived_key: bytes
    algorithm: str
    key_length: int
    info_used: bytes | None = None
    salt_used: bytes | None = None
    iterations: int | None = None

    @property
    def hex(self) -> str:
        return self.derived_key.hex()


class InvalidKeyMaterialError(InvalidArgumentError):
    """Invalid input key material."""
    pass


class KDFEngine:
    """PBKDF2 and HKDF over the algorithm registry.

    Output length 0 means "one digest-size block" for both functions.
    For PBKDF2 this is an engine default rather than RFC behaviour.
    """

    def __init__(self, registry: AlgorithmRegistry | None = None):
        self._registry = registry or algorithm_registry

    # =========================================================================
    # PBKDF2
    # =========================================================================

    def _check_pbkdf2(
        self,
        algorithm: str,
        salt: bytes,
        iterations: int,
        length: int,
    ) -> AlgorithmDescriptor:
        descriptor = self._registry.lookup_crypto(algorithm)

        if iterations <= 0:
            raise InvalidArgumentError(f"Iterations must be a positive integer: {iterations}")

        if length < 0:
            raise InvalidArgumentError(f"Length must be greater than or equal to 0: {length}")

        if len(salt) > MAX_SALT_LENGTH:
            raise InvalidArgumentError(
                f"Supplied salt is too long, max of INT_MAX - 4 bytes: {len(salt)} supplied"
            )

        return descriptor

    @log_operation("pbkdf2")
    def derive_pbkdf2(
        self,
        password: bytes,
        salt: bytes,
        iterations: int,
        length: int = 0,
        algorithm: str = "sha256",
    ) -> DeriveResult:
        """Derive a key from a password using PBKDF2.

        Args:
            password: The password (any length, may be empty)
            salt: Salt bytes
            iterations: Number of HMAC iterations (positive)
            length: Output length in bytes; 0 means digest_size
            algorithm: Crypto-capable hash algorithm name

        Returns:
            DeriveResult with the derived key

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            UnsupportedAlgorithmError: Non-cryptographic algorithm
            InvalidArgumentError: Bad iteration count, length or salt
        """
        descriptor = self._check_pbkdf2(algorithm, salt, iterations, length)
        if length == 0:
            length = descriptor.digest_size

        derived = self._pbkdf2(descriptor, password, salt, iterations, length)

        return DeriveResult(
            derived_key=derived,
            algorithm=descriptor.name,
            key_length=length,
            salt_used=salt,
            iterations=iterations,
        )

    @log_operation("pbkdf2")
    def pbkdf2_hex(
        self,
        password: bytes,
        salt: bytes,
        iterations: int,
        length: int = 0,
        algorithm: str = "sha256",
    ) -> str:
        """PBKDF2 with lowercase hex output, where ``length`` counts hex digits.

        Length 0 yields ``2 * digest_size`` digits. An odd length derives
        ``ceil(length / 2)`` bytes and drops the final digit.
        """
        descriptor = self._check_pbkdf2(algorithm, salt, iterations, length)
        if length == 0:
            length = descriptor.digest_size * 2

        derived = self._pbkdf2(descriptor, password, salt, iterations, (length + 1) // 2)
        return derived.hex()[:length]

    def _pbkdf2(
        self,
        descriptor: AlgorithmDescriptor,
        password: bytes,
        salt: bytes,
        iterations: int,
        length: int,
    ) -> bytes:
        digest_size = descriptor.digest_size
        blocks = (length + digest_size - 1) // digest_size
        salt_len = len(salt)

        state = DigestState(descriptor.context_size)
        result = bytearray(blocks * digest_size)
        try:
            with hmac_pad_keys(descriptor, state, password) as (inner_key, outer_key), \
                    scratch_buffer(salt_len + 4) as salted, \
                    scratch_buffer(digest_size) as u, \
                    scratch_buffer(digest_size) as t:
                salted[:salt_len] = salt

                for i in range(1, blocks + 1):
                    # U1 = HMAC(password, salt || BE32(i))
                    salted[salt_len:] = i.to_bytes(4, "big")
                    hmac_with_pads(descriptor, state, inner_key, outer_key, u, salted)
                    t[:] = u

                    # Uj = HMAC(password, Uj-1); T ^= Uj
                    for _ in range(1, iterations):
                        hmac_with_pads(descriptor, state, inner_key, outer_key, u, u)
                        xor_into(t, u)

                    offset = (i - 1) * digest_size
                    result[offset:offset + digest_size] = t

                return bytes(result[:length])
        finally:
            secure_zero(result)
            state.wipe()

    # =========================================================================
    # HKDF
    # =========================================================================

    def _check_hkdf_length(self, descriptor: AlgorithmDescriptor, length: int) -> int:
        limit = descriptor.digest_size * HKDF_MAX_BLOCKS
        if length < 0:
            raise InvalidArgumentError(f"Length must be greater than or equal to 0: {length}")
        if length == 0:
            return descriptor.digest_size
        if length > limit:
            raise InvalidArgumentError(f"Length must be less than or equal to {limit}: {length}")
        return length

    @log_operation("hkdf")
    def derive_hkdf(
        self,
        input_key_material: bytes,
        length: int = 0,
        info: bytes = b"",
        salt: bytes | None = None,
        algorithm: str = "sha256",
    ) -> DeriveResult:
        """Derive a key using HKDF (RFC 5869).

        HKDF consists of two steps:
        1. Extract: PRK = HMAC(salt, ikm); a missing salt is the empty
           string and is still run through HMAC
        2. Expand: T(i) = HMAC(PRK, T(i-1) || info || i), concatenated
           and truncated to ``length``

        Args:
            input_key_material: The source key material (non-empty)
            length: Output length in bytes; 0 means digest_size, at most
                255 * digest_size
            info: Application-specific context info
            salt: Optional salt
            algorithm: Crypto-capable hash algorithm name

        Returns:
            DeriveResult with derived key

        Raises:
            AlgorithmNotFoundError: Unknown algorithm
            UnsupportedAlgorithmError: Non-cryptographic algorithm
            InvalidKeyMaterialError: Empty input key material
            InvalidArgumentError: Length out of range
        """
        descriptor = self._registry.lookup_crypto(algorithm)

        if not input_key_material:
            raise InvalidKeyMaterialError("Input keying material cannot be empty")

        length = self._check_hkdf_length(descriptor, length)
        salt = salt or b""
        info = info or b""

        with scratch_buffer(descriptor.digest_size) as prk:
            self._extract(descriptor, salt, input_key_material, prk)
            derived = self._expand(descriptor, prk, info, length)

        return DeriveResult(
            derived_key=derived,
            algorithm=descriptor.name,
            key_length=length,
            info_used=info,
            salt_used=salt,
        )

    def hkdf_extract(
        self,
        input_key_material: bytes,
        salt: bytes | None = None,
        algorithm: str = "sha256",
    ) -> bytes:
        """Perform only the extract step of HKDF and return the PRK."""
        descriptor = self._registry.lookup_crypto(algorithm)

        if not input_key_material:
            raise InvalidKeyMaterialError("Input keying material cannot be empty")

        with scratch_buffer(descriptor.digest_size) as prk:
            self._extract(descriptor, salt or b"", input_key_material, prk)
            return bytes(prk)

    def hkdf_expand(
        self,
        prk: bytes,
        length: int = 0,
        info: bytes = b"",
        algorithm: str = "sha256",
    ) -> DeriveResult:
        """Perform only the expand step of HKDF.

        Use when you already have a pseudorandom key (PRK) from
        a previous extract step or secure random generation.
        """
        descriptor = self._registry.lookup_crypto(algorithm)

        if not prk:
            raise InvalidKeyMaterialError("PRK cannot be empty")

        length = self._check_hkdf_length(descriptor, length)
        derived = self._expand(descriptor, prk, info or b"", length)

        return DeriveResult(
            derived_key=derived,
            algorithm=descriptor.name,
            key_length=length,
            info_used=info,
        )

    def _extract(
        self,
        descriptor: AlgorithmDescriptor,
        salt: bytes,
        input_key_material: bytes,
        prk: bytearray,
    ) -> None:
        state = DigestState(descriptor.context_size)
        try:
            with hmac_pad_keys(descriptor, state, salt) as (inner_key, outer_key):
                hmac_with_pads(descriptor, state, inner_key, outer_key, prk, input_key_material)
        finally:
            state.wipe()

    def _expand(
        self,
        descriptor: AlgorithmDescriptor,
        prk: bytes | bytearray,
        info: bytes,
        length: int,
    ) -> bytes:
        digest_size = descriptor.digest_size
        rounds = (length - 1) // digest_size + 1

        state = DigestState(descriptor.context_size)
        okm = bytearray(rounds * digest_size)
        try:
            with hmac_pad_keys(descriptor, state, prk) as (inner_key, outer_key), \
                    scratch_buffer(digest_size) as block:
                for i in range(1, rounds + 1):
                    counter = bytes([i])
                    if i == 1:
                        # T(0) is empty
                        hmac_with_pads(descriptor, state, inner_key, outer_key, block, info, counter)
                    else:
                        hmac_with_pads(descriptor, state, inner_key, outer_key, block, block, info, counter)

                    offset = (i - 1) * digest_size
                    okm[offset:offset + digest_size] = block

                return bytes(okm[:length])
        finally:
            secure_zero(okm)
            state.wipe()


# Singleton instance
kdf_engine = KDFEngine()
