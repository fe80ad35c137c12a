"""Algorithm Registry.

Maps case-folded algorithm names to descriptors. The registry is
written once while the module is imported, sealed, and read-only
afterwards, so concurrent lookups need no locking.

Usage:
    from hashengine.core.registry import algorithm_registry

    descriptor = algorithm_registry.lookup("SHA256")
    descriptor.digest_size  # 32
"""

from dataclasses import dataclass

from .digests import DigestPlugin, builtin_digests
from .errors import AlgorithmNotFoundError, RegistrationError, UnsupportedAlgorithmError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AlgorithmDescriptor:
    """A registered algorithm.

    Sizes are captured from the plug-in at registration time and
    never change afterwards. Hash contexts reference descriptors,
    they never copy them.
    """

    name: str
    context_size: int
    block_size: int
    digest_size: int
    is_crypto: bool
    plugin: DigestPlugin

    @classmethod
    def from_plugin(cls, name: str, plugin: DigestPlugin) -> "AlgorithmDescriptor":
        sizes = {
            "context_size": plugin.context_size,
            "block_size": plugin.block_size,
            "digest_size": plugin.digest_size,
        }
        for attr, value in sizes.items():
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise RegistrationError(
                    f"{attr} must be a positive integer for {name}: {value!r}"
                )
        return cls(name=name, is_crypto=bool(plugin.is_crypto), plugin=plugin, **sizes)


class AlgorithmRegistry:
    """Write-once, read-many name to descriptor table."""

    def __init__(self):
        self._algorithms: dict[str, AlgorithmDescriptor] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register(self, name: str, plugin: DigestPlugin) -> AlgorithmDescriptor:
        """Register a plug-in under ``name`` (case-folded).

        Raises:
            RegistrationError: If the registry is sealed, the name is
                already taken, or the plug-in reports a bad size.
        """
        if self._sealed:
            raise RegistrationError(f"Registry is sealed, cannot register: {name}")

        key = name.lower()
        if key in self._algorithms:
            raise RegistrationError(f"Algorithm already registered: {key}")

        descriptor = AlgorithmDescriptor.from_plugin(key, plugin)
        self._algorithms[key] = descriptor
        logger.debug(
            "Algorithm registered",
            algorithm=key,
            block_size=descriptor.block_size,
            digest_size=descriptor.digest_size,
            is_crypto=descriptor.is_crypto,
        )
        return descriptor

    def seal(self) -> None:
        """Close the registry to further registration."""
        self._sealed = True
        logger.debug("Algorithm registry sealed", algorithms=len(self._algorithms))

    def lookup(self, name: str) -> AlgorithmDescriptor:
        """Resolve a name to its descriptor.

        Raises:
            AlgorithmNotFoundError: If no algorithm has that name
        """
        descriptor = self._algorithms.get(name.lower())
        if descriptor is None:
            raise AlgorithmNotFoundError(name)
        return descriptor

    def lookup_crypto(self, name: str, message: str = "Non-cryptographic hashing algorithm") -> AlgorithmDescriptor:
        """Resolve a name that must refer to a crypto-capable algorithm.

        Raises:
            AlgorithmNotFoundError: If no algorithm has that name
            UnsupportedAlgorithmError: If the algorithm is a checksum
        """
        descriptor = self.lookup(name)
        if not descriptor.is_crypto:
            raise UnsupportedAlgorithmError(f"{message}: {name}", algorithm=descriptor.name)
        return descriptor

    def names(self) -> list[str]:
        """All registered names, in registration order."""
        return list(self._algorithms)

    def crypto_names(self) -> list[str]:
        """Names of algorithms usable for HMAC and key derivation."""
        return [name for name, d in self._algorithms.items() if d.is_crypto]


def build_default_registry() -> AlgorithmRegistry:
    """Create and seal a registry holding every built-in plug-in."""
    registry = AlgorithmRegistry()
    for name, plugin in builtin_digests().items():
        registry.register(name, plugin)
    registry.seal()
    return registry


# Populated during import; the import lock makes this a one-time barrier.
algorithm_registry = build_default_registry()
