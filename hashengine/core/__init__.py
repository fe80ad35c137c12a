"""Core hashing, MAC and key derivation engines.

The module-level engine singletons live in their own modules
(``hashengine.core.hash_engine.hash_engine`` and friends).
"""

from .context import ContextState, HashContext
from .errors import (
    AlgorithmNotFoundError,
    HashEngineError,
    InvalidArgumentError,
    InvalidContextStateError,
    RegistrationError,
    StreamReadError,
    UnsupportedAlgorithmError,
)
from .hash_engine import HashEngine, MACEngine
from .kdf_engine import KDFEngine
from .registry import AlgorithmDescriptor, AlgorithmRegistry, algorithm_registry
from .secure_memory import constant_time_equals

__all__ = [
    "AlgorithmDescriptor",
    "AlgorithmNotFoundError",
    "AlgorithmRegistry",
    "ContextState",
    "HashContext",
    "HashEngine",
    "HashEngineError",
    "InvalidArgumentError",
    "InvalidContextStateError",
    "KDFEngine",
    "MACEngine",
    "RegistrationError",
    "StreamReadError",
    "UnsupportedAlgorithmError",
    "algorithm_registry",
    "constant_time_equals",
]
