"""
Exception classes for the hashing engine.
"""


class HashEngineError(Exception):
    """Base exception for hashing engine errors."""
    pass


class AlgorithmNotFoundError(HashEngineError, LookupError):
    """The requested algorithm is not registered."""

    def __init__(self, algorithm: str):
        super().__init__(f"Unknown hashing algorithm: {algorithm}")
        self.algorithm = algorithm


class UnsupportedAlgorithmError(HashEngineError):
    """A non-cryptographic algorithm was used where one is required."""

    def __init__(self, message: str, algorithm: str | None = None):
        super().__init__(message)
        self.algorithm = algorithm


class InvalidArgumentError(HashEngineError, ValueError):
    """Bad length, iteration count, key or keying material."""
    pass


class InvalidContextStateError(HashEngineError):
    """Operation on a finalized or destroyed hash context."""
    pass


class StreamReadError(HashEngineError):
    """Reading from a file or stream failed mid-update."""
    pass


class RegistrationError(HashEngineError):
    """Algorithm registry misuse at startup (duplicate name, sealed registry)."""
    pass
