"""hashengine - Pluggable Cryptographic Hashing Engine.

A pure in-memory hashing library providing:
- Algorithm registry over pluggable digest implementations
- Streaming hash contexts with clone support
- HMAC over any crypto-capable algorithm
- PBKDF2 and HKDF key derivation
- Constant-time equality comparison
"""

__version__ = "1.0.0"
__author__ = "hashengine Contributors"
