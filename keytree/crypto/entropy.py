"""Secure randomness capability.

Functions that need randomness take a ``random_source`` callable instead of
reading global state, so tests can pass a fixed source.
"""

import secrets

from ..exceptions import CryptoError
from ..types.common import RandomSource

__all__ = ["secure_random_bytes", "read_random"]


def secure_random_bytes(n: int) -> bytes:
    """Return ``n`` bytes from the operating system CSPRNG."""
    return secrets.token_bytes(n)


def read_random(random_source: RandomSource, n: int) -> bytes:
    """
    Draw ``n`` bytes from ``random_source`` and check the length.

    Raises:
        CryptoError: If the source returns the wrong number of bytes
    """
    data = random_source(n)
    if not isinstance(data, (bytes, bytearray)):
        raise CryptoError(f"Random source returned {type(data).__name__}, expected bytes")
    if len(data) != n:
        raise CryptoError(f"Random source returned {len(data)} bytes, expected {n}")
    return bytes(data)
