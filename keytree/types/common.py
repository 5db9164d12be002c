"""Common type definitions for keytree."""

from typing import Callable, NewType

__all__ = [
    "HexStr",
    "Address",
    "Wei",
    "Seed",
    "PrivateKeyBytes",
    "PublicKeyBytes",
    "ChainCode",
    "Fingerprint",
    "Digest",
    "RandomSource",
]

# Basic types
HexStr = NewType("HexStr", str)
"""Hexadecimal string representation."""

Address = NewType("Address", str)
"""EIP-55 checksummed, 0x-prefixed account address."""

Wei = NewType("Wei", int)
"""Ether amount in wei (smallest unit)."""

# Crypto types
Seed = NewType("Seed", bytes)
"""64-byte BIP39 seed."""

PrivateKeyBytes = NewType("PrivateKeyBytes", bytes)
"""32-byte private key."""

PublicKeyBytes = NewType("PublicKeyBytes", bytes)
"""33 or 65 byte public key."""

ChainCode = NewType("ChainCode", bytes)
"""32-byte BIP32 chain code."""

Fingerprint = NewType("Fingerprint", bytes)
"""4-byte key fingerprint."""

Digest = NewType("Digest", bytes)
"""32-byte message digest."""

# Type aliases
RandomSource = Callable[[int], bytes]
"""Secure random capability: returns ``n`` random bytes."""
