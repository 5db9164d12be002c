"""Keystore-related type definitions for keytree."""

from dataclasses import dataclass
from typing import Any, Dict

from ..constants import (
    DEFAULT_CIPHER,
    DEFAULT_KDF,
    DEFAULT_PBKDF2_ITERATIONS,
    DEFAULT_SCRYPT_N,
    DEFAULT_SCRYPT_P,
    DEFAULT_SCRYPT_R,
    KEYSTORE_CIPHERS,
)
from ..exceptions import ValidationError

__all__ = [
    "KeystoreDocument",
    "KeystoreOptions",
]

KeystoreDocument = Dict[str, Any]
"""Web3 Secret Storage (v3) document as parsed JSON."""


@dataclass(frozen=True)
class KeystoreOptions:
    """
    Encryption parameters for a keystore document.

    ``kdf`` is ``"scrypt"`` (cost from ``scrypt_n``, ``scrypt_r``,
    ``scrypt_p``) or ``"pbkdf2"`` (cost from ``pbkdf2_iterations``).
    ``cipher`` is ``"aes-128-ctr"`` or ``"aes-256-ctr"``.
    """

    kdf: str = DEFAULT_KDF
    cipher: str = DEFAULT_CIPHER
    scrypt_n: int = DEFAULT_SCRYPT_N
    scrypt_r: int = DEFAULT_SCRYPT_R
    scrypt_p: int = DEFAULT_SCRYPT_P
    pbkdf2_iterations: int = DEFAULT_PBKDF2_ITERATIONS

    def __post_init__(self) -> None:
        if self.kdf not in ("scrypt", "pbkdf2"):
            raise ValidationError(f"Unsupported kdf: {self.kdf}")
        if self.cipher not in KEYSTORE_CIPHERS:
            raise ValidationError(f"Unsupported cipher: {self.cipher}")
        if self.scrypt_n < 2 or self.scrypt_n & (self.scrypt_n - 1):
            raise ValidationError("scrypt N must be a power of two greater than 1")
        if self.scrypt_r < 1 or self.scrypt_p < 1:
            raise ValidationError("scrypt r and p must be positive")
        if self.pbkdf2_iterations < 1:
            raise ValidationError("PBKDF2 iterations must be positive")

    @property
    def key_length(self) -> int:
        """Cipher key length in bytes."""
        return KEYSTORE_CIPHERS[self.cipher]
