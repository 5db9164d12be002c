"""keytree exceptions hierarchy."""

from typing import Any, Optional

__all__ = [
    "KeyTreeError",
    "ValidationError",
    "MnemonicError",
    "InvalidEntropyLengthError",
    "InvalidChecksumError",
    "InvalidWordCountError",
    "InvalidWordError",
    "InvalidPathSyntaxError",
    "FieldOutOfRangeError",
    "CryptoError",
    "DerivationError",
    "HardenedDerivationRequiresPrivateKeyError",
    "PathAppliesHardenedToPublicOnlyNodeError",
    "InvalidDerivedKeyError",
    "NoPrivateKeyError",
    "KeystoreError",
    "AuthenticationFailedError",
    "SerializationError",
    "WalletError",
]


class KeyTreeError(Exception):
    """Base exception for all keytree errors."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ValidationError(KeyTreeError):
    """Raised when an input fails validation."""
    pass


class MnemonicError(ValidationError):
    """Raised when a mnemonic or its entropy is malformed."""
    pass


class InvalidEntropyLengthError(MnemonicError):
    """Raised when entropy is not 16, 20, 24, 28 or 32 bytes long."""

    def __init__(self, length: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Invalid entropy length: {length} bytes (expected 16-32, multiple of 4)"
        super().__init__(message)
        self.length = length


class InvalidChecksumError(MnemonicError):
    """Raised when the mnemonic checksum bits do not match the entropy."""

    def __init__(self, message: str = "Invalid mnemonic checksum") -> None:
        super().__init__(message)


class InvalidWordCountError(MnemonicError):
    """Raised when the mnemonic has an unsupported number of words."""

    def __init__(self, count: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Invalid mnemonic word count: {count} (expected 12, 15, 18, 21 or 24)"
        super().__init__(message)
        self.count = count


class InvalidWordError(MnemonicError):
    """
    Raised when a mnemonic word is not in the wordlist.

    Only the word position is reported; the word itself may be part of a
    secret phrase.
    """

    def __init__(self, position: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Mnemonic word #{position + 1} is not in the wordlist"
        super().__init__(message)
        self.position = position


class InvalidPathSyntaxError(ValidationError):
    """Raised when a derivation path string cannot be parsed."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        message = f"Invalid derivation path: {path!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class FieldOutOfRangeError(ValidationError):
    """Raised when a transaction field does not fit its canonical width."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Transaction field out of range: {field}"
        super().__init__(message)
        self.field = field


class CryptoError(KeyTreeError):
    """Raised when a cryptographic operation fails."""
    pass


class DerivationError(CryptoError):
    """Raised when HD key derivation fails."""
    pass


class HardenedDerivationRequiresPrivateKeyError(DerivationError):
    """Raised when hardened derivation is attempted on a public-only node."""

    def __init__(self, index: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Cannot derive hardened child {index}' without a private key"
        super().__init__(message)
        self.index = index


class PathAppliesHardenedToPublicOnlyNodeError(HardenedDerivationRequiresPrivateKeyError):
    """Raised when a derivation path hits a hardened segment on a public-only node."""

    def __init__(self, position: int, segment: str, index: int) -> None:
        super().__init__(
            index,
            f"Path segment #{position + 1} ({segment}) is hardened but the node is public-only",
        )
        self.position = position
        self.segment = segment


class InvalidDerivedKeyError(DerivationError):
    """
    Raised when derivation yields an invalid key (IL >= n or a zero key).

    The probability is below 1 in 2^127. BIP32 callers proceed with
    ``next_index``.
    """

    def __init__(self, index: int, depth: int = 0) -> None:
        super().__init__(
            f"Derived key at index {index} (depth {depth}) is invalid; retry with index {index + 1}"
        )
        self.index = index
        self.depth = depth
        self.next_index = index + 1


class NoPrivateKeyError(CryptoError):
    """Raised when signing is attempted with a public-only node."""

    def __init__(self, message: str = "Node has no private key") -> None:
        super().__init__(message)


class KeystoreError(KeyTreeError):
    """Raised when a keystore document is malformed or inconsistent."""
    pass


class AuthenticationFailedError(KeystoreError):
    """Raised when the keystore MAC does not match (wrong password or tampering)."""

    def __init__(self, message: str = "Keystore authentication failed: wrong password or corrupted document") -> None:
        super().__init__(message)


class SerializationError(KeyTreeError):
    """Raised when serialization/deserialization fails."""
    pass


class WalletError(KeyTreeError):
    """Raised when wallet operation fails."""
    pass
