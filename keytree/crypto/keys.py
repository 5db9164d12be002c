"""Key management for keytree."""

from typing import Union

from coincurve import PrivateKey as SecpPrivateKey, PublicKey as SecpPublicKey

from ..exceptions import CryptoError, ValidationError
from ..types.common import Address, PrivateKeyBytes, PublicKeyBytes, RandomSource
from ..types.transaction import Signature
from ..utils.encoding import keccak256, to_checksum_address
from ..utils.validation import validate_private_key, validate_public_key
from .entropy import read_random, secure_random_bytes

__all__ = ["PrivateKey", "PublicKey", "public_key_to_address"]


def public_key_to_address(public_key: Union[bytes, "PublicKey"]) -> Address:
    """
    Compute the account address of a public key.

    Keccak-256 over the 64-byte uncompressed point (without the 0x04
    prefix); the address is the last 20 bytes, EIP-55 checksummed.
    """
    if not isinstance(public_key, PublicKey):
        public_key = PublicKey(public_key)
    return to_checksum_address(keccak256(public_key.uncompressed[1:])[-20:])


class PrivateKey:
    """
    secp256k1 private key wrapper.

    Handles signing and public key derivation. The secret never appears in
    ``repr``.
    """

    def __init__(self, key: Union[bytes, str, "PrivateKey"]) -> None:
        """
        Initialize private key.

        Args:
            key: Private key as 32 bytes, hex string, or another PrivateKey

        Raises:
            ValidationError: If key format is invalid
        """
        if isinstance(key, PrivateKey):
            self._secret = key._secret
            self._key = key._key
            return

        self._secret = PrivateKeyBytes(validate_private_key(key))
        self._key = SecpPrivateKey(self._secret)

    @classmethod
    def create(cls, random_source: RandomSource = secure_random_bytes) -> "PrivateKey":
        """
        Create new random private key.

        Args:
            random_source: Secure random capability

        Returns:
            New PrivateKey instance
        """
        while True:
            key_bytes = read_random(random_source, 32)
            try:
                return cls(key_bytes)
            except ValidationError:
                # Out of range, astronomically rare
                continue

    @property
    def secret(self) -> PrivateKeyBytes:
        """Get private key as bytes."""
        return self._secret

    def hex(self) -> str:
        """Get private key as 0x-prefixed hex string."""
        return "0x" + self._secret.hex()

    def public_key(self, compressed: bool = True) -> "PublicKey":
        """Get corresponding public key."""
        return PublicKey(self._key.public_key.format(compressed=compressed))

    @property
    def address(self) -> Address:
        """Get account address."""
        return public_key_to_address(self.public_key())

    def sign_recoverable(self, message_hash: bytes) -> Signature:
        """
        Sign a 32-byte hash.

        Nonces are generated per RFC 6979, so the same key and hash always
        give the same signature; ``s`` is normalized to the lower half of
        the curve order.

        Raises:
            ValidationError: If hash is not 32 bytes
            CryptoError: If signing fails
        """
        if len(message_hash) != 32:
            raise ValidationError(f"Message hash must be 32 bytes, got {len(message_hash)}")

        try:
            raw = self._key.sign_recoverable(message_hash, hasher=None)
        except Exception as e:
            raise CryptoError(f"Signing failed: {e}") from e

        return Signature(
            r=int.from_bytes(raw[:32], "big"),
            s=int.from_bytes(raw[32:64], "big"),
            recovery_id=raw[64],
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateKey):
            return False
        return self._secret == other._secret

    def __hash__(self) -> int:
        return hash(self.address)

    def __repr__(self) -> str:
        return f"PrivateKey({self.address})"


class PublicKey:
    """secp256k1 public key wrapper."""

    def __init__(self, key: Union[bytes, str, "PublicKey"]) -> None:
        """
        Initialize public key.

        Args:
            key: Public key (33 or 65 bytes, or hex), or another PublicKey

        Raises:
            ValidationError: If key is malformed or not on the curve
        """
        if isinstance(key, PublicKey):
            self._key = key._key
            return

        key_bytes = validate_public_key(key)
        try:
            self._key = SecpPublicKey(key_bytes)
        except ValueError as e:
            raise ValidationError("Public key is not a valid curve point") from e

    @classmethod
    def recover(cls, message_hash: bytes, signature: Signature) -> "PublicKey":
        """
        Recover the signing public key from a hash and signature.

        Raises:
            CryptoError: If recovery fails
        """
        if len(message_hash) != 32:
            raise ValidationError(f"Message hash must be 32 bytes, got {len(message_hash)}")
        try:
            recovered = SecpPublicKey.from_signature_and_message(
                signature.to_recoverable(), message_hash, hasher=None
            )
        except Exception as e:
            raise CryptoError(f"Public key recovery failed: {e}") from e
        return cls(recovered.format(compressed=True))

    @property
    def compressed(self) -> PublicKeyBytes:
        """Get 33-byte compressed encoding."""
        return PublicKeyBytes(self._key.format(compressed=True))

    @property
    def uncompressed(self) -> PublicKeyBytes:
        """Get 65-byte uncompressed encoding."""
        return PublicKeyBytes(self._key.format(compressed=False))

    def hex(self) -> str:
        """Get compressed public key as 0x-prefixed hex string."""
        return "0x" + self.compressed.hex()

    @property
    def address(self) -> Address:
        """Get account address."""
        return public_key_to_address(self)

    def add_tweak(self, tweak: bytes) -> "PublicKey":
        """
        Return ``self + tweak*G``.

        Raises:
            CryptoError: If tweak is out of range or the result is infinity
        """
        try:
            return PublicKey(self._key.add(tweak).format(compressed=True))
        except ValueError as e:
            raise CryptoError(f"Public key tweak failed: {e}") from e

    def verify(self, signature: Signature, message_hash: bytes) -> bool:
        """
        Verify signature.

        Args:
            signature: Recoverable signature
            message_hash: 32-byte message hash

        Returns:
            True if signature is valid for this key
        """
        if len(message_hash) != 32:
            return False

        try:
            return PublicKey.recover(message_hash, signature) == self
        except CryptoError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self.compressed == other.compressed

    def __hash__(self) -> int:
        return hash(self.compressed)

    def __repr__(self) -> str:
        return f"PublicKey({self.address})"
