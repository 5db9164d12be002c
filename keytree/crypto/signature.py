"""Signature utilities for keytree."""

from typing import Union

from ..constants import MESSAGE_PREFIX
from ..exceptions import CryptoError, ValidationError
from ..types.common import Address, Digest
from ..types.transaction import Signature
from ..utils.encoding import keccak256
from ..utils.validation import validate_address
from .hd import HDNode
from .keys import PrivateKey, PublicKey

__all__ = [
    "sign",
    "recover_public_key",
    "recover_address",
    "hash_message",
    "sign_message",
    "verify_message",
]

SigningKey = Union[HDNode, PrivateKey, bytes, str]


def _signing_key(key: SigningKey) -> PrivateKey:
    """Resolve a node or raw key to a PrivateKey (NoPrivateKeyError for public-only nodes)."""
    if isinstance(key, HDNode):
        return key.get_private_key()
    if isinstance(key, PrivateKey):
        return key
    return PrivateKey(key)


def sign(key: SigningKey, digest: bytes) -> Signature:
    """
    Sign a 32-byte digest.

    Args:
        key: HD node, PrivateKey, or raw 32-byte key
        digest: 32-byte hash

    Returns:
        Deterministic (RFC 6979) recoverable signature

    Raises:
        NoPrivateKeyError: If ``key`` is a public-only node
        ValidationError: If digest is not 32 bytes
    """
    return _signing_key(key).sign_recoverable(digest)


def recover_public_key(digest: bytes, signature: Signature) -> PublicKey:
    """Recover the public key that produced ``signature`` over ``digest``."""
    return PublicKey.recover(digest, signature)


def recover_address(digest: bytes, signature: Signature) -> Address:
    """Recover the signer address of ``signature`` over ``digest``."""
    return recover_public_key(digest, signature).address


def hash_message(message: Union[str, bytes]) -> Digest:
    """
    Hash message with the personal-message (EIP-191) convention.

    Args:
        message: Message text or bytes

    Returns:
        32-byte message hash
    """
    if isinstance(message, str):
        message = message.encode("utf-8")

    return Digest(keccak256(MESSAGE_PREFIX + str(len(message)).encode("ascii") + message))


def sign_message(key: SigningKey, message: Union[str, bytes]) -> Signature:
    """
    Sign a message with the personal-message convention.

    Args:
        key: Key to sign with
        message: Message to sign

    Returns:
        Recoverable signature (``to_bytes()`` gives the 65-byte r || s || v form)
    """
    return sign(key, hash_message(message))


def verify_message(
    address_or_pubkey: Union[str, PublicKey],
    signature: Union[Signature, bytes, str],
    message: Union[str, bytes]
) -> bool:
    """
    Verify a signed message.

    Args:
        address_or_pubkey: Signer address or public key
        signature: Signature object or 65-byte r || s || v
        message: Original message

    Returns:
        True if signature is valid
    """
    if not isinstance(signature, Signature):
        signature = Signature.from_bytes(signature)

    try:
        recovered = recover_public_key(hash_message(message), signature)
    except CryptoError:
        return False

    if isinstance(address_or_pubkey, PublicKey):
        return recovered == address_or_pubkey

    try:
        return recovered.address == validate_address(address_or_pubkey)
    except ValidationError:
        return False
