"""Cryptographic primitives for keytree."""

from ..crypto.keys import PrivateKey, PublicKey, public_key_to_address
from ..crypto.bip39 import (
    entropy_to_mnemonic,
    generate_mnemonic,
    get_wordlist,
    mnemonic_to_entropy,
    mnemonic_to_seed,
    validate_mnemonic,
)
from ..crypto.hd import DerivationPath, HDNode, PathSegment
from ..crypto.signature import (
    sign,
    sign_message,
    verify_message,
    hash_message,
    recover_address,
)
from ..crypto.transaction_signing import (
    build_canonical_payload,
    serialize_transaction,
    sign_transaction,
    parse_transaction,
    recover_sender,
)
from ..crypto.keystore import decrypt_keystore, encrypt_keystore

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "public_key_to_address",

    # Mnemonic
    "entropy_to_mnemonic",
    "generate_mnemonic",
    "get_wordlist",
    "mnemonic_to_entropy",
    "mnemonic_to_seed",
    "validate_mnemonic",

    # HD
    "DerivationPath",
    "HDNode",
    "PathSegment",

    # Signatures
    "sign",
    "sign_message",
    "verify_message",
    "hash_message",
    "recover_address",

    # Transactions
    "build_canonical_payload",
    "serialize_transaction",
    "sign_transaction",
    "parse_transaction",
    "recover_sender",

    # Keystore
    "encrypt_keystore",
    "decrypt_keystore",
]
