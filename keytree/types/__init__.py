"""Type definitions for keytree."""

# Common types
from ..types.common import (
    HexStr,
    Address,
    Wei,
    Seed,
    PrivateKeyBytes,
    PublicKeyBytes,
    ChainCode,
    Fingerprint,
    Digest,
    RandomSource,
)

# Transaction types
from ..types.transaction import (
    Transaction,
    Signature,
)

# Keystore types
from ..types.keystore import (
    KeystoreDocument,
    KeystoreOptions,
)

__all__ = [
    # Common
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

    # Transaction
    "Transaction",
    "Signature",

    # Keystore
    "KeystoreDocument",
    "KeystoreOptions",
]
