"""
keytree

Mnemonic phrases, hierarchical deterministic keys, encrypted keystores
and legacy transaction signing for Ethereum-style accounts.
"""

from .constants import DEFAULT_DERIVATION_PATH, Network
from .exceptions import (
    KeyTreeError,
    ValidationError,
    MnemonicError,
    CryptoError,
    DerivationError,
    KeystoreError,
    AuthenticationFailedError,
    SerializationError,
    WalletError,
)
from .crypto import (
    DerivationPath,
    HDNode,
    PrivateKey,
    PublicKey,
    generate_mnemonic,
    mnemonic_to_seed,
    validate_mnemonic,
)
from .types import KeystoreOptions, Signature, Transaction
from .wallet import Wallet, derive_wallets

__version__ = "1.0.0"

__all__ = [
    # Wallet
    "Wallet",
    "derive_wallets",

    # Config
    "Network",
    "DEFAULT_DERIVATION_PATH",
    "KeystoreOptions",

    # Exceptions
    "KeyTreeError",
    "ValidationError",
    "MnemonicError",
    "CryptoError",
    "DerivationError",
    "KeystoreError",
    "AuthenticationFailedError",
    "SerializationError",
    "WalletError",

    # Crypto
    "DerivationPath",
    "HDNode",
    "PrivateKey",
    "PublicKey",
    "generate_mnemonic",
    "mnemonic_to_seed",
    "validate_mnemonic",

    # Types
    "Signature",
    "Transaction",
]
