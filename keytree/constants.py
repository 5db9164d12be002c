"""Protocol constants and defaults for keytree."""

from enum import Enum

__all__ = [
    "Network",
    "SECP256K1_N",
    "HARDENED_OFFSET",
    "MASTER_KEY_HMAC_KEY",
    "MIN_SEED_LENGTH",
    "MAX_SEED_LENGTH",
    "BIP39_PBKDF2_ROUNDS",
    "BIP39_SALT_PREFIX",
    "BIP39_ENTROPY_LENGTHS",
    "BIP39_WORD_COUNTS",
    "DEFAULT_LANGUAGE",
    "DEFAULT_DERIVATION_PATH",
    "EXTENDED_KEY_VERSIONS",
    "KEYSTORE_VERSION",
    "KEYSTORE_CIPHERS",
    "DEFAULT_CIPHER",
    "DEFAULT_KDF",
    "DEFAULT_SCRYPT_N",
    "DEFAULT_SCRYPT_R",
    "DEFAULT_SCRYPT_P",
    "DEFAULT_PBKDF2_ITERATIONS",
    "PBKDF2_PRF",
    "X_ETHERS_VERSION",
    "X_ETHERS_CLIENT",
    "MAX_UINT256",
    "MESSAGE_PREFIX",
]


class Network(Enum):
    """Network selector for extended key serialization."""
    MAINNET = "mainnet"
    TESTNET = "testnet"


# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# BIP32
HARDENED_OFFSET = 0x80000000
MASTER_KEY_HMAC_KEY = b"Bitcoin seed"
MIN_SEED_LENGTH = 16
MAX_SEED_LENGTH = 64

# (private, public) version bytes
EXTENDED_KEY_VERSIONS = {
    Network.MAINNET: (bytes.fromhex("0488ade4"), bytes.fromhex("0488b21e")),
    Network.TESTNET: (bytes.fromhex("04358394"), bytes.fromhex("043587cf")),
}

# BIP39
BIP39_PBKDF2_ROUNDS = 2048
BIP39_SALT_PREFIX = "mnemonic"
BIP39_ENTROPY_LENGTHS = (16, 20, 24, 28, 32)
BIP39_WORD_COUNTS = (12, 15, 18, 21, 24)
DEFAULT_LANGUAGE = "english"

# BIP44 coin type 60 (Ether)
DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"

# Web3 Secret Storage
KEYSTORE_VERSION = 3
KEYSTORE_CIPHERS = {
    "aes-128-ctr": 16,
    "aes-256-ctr": 32,
}
DEFAULT_CIPHER = "aes-128-ctr"
DEFAULT_KDF = "scrypt"
DEFAULT_SCRYPT_N = 131072
DEFAULT_SCRYPT_R = 8
DEFAULT_SCRYPT_P = 1
DEFAULT_PBKDF2_ITERATIONS = 262144
PBKDF2_PRF = "hmac-sha256"

# Mnemonic extension block, readable by ethers
X_ETHERS_VERSION = "0.1"
X_ETHERS_CLIENT = "keytree"

# Transactions
MAX_UINT256 = 2**256 - 1
MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"
