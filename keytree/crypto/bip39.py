"""BIP39 mnemonic implementation for keytree."""

import hashlib
import logging
import unicodedata
from functools import lru_cache
from typing import Dict, List, Tuple

from mnemonic import Mnemonic

from ..constants import (
    BIP39_ENTROPY_LENGTHS,
    BIP39_PBKDF2_ROUNDS,
    BIP39_SALT_PREFIX,
    BIP39_WORD_COUNTS,
    DEFAULT_LANGUAGE,
)
from ..exceptions import (
    InvalidChecksumError,
    InvalidEntropyLengthError,
    InvalidWordCountError,
    InvalidWordError,
    MnemonicError,
    ValidationError,
)
from ..types.common import RandomSource, Seed
from .entropy import read_random, secure_random_bytes

__all__ = [
    "get_wordlist",
    "normalize_mnemonic",
    "entropy_to_mnemonic",
    "mnemonic_to_entropy",
    "validate_mnemonic",
    "generate_mnemonic",
    "mnemonic_to_seed",
]

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _load_wordlist(language: str) -> Tuple[Tuple[str, ...], Dict[str, int]]:
    try:
        words = tuple(Mnemonic(language).wordlist)
    except Exception as e:
        raise ValidationError(f"Unsupported mnemonic language: {language}") from e
    if len(words) != 2048:
        raise ValidationError(f"Wordlist {language} has {len(words)} words, expected 2048")
    return words, {word: index for index, word in enumerate(words)}


def get_wordlist(language: str = DEFAULT_LANGUAGE) -> List[str]:
    """Get the 2048-word BIP39 list for ``language``."""
    return list(_load_wordlist(language)[0])


def normalize_mnemonic(mnemonic: str) -> str:
    """NFKD-normalize, lowercase and collapse whitespace."""
    return " ".join(unicodedata.normalize("NFKD", mnemonic).lower().split())


def _checksum_bits(entropy: bytes) -> str:
    checksum_length = len(entropy) * 8 // 32
    checksum = hashlib.sha256(entropy).digest()
    return bin(checksum[0])[2:].zfill(8)[:checksum_length]


def entropy_to_mnemonic(entropy: bytes, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Encode entropy as a mnemonic phrase.

    Args:
        entropy: 16, 20, 24, 28 or 32 bytes
        language: Wordlist language

    Returns:
        Space-separated mnemonic

    Raises:
        InvalidEntropyLengthError: If entropy length is not allowed
    """
    if len(entropy) not in BIP39_ENTROPY_LENGTHS:
        raise InvalidEntropyLengthError(len(entropy))

    wordlist, _ = _load_wordlist(language)

    # Convert to binary string and append checksum
    entropy_bits = "".join(format(byte, "08b") for byte in entropy)
    all_bits = entropy_bits + _checksum_bits(entropy)

    # Split into 11-bit chunks and convert to words
    words = [wordlist[int(all_bits[i:i + 11], 2)] for i in range(0, len(all_bits), 11)]
    return " ".join(words)


def mnemonic_to_entropy(mnemonic: str, language: str = DEFAULT_LANGUAGE) -> bytes:
    """
    Decode a mnemonic phrase back to its entropy.

    Raises:
        InvalidWordCountError: If word count is not 12, 15, 18, 21 or 24
        InvalidWordError: If a word is not in the wordlist
        InvalidChecksumError: If the checksum bits do not match
    """
    words = normalize_mnemonic(mnemonic).split(" ") if mnemonic.strip() else []
    if len(words) not in BIP39_WORD_COUNTS:
        raise InvalidWordCountError(len(words))

    _, index = _load_wordlist(language)

    bits = []
    for position, word in enumerate(words):
        if word not in index:
            raise InvalidWordError(position)
        bits.append(format(index[word], "011b"))
    all_bits = "".join(bits)

    checksum_length = len(all_bits) // 33
    entropy_bits = all_bits[:-checksum_length]
    entropy = int(entropy_bits, 2).to_bytes(len(entropy_bits) // 8, "big")

    if _checksum_bits(entropy) != all_bits[-checksum_length:]:
        raise InvalidChecksumError()

    return entropy


def validate_mnemonic(mnemonic: str, language: str = DEFAULT_LANGUAGE) -> bool:
    """Check if mnemonic is well-formed with a valid checksum."""
    try:
        mnemonic_to_entropy(mnemonic, language)
        return True
    except MnemonicError:
        return False


def generate_mnemonic(
    strength: int = 128,
    language: str = DEFAULT_LANGUAGE,
    random_source: RandomSource = secure_random_bytes,
) -> str:
    """
    Generate BIP39 mnemonic phrase.

    Args:
        strength: Entropy bits, one of 128, 160, 192, 224, 256
        language: Wordlist language
        random_source: Secure random capability

    Returns:
        Mnemonic of 12 to 24 words
    """
    if strength % 8 or strength // 8 not in BIP39_ENTROPY_LENGTHS:
        raise InvalidEntropyLengthError(strength // 8, "Strength must be 128, 160, 192, 224, or 256")

    entropy = read_random(random_source, strength // 8)
    return entropy_to_mnemonic(entropy, language)


def mnemonic_to_seed(
    mnemonic: str,
    passphrase: str = "",
    language: str = DEFAULT_LANGUAGE,
) -> Seed:
    """
    Stretch a mnemonic into a 64-byte seed using PBKDF2-HMAC-SHA512.

    The phrase must pass ``mnemonic_to_entropy`` before any stretching.
    """
    mnemonic_to_entropy(mnemonic, language)

    mnemonic_bytes = normalize_mnemonic(mnemonic).encode("utf-8")
    salt = unicodedata.normalize("NFKD", BIP39_SALT_PREFIX + passphrase).encode("utf-8")

    logger.debug(f"Deriving seed ({BIP39_PBKDF2_ROUNDS} PBKDF2 rounds)")
    return Seed(hashlib.pbkdf2_hmac(
        "sha512",
        mnemonic_bytes,
        salt,
        BIP39_PBKDF2_ROUNDS,
        dklen=64
    ))
