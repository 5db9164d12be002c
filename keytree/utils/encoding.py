"""Encoding and decoding utilities for keytree."""

import hashlib
from typing import List, Union

import rlp
from Crypto.Hash import RIPEMD160, keccak
from rlp.exceptions import DecodingError, RLPException

from ..exceptions import SerializationError, ValidationError
from ..types.common import Address, HexStr

__all__ = [
    "hex_to_bytes",
    "bytes_to_hex",
    "int_to_min_bytes",
    "bytes_to_int",
    "sha256",
    "double_sha256",
    "hash160",
    "keccak256",
    "encode_base58",
    "decode_base58",
    "encode_base58_check",
    "decode_base58_check",
    "encode_rlp",
    "decode_rlp",
    "to_checksum_address",
]

# Constants
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

RLPItem = Union[bytes, List["RLPItem"]]


def hex_to_bytes(hex_str: Union[HexStr, str]) -> bytes:
    """
    Convert hex string to bytes.

    Args:
        hex_str: Hex string with or without 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValidationError: If hex string is invalid
    """
    try:
        # Remove 0x prefix if present
        if isinstance(hex_str, str) and hex_str.startswith(("0x", "0X")):
            hex_str = hex_str[2:]
        return bytes.fromhex(hex_str)
    except ValueError as e:
        raise ValidationError(f"Invalid hex string: {hex_str}") from e


def bytes_to_hex(data: bytes, prefix: bool = False) -> HexStr:
    """
    Convert bytes to hex string.

    Args:
        data: Bytes to encode
        prefix: Add 0x prefix

    Returns:
        Hex string
    """
    hex_str = data.hex()
    if prefix:
        hex_str = f"0x{hex_str}"
    return HexStr(hex_str)


def int_to_min_bytes(value: int) -> bytes:
    """Big-endian encoding without leading zeros (zero encodes as b"")."""
    if value < 0:
        raise ValidationError("Cannot encode negative integer")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def bytes_to_int(data: bytes, byteorder: str = "big") -> int:
    """Convert bytes to unsigned integer."""
    return int.from_bytes(data, byteorder=byteorder)


def sha256(data: bytes) -> bytes:
    """Perform SHA256 hash."""
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    """Perform double SHA256 hash."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """Perform RIPEMD160(SHA256(data))."""
    return RIPEMD160.new(sha256(data)).digest()


def keccak256(data: bytes) -> bytes:
    """Perform Keccak-256 (the pre-standard SHA-3 used by Ethereum)."""
    return keccak.new(digest_bits=256, data=data).digest()


def encode_base58(data: bytes) -> str:
    """
    Encode bytes as Base58 string.

    Args:
        data: Bytes to encode

    Returns:
        Base58 encoded string
    """
    n = bytes_to_int(data)

    encoded = ""
    while n:
        n, remainder = divmod(n, 58)
        encoded = BASE58_ALPHABET[remainder] + encoded

    # Leading zero bytes map to '1'
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    return "1" * leading_zeros + encoded


def decode_base58(string: str) -> bytes:
    """
    Decode Base58 string to bytes.

    Raises:
        ValidationError: If string contains invalid characters
    """
    n = 0
    for char in string:
        try:
            n = n * 58 + BASE58_ALPHABET.index(char)
        except ValueError:
            raise ValidationError(f"Invalid Base58 character: {char}") from None

    leading_zeros = len(string) - len(string.lstrip("1"))
    return b"\x00" * leading_zeros + int_to_min_bytes(n)


def encode_base58_check(data: bytes) -> str:
    """Encode bytes as Base58Check (with checksum)."""
    checksum = double_sha256(data)[:4]
    return encode_base58(data + checksum)


def decode_base58_check(string: str) -> bytes:
    """
    Decode Base58Check string.

    Returns:
        Decoded data (without checksum)

    Raises:
        ValidationError: If checksum is invalid
    """
    data = decode_base58(string)
    if len(data) < 4:
        raise ValidationError("Invalid Base58Check string: too short")

    payload, checksum = data[:-4], data[-4:]
    if checksum != double_sha256(payload)[:4]:
        raise ValidationError("Invalid Base58Check checksum")

    return payload


def encode_rlp(item: Union[bytes, bytearray, int, list, tuple]) -> bytes:
    """
    Encode a value with Recursive Length Prefix.

    Integers are encoded as minimal big-endian byte strings; lists and
    tuples are encoded recursively.

    Args:
        item: Bytes, non-negative int, or (nested) sequence of those

    Returns:
        RLP-encoded bytes

    Raises:
        ValidationError: If item is a bool, a negative int or an unsupported type
    """
    if isinstance(item, bool):
        raise ValidationError("Cannot RLP-encode a bool")
    try:
        return rlp.encode(item)
    except (RLPException, TypeError) as e:
        raise ValidationError(f"Cannot RLP-encode value: {e}") from e


def decode_rlp(data: bytes) -> RLPItem:
    """
    Decode RLP bytes into nested bytes/lists.

    Raises:
        SerializationError: If input is malformed, non-canonical or has trailing bytes
    """
    try:
        return rlp.decode(bytes(data), strict=True)
    except DecodingError as e:
        raise SerializationError(f"Invalid RLP: {e}") from e


def to_checksum_address(address: Union[bytes, str]) -> Address:
    """
    Apply EIP-55 mixed-case checksum to an address.

    Args:
        address: 20 raw bytes or 40 hex characters (0x prefix optional)

    Returns:
        0x-prefixed checksummed address
    """
    raw = hex_to_bytes(address) if isinstance(address, str) else bytes(address)
    if len(raw) != 20:
        raise ValidationError(f"Address must be 20 bytes, got {len(raw)}")

    hex_addr = raw.hex()
    digest = keccak256(hex_addr.encode("ascii")).hex()
    checksummed = "".join(
        char.upper() if char.isalpha() and int(nibble, 16) >= 8 else char
        for char, nibble in zip(hex_addr, digest)
    )
    return Address(f"0x{checksummed}")
