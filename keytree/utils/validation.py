"""Validation utilities for keytree."""

import re
from decimal import Decimal, InvalidOperation
from typing import Union

from ..constants import MAX_UINT256, SECP256K1_N
from ..exceptions import FieldOutOfRangeError, ValidationError
from ..types.common import Address, Wei
from ..utils.encoding import to_checksum_address

__all__ = [
    "is_valid_address",
    "validate_address",
    "validate_uint",
    "to_wei",
    "from_wei",
    "is_valid_private_key",
    "validate_private_key",
    "is_valid_public_key",
    "validate_public_key",
]

# Regex patterns
ADDRESS_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")
HEX_PATTERN = re.compile(r"^[0-9a-fA-F]*$")

WEI_PER_ETHER = 10**18


def is_valid_address(address: str) -> bool:
    """
    Check if address format is valid.

    All-lowercase and all-uppercase addresses are accepted as-is; mixed
    case must carry a correct EIP-55 checksum.
    """
    try:
        validate_address(address)
        return True
    except ValidationError:
        return False


def validate_address(address: str) -> Address:
    """
    Validate address and return its checksummed form.

    Raises:
        ValidationError: If address is malformed or its checksum is wrong
    """
    if not address:
        raise ValidationError("Address cannot be empty")

    if not ADDRESS_PATTERN.match(address):
        raise ValidationError(f"Invalid address: {address}")

    body = address[2:] if address.startswith("0x") else address
    checksummed = to_checksum_address(body)

    if body != body.lower() and body != body.upper() and checksummed[2:] != body:
        raise ValidationError(f"Invalid address checksum: {address}")

    return checksummed


def validate_uint(value: int, field: str, max_value: int = MAX_UINT256) -> int:
    """
    Validate that an integer fits its canonical unsigned width.

    Raises:
        FieldOutOfRangeError: If value is negative or exceeds ``max_value``
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise FieldOutOfRangeError(field, f"Transaction field {field} must be an integer")
    if value < 0:
        raise FieldOutOfRangeError(field, f"Transaction field {field} cannot be negative")
    if value > max_value:
        raise FieldOutOfRangeError(field, f"Transaction field {field} exceeds {max_value.bit_length()} bits")
    return value


def to_wei(amount: Union[str, int, Decimal], unit_decimals: int = 18) -> Wei:
    """
    Convert a decimal ether amount to wei.

    Args:
        amount: Amount such as "1.0" or Decimal("0.25")
        unit_decimals: Decimals of the unit (18 for ether, 9 for gwei)

    Raises:
        ValidationError: If amount is not a number, is negative or has too many decimals
    """
    try:
        decimal_amount = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {amount}") from e

    if decimal_amount < 0:
        raise ValidationError(f"Amount cannot be negative: {amount}")

    scaled = decimal_amount.scaleb(unit_decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"Amount has more than {unit_decimals} decimals: {amount}")

    return Wei(int(scaled))


def from_wei(wei: Union[Wei, int], unit_decimals: int = 18) -> Decimal:
    """Convert wei to a decimal amount of the given unit."""
    return Decimal(wei).scaleb(-unit_decimals)


def is_valid_private_key(key: Union[str, bytes]) -> bool:
    """Check if private key format is valid."""
    try:
        validate_private_key(key)
        return True
    except ValidationError:
        return False


def validate_private_key(key: Union[str, bytes]) -> bytes:
    """
    Validate private key and return as bytes.

    Args:
        key: Private key as hex string or bytes

    Returns:
        Private key as 32 bytes

    Raises:
        ValidationError: If private key is invalid
    """
    if isinstance(key, str):
        if key.startswith("0x"):
            key = key[2:]
        if not HEX_PATTERN.match(key):
            raise ValidationError("Private key must be hexadecimal")
        try:
            key = bytes.fromhex(key)
        except ValueError as e:
            raise ValidationError("Invalid hex private key") from e

    if len(key) != 32:
        raise ValidationError(f"Private key must be 32 bytes, got {len(key)}")

    key_int = int.from_bytes(key, "big")
    if key_int == 0:
        raise ValidationError("Private key cannot be zero")
    if key_int >= SECP256K1_N:
        raise ValidationError("Private key exceeds curve order")

    return bytes(key)


def is_valid_public_key(key: Union[str, bytes]) -> bool:
    """Check if public key format is valid."""
    try:
        validate_public_key(key)
        return True
    except ValidationError:
        return False


def validate_public_key(key: Union[str, bytes]) -> bytes:
    """
    Validate public key encoding and return as bytes.

    Args:
        key: Public key as hex string or bytes

    Returns:
        Public key bytes (33 or 65 bytes)

    Raises:
        ValidationError: If public key is invalid
    """
    if isinstance(key, str):
        if key.startswith("0x"):
            key = key[2:]
        if not HEX_PATTERN.match(key):
            raise ValidationError("Public key must be hexadecimal")
        try:
            key = bytes.fromhex(key)
        except ValueError as e:
            raise ValidationError(f"Invalid hex public key: {e}") from e

    if len(key) == 33:
        if key[0] not in (0x02, 0x03):
            raise ValidationError("Compressed public key must start with 0x02 or 0x03")
    elif len(key) == 65:
        if key[0] != 0x04:
            raise ValidationError("Uncompressed public key must start with 0x04")
    else:
        raise ValidationError(f"Public key must be 33 or 65 bytes, got {len(key)}")

    return bytes(key)
