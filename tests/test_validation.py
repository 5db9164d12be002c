import pytest
from decimal import Decimal

from keytree.constants import MAX_UINT256, SECP256K1_N
from keytree.exceptions import FieldOutOfRangeError
from keytree.utils import validation as v


def test_address_validation():
    addr = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    assert v.is_valid_address(addr)
    assert v.validate_address(addr.lower()) == addr
    assert v.validate_address(addr[2:].upper()) == addr
    with pytest.raises(v.ValidationError):
        v.validate_address("invalid")
    with pytest.raises(v.ValidationError):
        v.validate_address("")


def test_address_bad_checksum():
    bad = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    assert not v.is_valid_address(bad)
    with pytest.raises(v.ValidationError):
        v.validate_address(bad)


def test_validate_uint():
    assert v.validate_uint(0, "nonce") == 0
    assert v.validate_uint(MAX_UINT256, "value") == MAX_UINT256
    with pytest.raises(FieldOutOfRangeError) as exc:
        v.validate_uint(MAX_UINT256 + 1, "value")
    assert exc.value.field == "value"
    with pytest.raises(FieldOutOfRangeError):
        v.validate_uint(-1, "nonce")
    with pytest.raises(FieldOutOfRangeError):
        v.validate_uint(True, "nonce")


def test_amount_conversion():
    assert v.to_wei("1.0") == 10**18
    assert v.to_wei(Decimal("0.25")) == 25 * 10**16
    assert v.to_wei("2", unit_decimals=9) == 2_000_000_000
    assert v.from_wei(10**18) == Decimal("1")
    with pytest.raises(v.ValidationError):
        v.to_wei("0.0000000000000000001")
    with pytest.raises(v.ValidationError):
        v.to_wei("-1")
    with pytest.raises(v.ValidationError):
        v.to_wei("ether")


def test_private_key_validation():
    assert v.is_valid_private_key("0x" + "01" * 32)
    assert v.validate_private_key(b"\x01" * 32) == b"\x01" * 32
    assert not v.is_valid_private_key(b"\x00" * 32)
    assert not v.is_valid_private_key(SECP256K1_N.to_bytes(32, "big"))
    assert not v.is_valid_private_key("zz" * 32)
    assert not v.is_valid_private_key(b"\x01" * 31)


def test_public_key_validation():
    g = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    assert v.is_valid_public_key(g)
    assert not v.is_valid_public_key("05" + g[2:])
    assert not v.is_valid_public_key(b"\x04" * 33)
    assert not v.is_valid_public_key(b"\x02" * 64)
