import pytest
from keytree.exceptions import SerializationError, ValidationError
from keytree.utils.encoding import (
    hex_to_bytes, bytes_to_hex, int_to_min_bytes, keccak256,
    encode_base58, decode_base58, encode_base58_check, decode_base58_check,
    encode_rlp, decode_rlp, to_checksum_address
)


def test_hex_bytes_roundtrip():
    data = b"\x00\x01deadbeef"
    hex_str = bytes_to_hex(data, prefix=True)
    assert hex_str.startswith("0x")
    assert hex_to_bytes(hex_str) == data
    with pytest.raises(ValidationError):
        hex_to_bytes("zzzz")


def test_int_to_min_bytes():
    assert int_to_min_bytes(0) == b""
    assert int_to_min_bytes(1024) == b"\x04\x00"
    with pytest.raises(ValidationError):
        int_to_min_bytes(-1)


def test_keccak256_empty():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_base58_roundtrip():
    payload = b"\x00\x00hello world"
    encoded = encode_base58(payload)
    assert encoded.startswith("11")
    assert decode_base58(encoded) == payload


def test_base58check_roundtrip():
    payload = b"test payload"
    enc = encode_base58_check(payload)
    dec = decode_base58_check(enc)
    assert dec == payload
    with pytest.raises(ValidationError):
        decode_base58_check(enc[:-1] + ("2" if enc[-1] != "2" else "3"))
    with pytest.raises(ValidationError):
        decode_base58("0OIl")


def test_rlp_encode_known_values():
    assert encode_rlp(b"dog") == b"\x83dog"
    assert encode_rlp([b"cat", b"dog"]) == bytes.fromhex("c88363617483646f67")
    assert encode_rlp(b"") == b"\x80"
    assert encode_rlp([]) == b"\xc0"
    assert encode_rlp(0) == b"\x80"
    assert encode_rlp(15) == b"\x0f"
    assert encode_rlp(1024) == b"\x82\x04\x00"
    assert encode_rlp([[], [[]], [[], [[]]]]) == bytes.fromhex("c7c0c1c0c3c0c1c0")

    text = b"Lorem ipsum dolor sit amet, consectetur adipisicing elit"
    assert encode_rlp(text) == b"\xb8\x38" + text


def test_rlp_rejects_unencodable_values():
    with pytest.raises(ValidationError):
        encode_rlp(True)
    with pytest.raises(ValidationError):
        encode_rlp(-1)
    with pytest.raises(ValidationError):
        encode_rlp(1.5)


def test_rlp_decode_nested():
    item = [b"cat", [b"dog", b""], b"\x01" * 60]
    assert decode_rlp(encode_rlp(item)) == item


@pytest.mark.parametrize("data", [
    b"",                      # empty input
    b"\x83do",                # truncated string
    b"\x81\x05",              # single byte with prefix
    b"\xb8\x01\x61",          # long form for short payload
    b"\xb9\x00\x38" + b"a" * 56,  # length with leading zero
    b"\x80\x00",              # trailing bytes
    b"\xc3\x83do",            # truncated list element
])
def test_rlp_decode_rejects_malformed(data):
    with pytest.raises(SerializationError):
        decode_rlp(data)


@pytest.mark.parametrize("address", [
    "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
    "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
    "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
])
def test_checksum_address(address):
    assert to_checksum_address(address.lower()) == address
    assert to_checksum_address(bytes.fromhex(address[2:])) == address


def test_checksum_address_length():
    with pytest.raises(ValidationError):
        to_checksum_address(b"\x00" * 19)
