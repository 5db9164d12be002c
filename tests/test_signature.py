import pytest

from keytree.crypto.hd import HDNode
from keytree.crypto.keys import PrivateKey
from keytree.crypto.signature import hash_message, recover_address, sign, sign_message, verify_message
from keytree.exceptions import ValidationError
from keytree.types import Signature
from keytree.utils.encoding import keccak256

KEY = PrivateKey(b"\x46" * 32)


def test_hash_message_prefix():
    assert hash_message("hello") == keccak256(b"\x19Ethereum Signed Message:\n5hello")
    assert hash_message(b"hello") == hash_message("hello")


def test_sign_and_verify_message():
    sig = sign_message(KEY, "hello")
    assert sig == sign_message(KEY, "hello")
    assert verify_message(KEY.address, sig, "hello")
    assert verify_message(KEY.address.lower(), sig.hex(), "hello")
    assert verify_message(KEY.public_key(), sig.to_bytes(), "hello")
    assert not verify_message(KEY.address, sig, "goodbye")
    assert not verify_message(PrivateKey(b"\x01" * 32).address, sig, "hello")
    assert not verify_message("not an address", sig, "hello")


def test_sign_accepts_any_key_form():
    digest = keccak256(b"digest")
    node = HDNode.from_seed(b"\x01" * 32)
    expected = sign(node.get_private_key(), digest)
    assert sign(node, digest) == expected
    assert sign(node.private_key, digest) == expected
    assert sign("0x" + node.private_key.hex(), digest) == expected
    assert recover_address(digest, expected) == node.address


def test_signature_serialization():
    sig = sign(KEY, keccak256(b"x"))
    assert Signature.from_bytes(sig.to_bytes()) == sig
    assert Signature.from_bytes(sig.to_recoverable()) == sig
    assert Signature.from_bytes(sig.hex()) == sig
    assert sig.v == 27 + sig.recovery_id
    assert sig.eip155_v(None) == sig.v
    assert Signature.from_v(sig.r, sig.s, sig.eip155_v(5)) == sig


def test_signature_validation():
    with pytest.raises(ValidationError):
        Signature(1, 1, 4)
    with pytest.raises(ValidationError):
        Signature.from_bytes(b"\x00" * 64)
    with pytest.raises(ValidationError):
        Signature.from_v(1, 1, 30)
    with pytest.raises(ValidationError):
        sign(KEY, b"\x00" * 31)
