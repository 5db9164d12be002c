import asyncio
import json

import pytest

from keytree.crypto.keystore import (
    decrypt_keystore,
    decrypt_keystore_async,
    encrypt_keystore,
    encrypt_keystore_async,
)
from keytree.exceptions import AuthenticationFailedError, KeystoreError, ValidationError
from keytree.types import KeystoreOptions
from keytree.wallet import Wallet

HARDHAT = "test test test test test test test test test test test junk"
FAST_SCRYPT = KeystoreOptions(scrypt_n=1024, scrypt_r=8, scrypt_p=1)
FAST_PBKDF2 = KeystoreOptions(kdf="pbkdf2", cipher="aes-256-ctr", pbkdf2_iterations=1000)

WEB3_PBKDF2_VECTOR = {
    "crypto": {
        "cipher": "aes-128-ctr",
        "cipherparams": {"iv": "6087dab2f9fdbbfaddc31a909735c1e6"},
        "ciphertext": "5318b4d5bcd28de64ee5559e671353e16f075ecae9f99c7a79a38af5f869aa46",
        "kdf": "pbkdf2",
        "kdfparams": {
            "c": 262144,
            "dklen": 32,
            "prf": "hmac-sha256",
            "salt": "ae3cd4e7013836a3df6bd7241b12db061dbe2c6785853cce422d148a624ce0bd",
        },
        "mac": "517ead924a9d0dc3124507e3393d175ce3ff7c1e96529c6c555ce9e51205e9b2",
    },
    "id": "3198bc9c-6672-5ab3-d995-4942343ae5b6",
    "version": 3,
}


def fixed_source(n):
    return b"\x11" * n


def test_decrypt_reference_vector():
    wallet = decrypt_keystore(WEB3_PBKDF2_VECTOR, "testpassword")
    assert wallet.private_key.secret.hex() == "7a28b5ba57c53603b0b07b56bba752f7784bf506fa95edc395f5cf6c7514fe9d"
    assert wallet.mnemonic is None


def test_reference_vector_wrong_password():
    with pytest.raises(AuthenticationFailedError):
        decrypt_keystore(json.dumps(WEB3_PBKDF2_VECTOR), "wrongpassword")


def test_document_layout():
    wallet = Wallet.from_mnemonic(HARDHAT)
    document = encrypt_keystore(wallet, "p@$$word", FAST_SCRYPT, fixed_source)

    assert document["version"] == 3
    assert document["address"] == "f39fd6e51aad88f6f4ce6ab8827279cfffb92266"
    assert document["id"] == "11111111-1111-4111-9111-111111111111"

    crypto = document["crypto"]
    assert crypto["cipher"] == "aes-128-ctr"
    assert crypto["cipherparams"] == {"iv": "11" * 16}
    assert crypto["kdf"] == "scrypt"
    assert crypto["kdfparams"] == {"dklen": 32, "n": 1024, "p": 1, "r": 8, "salt": "11" * 32}
    assert len(bytes.fromhex(crypto["ciphertext"])) == 32
    assert len(bytes.fromhex(crypto["mac"])) == 32

    extension = document["x-ethers"]
    assert extension["path"] == "m/44'/60'/0'/0/0"
    assert extension["locale"] == "en"
    assert extension["version"] == "0.1"
    assert extension["mnemonicCounter"] == "11" * 16
    assert len(bytes.fromhex(extension["mnemonicCiphertext"])) == 16
    assert extension["gethFilename"].startswith("UTC--")
    assert extension["gethFilename"].endswith("--f39fd6e51aad88f6f4ce6ab8827279cfffb92266")


def test_encryption_is_deterministic_for_fixed_randomness():
    wallet = Wallet.from_mnemonic(HARDHAT)
    first = encrypt_keystore(wallet, "pw", FAST_SCRYPT, fixed_source)
    second = encrypt_keystore(wallet, "pw", FAST_SCRYPT, fixed_source)
    assert first["crypto"] == second["crypto"]
    assert first["x-ethers"]["mnemonicCiphertext"] == second["x-ethers"]["mnemonicCiphertext"]


def test_hd_wallet_roundtrip_restores_mnemonic():
    wallet = Wallet.from_mnemonic(HARDHAT, "m/44'/60'/0'/0/3")
    document = encrypt_keystore(wallet, "p@$$word", FAST_SCRYPT)
    restored = decrypt_keystore(document, "p@$$word")

    assert restored == wallet
    assert restored.mnemonic == HARDHAT
    assert restored.path == "m/44'/60'/0'/0/3"
    assert restored.address == "0x90F79bf6EB2c4f870365E785982E1f101E93b906"


def test_private_key_wallet_roundtrip_pbkdf2():
    wallet = Wallet.from_private_key(b"\x46" * 32)
    document = encrypt_keystore(wallet, "pw", FAST_PBKDF2)

    assert "x-ethers" not in document
    assert document["crypto"]["kdfparams"]["dklen"] == 64
    assert document["crypto"]["kdfparams"]["prf"] == "hmac-sha256"
    assert decrypt_keystore(document, "pw") == wallet


def test_password_is_nfkc_normalized():
    wallet = Wallet.from_private_key(b"\x46" * 32)
    document = encrypt_keystore(wallet, "\u00c5ngstr\u00f6m", FAST_PBKDF2)
    assert decrypt_keystore(document, "A\u030angstro\u0308m") == wallet


def test_tampering_fails_authentication():
    wallet = Wallet.from_mnemonic(HARDHAT)
    document = encrypt_keystore(wallet, "pw", FAST_SCRYPT)

    ciphertext = bytearray.fromhex(document["crypto"]["ciphertext"])
    ciphertext[0] ^= 1
    document["crypto"]["ciphertext"] = ciphertext.hex()

    with pytest.raises(AuthenticationFailedError):
        decrypt_keystore(document, "pw")


def test_address_mismatch():
    wallet = Wallet.from_private_key(b"\x46" * 32)
    document = encrypt_keystore(wallet, "pw", FAST_PBKDF2)
    document["address"] = "00" * 20
    with pytest.raises(KeystoreError):
        decrypt_keystore(document, "pw")


@pytest.mark.parametrize("mutate", [
    lambda d: d.pop("crypto"),
    lambda d: d.update(version=2),
    lambda d: d["crypto"].update(cipher="aes-128-cbc"),
    lambda d: d["crypto"].update(kdf="argon2"),
    lambda d: d["crypto"]["kdfparams"].update(prf="hmac-sha512"),
    lambda d: d["crypto"].update(mac="zz"),
])
def test_malformed_documents(mutate):
    document = encrypt_keystore(Wallet.from_private_key(b"\x46" * 32), "pw", FAST_PBKDF2)
    mutate(document)
    with pytest.raises(KeystoreError):
        decrypt_keystore(document, "pw")


def test_invalid_json():
    with pytest.raises(KeystoreError):
        decrypt_keystore("{not json", "pw")
    with pytest.raises(KeystoreError):
        decrypt_keystore("[]", "pw")


def test_options_validation():
    with pytest.raises(ValidationError):
        KeystoreOptions(kdf="argon2")
    with pytest.raises(ValidationError):
        KeystoreOptions(cipher="aes-128-cbc")
    with pytest.raises(ValidationError):
        KeystoreOptions(scrypt_n=1000)
    assert KeystoreOptions(cipher="aes-256-ctr").key_length == 32


def test_async_roundtrip():
    wallet = Wallet.from_mnemonic(HARDHAT)

    async def roundtrip():
        document = await encrypt_keystore_async(wallet, "pw", FAST_SCRYPT)
        return await decrypt_keystore_async(document, "pw")

    assert asyncio.run(roundtrip()) == wallet
