import json

import pytest

from keytree import KeystoreOptions, PrivateKey, Transaction, Wallet, derive_wallets
from keytree.crypto.bip39 import validate_mnemonic
from keytree.crypto.hd import HDNode
from keytree.crypto.signature import verify_message
from keytree.crypto.transaction_signing import recover_sender
from keytree.exceptions import NoPrivateKeyError, WalletError
from keytree.utils.validation import to_wei, validate_address

ABANDON = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
HARDHAT = "test test test test test test test test test test test junk"
UPSET = "upset fuel enhance depart portion hope core animal innocent will athlete snack"
RECIPIENT = "0x933b946c4fec43372c5580096408d25b3c7936c5"
FAST_SCRYPT = KeystoreOptions(scrypt_n=1024)


def test_from_mnemonic_default_path():
    wallet = Wallet.from_mnemonic(ABANDON)
    assert wallet.address == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"
    assert wallet.path == "m/44'/60'/0'/0/0"
    assert wallet.mnemonic == ABANDON
    assert wallet.node.depth == 5


def test_passphrase_wallet_drops_mnemonic():
    wallet = Wallet.from_mnemonic(ABANDON, passphrase="TREZOR")
    assert wallet.mnemonic is None
    assert wallet.address != Wallet.from_mnemonic(ABANDON).address
    assert "x-ethers" not in json.loads(wallet.encrypt("pw", FAST_SCRYPT))


def test_create_random_with_fixed_source():
    wallet = Wallet.create_random(random_source=lambda n: b"\x00" * n)
    assert wallet.mnemonic == ABANDON
    assert wallet.address == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"

    fresh = Wallet.create_random()
    assert validate_mnemonic(fresh.mnemonic)


def test_derive_wallets_hardhat():
    wallets = derive_wallets(HARDHAT, "m/44'/60'/0'/0", count=5)
    assert [w.address for w in wallets] == [
        "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
        "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65",
    ]
    assert [w.path for w in wallets] == [f"m/44'/60'/0'/0/{i}" for i in range(5)]
    assert wallets[2] == Wallet.from_mnemonic(HARDHAT, "m/44'/60'/0'/0/2")


def test_derive_wallets_upset_mnemonic():
    wallets = derive_wallets(UPSET, "m/44'/60'/0'/0", count=5)
    watch_only = HDNode.from_mnemonic(UPSET).derive_path("m/44'/60'/0'/0").neuter()

    addresses = [w.address for w in wallets]
    assert addresses == [
        "0xfDd85780CB96f4712a869aB4d04f9D80c3CeE283",
        "0xBf5CDc23b1aCF7DE1B9aAcA91Dd686Ba1139D6a1",
        "0xe3a0E3164DD4b2a271a6eAA030798e0020106040",
        "0xF7bD603ad265bFFC0a7Ccbe9c789D3E0A819ee97",
        "0x1813b253ef412f344436E16a89350D169cFC9832",
    ]
    assert addresses == [watch_only.derive_child(i).address for i in range(5)]
    assert all(validate_address(a) == a for a in addresses)
    assert addresses == [w.address for w in derive_wallets(UPSET, "m/44'/60'/0'/0", count=5)]


def test_derive_wallets_count():
    assert derive_wallets(HARDHAT, count=0) == []
    with pytest.raises(WalletError):
        derive_wallets(HARDHAT, count=-1)


def test_from_node():
    node = HDNode.from_mnemonic(HARDHAT).derive_path("m/44'/60'/0'/0/1")
    wallet = Wallet.from_node(node)
    assert wallet.address == "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
    assert wallet.mnemonic is None
    with pytest.raises(NoPrivateKeyError):
        Wallet.from_node(node.neuter())


def test_node_must_match_key():
    node = HDNode.from_mnemonic(HARDHAT).derive_path("m/44'/60'/0'/0/1")
    with pytest.raises(WalletError):
        Wallet(b"\x46" * 32, node=node)


def test_mnemonic_must_derive_key():
    with pytest.raises(WalletError):
        Wallet(PrivateKey(b"\x46" * 32), mnemonic=UPSET)

    key = Wallet.from_mnemonic(HARDHAT, "m/44'/60'/0'/0/1").private_key
    with pytest.raises(WalletError):
        Wallet(key, mnemonic=HARDHAT)

    phrase = "  TEST test test test test test test test test test test junk "
    wallet = Wallet(key, mnemonic=phrase, path="m/44'/60'/0'/0/1")
    assert wallet.mnemonic == HARDHAT
    assert wallet.node.address == wallet.address
    assert Wallet.from_encrypted_json(wallet.encrypt("pw", FAST_SCRYPT), "pw") == wallet


def test_equality_and_repr():
    hd_wallet = Wallet.from_mnemonic(HARDHAT)
    key_wallet = Wallet.from_private_key(hd_wallet.private_key)
    assert hd_wallet.address == key_wallet.address
    assert hd_wallet != key_wallet
    assert key_wallet == Wallet.from_private_key(hd_wallet.export_private_key())

    text = repr(hd_wallet)
    assert hd_wallet.address in text
    assert hd_wallet.private_key.secret.hex() not in text
    assert "test test" not in text


def test_sign_transaction():
    wallet = Wallet.from_mnemonic(UPSET)
    tx = Transaction(
        nonce=0,
        gas_limit=21000,
        gas_price=to_wei("2", unit_decimals=9),
        to=RECIPIENT,
        value=to_wei("1.0"),
        data="0x",
    )
    raw = wallet.sign_transaction(tx)
    assert raw == wallet.sign_transaction(tx)
    assert recover_sender(raw) == wallet.address


def test_sign_message_and_digest():
    wallet = Wallet.from_mnemonic(HARDHAT)
    sig = wallet.sign_message("hello")
    assert verify_message(wallet.address, sig, "hello")
    assert wallet.public_key.verify(wallet.sign_digest(b"\x01" * 32), b"\x01" * 32)


def test_encrypt_roundtrip():
    wallet = Wallet.from_mnemonic(HARDHAT, "m/44'/60'/0'/0/4")
    encrypted = wallet.encrypt("p@$$word", FAST_SCRYPT)
    assert json.loads(encrypted)["x-ethers"]["path"] == "m/44'/60'/0'/0/4"

    restored = Wallet.from_encrypted_json(encrypted, "p@$$word")
    assert restored == wallet
    assert restored.address == "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65"
