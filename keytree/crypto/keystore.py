"""Encrypted keystore (Web3 Secret Storage v3) for keytree.

Documents optionally carry an ``x-ethers`` block with the encrypted
mnemonic entropy and derivation path, so an HD wallet can be restored
with its mnemonic.
"""

import asyncio
import hashlib
import hmac
import json
import logging
import unicodedata
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from Crypto.Cipher import AES

from ..constants import (
    DEFAULT_DERIVATION_PATH,
    KEYSTORE_CIPHERS,
    KEYSTORE_VERSION,
    PBKDF2_PRF,
    X_ETHERS_CLIENT,
    X_ETHERS_VERSION,
)
from ..exceptions import AuthenticationFailedError, KeystoreError, ValidationError
from ..types.common import RandomSource
from ..types.keystore import KeystoreDocument, KeystoreOptions
from ..utils.encoding import hex_to_bytes, keccak256
from .bip39 import entropy_to_mnemonic, mnemonic_to_entropy
from .entropy import read_random, secure_random_bytes
from .keys import PrivateKey

if TYPE_CHECKING:
    from ..wallet import Wallet

__all__ = [
    "encrypt_keystore",
    "decrypt_keystore",
    "encrypt_keystore_async",
    "decrypt_keystore_async",
]

logger = logging.getLogger(__name__)

# Extra derived-key bytes reserved for the mnemonic cipher key
MNEMONIC_KEY_LENGTH = 32


def _password_bytes(password: Union[str, bytes]) -> bytes:
    if isinstance(password, bytes):
        return password
    return unicodedata.normalize("NFKC", password).encode("utf-8")


def _scrypt_maxmem(n: int, r: int, p: int) -> int:
    return 128 * r * (n + p + 2) + 1024 * 1024


def _derive_key(password: bytes, kdf: str, kdfparams: Dict[str, Any], length: int) -> bytes:
    """
    Run the document's KDF and return ``length`` bytes.

    Both KDFs end in PBKDF2-HMAC-SHA256, so a longer output shares its
    prefix with the ``dklen`` stored in the document.
    """
    salt = hex_to_bytes(kdfparams["salt"])

    if kdf == "scrypt":
        n, r, p = int(kdfparams["n"]), int(kdfparams["r"]), int(kdfparams["p"])
        logger.debug(f"Running scrypt n={n} r={r} p={p}")
        return hashlib.scrypt(
            password, salt=salt, n=n, r=r, p=p, dklen=length, maxmem=_scrypt_maxmem(n, r, p)
        )

    if kdf == "pbkdf2":
        if kdfparams.get("prf", PBKDF2_PRF) != PBKDF2_PRF:
            raise KeystoreError(f"Unsupported PBKDF2 prf: {kdfparams.get('prf')}")
        iterations = int(kdfparams["c"])
        logger.debug(f"Running PBKDF2 c={iterations}")
        return hashlib.pbkdf2_hmac("sha256", password, salt, iterations, dklen=length)

    raise KeystoreError(f"Unsupported kdf: {kdf}")


def _aes_ctr(key: bytes, counter: bytes, data: bytes) -> bytes:
    """AES-CTR with a full 128-bit initial counter block (encrypt == decrypt)."""
    cipher = AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=counter)
    return cipher.encrypt(data)


def _geth_filename(address: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S.%f")[:-3]
    return f"UTC--{timestamp}Z--{address}"


def encrypt_keystore(
    wallet: "Wallet",
    password: Union[str, bytes],
    options: Optional[KeystoreOptions] = None,
    random_source: RandomSource = secure_random_bytes,
) -> KeystoreDocument:
    """
    Encrypt a wallet into a keystore document.

    Args:
        wallet: Wallet to encrypt; its mnemonic and path are stored in
            ``x-ethers`` when present
        password: Encryption password (NFKC-normalized)
        options: KDF and cipher parameters
        random_source: Secure random capability for salt, IV and id

    Returns:
        JSON-serializable keystore document
    """
    if options is None:
        options = KeystoreOptions()

    key_length = options.key_length
    salt = read_random(random_source, 32)
    iv = read_random(random_source, 16)
    document_id = uuid.UUID(bytes=read_random(random_source, 16), version=4)

    if options.kdf == "scrypt":
        kdfparams: Dict[str, Any] = {
            "dklen": 2 * key_length,
            "n": options.scrypt_n,
            "p": options.scrypt_p,
            "r": options.scrypt_r,
            "salt": salt.hex(),
        }
    else:
        kdfparams = {
            "c": options.pbkdf2_iterations,
            "dklen": 2 * key_length,
            "prf": PBKDF2_PRF,
            "salt": salt.hex(),
        }

    derived = _derive_key(
        _password_bytes(password), options.kdf, kdfparams, 2 * key_length + MNEMONIC_KEY_LENGTH
    )
    cipher_key = derived[:key_length]
    mac_key = derived[key_length:2 * key_length]
    mnemonic_key = derived[2 * key_length:]

    ciphertext = _aes_ctr(cipher_key, iv, wallet.private_key.secret)
    mac = keccak256(mac_key + ciphertext)

    address = wallet.address[2:].lower()
    document: KeystoreDocument = {
        "address": address,
        "id": str(document_id),
        "version": KEYSTORE_VERSION,
        "crypto": {
            "cipher": options.cipher,
            "cipherparams": {"iv": iv.hex()},
            "ciphertext": ciphertext.hex(),
            "kdf": options.kdf,
            "kdfparams": kdfparams,
            "mac": mac.hex(),
        },
    }

    if wallet.mnemonic is not None:
        counter = read_random(random_source, 16)
        mnemonic_ciphertext = _aes_ctr(mnemonic_key, counter, mnemonic_to_entropy(wallet.mnemonic))
        document["x-ethers"] = {
            "client": X_ETHERS_CLIENT,
            "gethFilename": _geth_filename(address),
            "mnemonicCounter": counter.hex(),
            "mnemonicCiphertext": mnemonic_ciphertext.hex(),
            "path": wallet.path or DEFAULT_DERIVATION_PATH,
            "locale": "en",
            "version": X_ETHERS_VERSION,
        }

    logger.info(f"Encrypted keystore for 0x{address} ({options.kdf}, {options.cipher})")
    return document


def _load_document(document: Union[KeystoreDocument, str, bytes]) -> KeystoreDocument:
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise KeystoreError("Keystore is not valid JSON") from e
    if not isinstance(document, dict):
        raise KeystoreError("Keystore must be a JSON object")
    return document


def decrypt_keystore(
    document: Union[KeystoreDocument, str, bytes],
    password: Union[str, bytes],
) -> "Wallet":
    """
    Decrypt a keystore document into a wallet.

    The MAC is checked before any ciphertext is decrypted.

    Args:
        document: Keystore as JSON text or parsed dict
        password: Password used at encryption

    Returns:
        Wallet with mnemonic and path restored when ``x-ethers`` carries them

    Raises:
        AuthenticationFailedError: Wrong password or tampered document
        KeystoreError: Malformed or inconsistent document
    """
    from ..wallet import Wallet

    document = _load_document(document)

    try:
        if int(document.get("version", 0)) != KEYSTORE_VERSION:
            raise KeystoreError(f"Unsupported keystore version: {document.get('version')}")

        crypto = document.get("crypto") or document["Crypto"]
        cipher = crypto["cipher"]
        if cipher not in KEYSTORE_CIPHERS:
            raise KeystoreError(f"Unsupported cipher: {cipher}")
        key_length = KEYSTORE_CIPHERS[cipher]

        kdf = crypto["kdf"]
        kdfparams = crypto["kdfparams"]
        iv = hex_to_bytes(crypto["cipherparams"]["iv"])
        ciphertext = hex_to_bytes(crypto["ciphertext"])
        mac = hex_to_bytes(crypto["mac"])

        extension = document.get("x-ethers") or {}
        has_mnemonic = bool(extension.get("mnemonicCiphertext"))

        derived = _derive_key(
            _password_bytes(password),
            kdf,
            kdfparams,
            2 * key_length + (MNEMONIC_KEY_LENGTH if has_mnemonic else 0),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise KeystoreError(f"Malformed keystore: {e}") from e
    except ValidationError as e:
        raise KeystoreError(f"Malformed keystore: {e.message}") from e

    mac_key = derived[key_length:2 * key_length]
    if not hmac.compare_digest(keccak256(mac_key + ciphertext), mac):
        raise AuthenticationFailedError()

    try:
        private_key = PrivateKey(_aes_ctr(derived[:key_length], iv, ciphertext))
    except ValidationError as e:
        raise KeystoreError("Decrypted private key is invalid") from e

    if document.get("address"):
        expected = str(document["address"]).lower().removeprefix("0x")
        if private_key.address[2:].lower() != expected:
            raise KeystoreError("Keystore address does not match decrypted key")

    if not has_mnemonic:
        logger.info(f"Decrypted keystore for {private_key.address}")
        return Wallet.from_private_key(private_key)

    try:
        counter = hex_to_bytes(extension["mnemonicCounter"])
        entropy = _aes_ctr(derived[2 * key_length:], counter, hex_to_bytes(extension["mnemonicCiphertext"]))
        mnemonic = entropy_to_mnemonic(entropy)
    except (KeyError, ValueError, ValidationError) as e:
        raise KeystoreError("Malformed mnemonic extension") from e

    wallet = Wallet.from_mnemonic(mnemonic, extension.get("path") or DEFAULT_DERIVATION_PATH)
    if wallet.private_key != private_key:
        raise KeystoreError("Keystore mnemonic does not match private key")

    logger.info(f"Decrypted HD keystore for {wallet.address} at {wallet.path}")
    return wallet


async def encrypt_keystore_async(
    wallet: "Wallet",
    password: Union[str, bytes],
    options: Optional[KeystoreOptions] = None,
    random_source: RandomSource = secure_random_bytes,
) -> KeystoreDocument:
    """Run ``encrypt_keystore`` in a worker thread."""
    return await asyncio.to_thread(encrypt_keystore, wallet, password, options, random_source)


async def decrypt_keystore_async(
    document: Union[KeystoreDocument, str, bytes],
    password: Union[str, bytes],
) -> "Wallet":
    """Run ``decrypt_keystore`` in a worker thread."""
    return await asyncio.to_thread(decrypt_keystore, document, password)
