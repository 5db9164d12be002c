"""Wallet for keytree: one signing key, optionally tied to an HD tree."""

import json
import logging
from typing import List, Optional, Union

from .constants import DEFAULT_DERIVATION_PATH
from .crypto.bip39 import generate_mnemonic, normalize_mnemonic
from .crypto.entropy import secure_random_bytes
from .crypto.hd import DerivationPath, HDNode
from .crypto.keys import PrivateKey, PublicKey
from .crypto.signature import sign, sign_message
from .crypto.transaction_signing import sign_transaction
from .exceptions import WalletError
from .types.common import Address, RandomSource
from .types.keystore import KeystoreDocument, KeystoreOptions
from .types.transaction import Signature, Transaction

__all__ = ["Wallet", "derive_wallets"]

logger = logging.getLogger(__name__)


class Wallet:
    """
    Signing account.

    Wraps a private key and, for HD wallets, the node it came from plus
    the mnemonic and path needed to re-derive it. Instances are not
    mutated after construction.
    """

    def __init__(
        self,
        private_key: Union[PrivateKey, bytes, str],
        node: Optional[HDNode] = None,
        mnemonic: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        """
        Initialize wallet.

        Args:
            private_key: Account private key
            node: HD node holding the same private key
            mnemonic: Phrase the node was derived from (no passphrase)
            path: Derivation path of ``node`` from the mnemonic root

        Raises:
            WalletError: If ``node``, or ``mnemonic`` at ``path``, does not
                hold ``private_key``
        """
        if not isinstance(private_key, PrivateKey):
            private_key = PrivateKey(private_key)
        if node is not None and node.private_key != private_key.secret:
            raise WalletError("HD node does not match private key")

        if mnemonic is not None:
            mnemonic = normalize_mnemonic(mnemonic)
            path = str(DerivationPath.parse(path or DEFAULT_DERIVATION_PATH))
            derived = HDNode.from_mnemonic(mnemonic).derive_path(path)
            if derived.private_key != private_key.secret:
                raise WalletError(f"Mnemonic does not derive this private key at {path}")
            if node is None:
                node = derived

        self._private_key = private_key
        self._node = node
        self._mnemonic = mnemonic
        self._path = path
        self._logger = logging.getLogger(f"{__name__}.Wallet.{self.address[:10]}")

    @classmethod
    def create_random(
        cls,
        path: str = DEFAULT_DERIVATION_PATH,
        strength: int = 128,
        random_source: RandomSource = secure_random_bytes,
    ) -> "Wallet":
        """
        Create wallet from a fresh random mnemonic.

        Args:
            path: Account derivation path
            strength: Mnemonic entropy bits
            random_source: Secure random capability

        Returns:
            New HD Wallet
        """
        mnemonic = generate_mnemonic(strength, random_source=random_source)
        wallet = cls.from_mnemonic(mnemonic, path)
        logger.info(f"Created random wallet: {wallet.address}")
        return wallet

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        path: Union[str, DerivationPath] = DEFAULT_DERIVATION_PATH,
        passphrase: str = "",
    ) -> "Wallet":
        """
        Restore wallet from BIP39 mnemonic.

        The mnemonic is kept only without a passphrase, since a keystore
        cannot carry the passphrase needed to re-derive the key.
        """
        path = DerivationPath.parse(path)
        node = HDNode.from_mnemonic(mnemonic, passphrase).derive_path(path)
        return cls(
            node.get_private_key(),
            node=node,
            mnemonic=None if passphrase else normalize_mnemonic(mnemonic),
            path=str(path),
        )

    @classmethod
    def from_node(cls, node: HDNode) -> "Wallet":
        """
        Create wallet from an HD node.

        Raises:
            NoPrivateKeyError: If node is public-only
        """
        return cls(node.get_private_key(), node=node)

    @classmethod
    def from_private_key(cls, private_key: Union[PrivateKey, bytes, str]) -> "Wallet":
        """Create wallet from a bare private key."""
        return cls(private_key)

    @classmethod
    def from_encrypted_json(
        cls,
        document: Union[KeystoreDocument, str, bytes],
        password: Union[str, bytes],
    ) -> "Wallet":
        """
        Decrypt a keystore document.

        Raises:
            AuthenticationFailedError: Wrong password or tampered document
        """
        from .crypto.keystore import decrypt_keystore
        return decrypt_keystore(document, password)

    @property
    def private_key(self) -> PrivateKey:
        """Private key (explicit export)."""
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        return self._private_key.public_key()

    @property
    def address(self) -> Address:
        """Checksummed account address."""
        return self._private_key.address

    @property
    def node(self) -> Optional[HDNode]:
        """HD node, for wallets derived from a key tree."""
        return self._node

    @property
    def mnemonic(self) -> Optional[str]:
        return self._mnemonic

    @property
    def path(self) -> Optional[str]:
        return self._path

    def export_private_key(self) -> str:
        """Export private key as 0x-prefixed hex."""
        self._logger.warning("Private key exported")
        return self._private_key.hex()

    def sign_digest(self, digest: bytes) -> Signature:
        """Sign a 32-byte digest deterministically."""
        return sign(self._private_key, digest)

    def sign_transaction(self, tx: Transaction) -> bytes:
        """Sign ``tx`` and return the serialized signed transaction."""
        raw = sign_transaction(self._private_key, tx)
        self._logger.info(f"Signed transaction nonce={tx.nonce} to={tx.to.hex() if tx.to else None}")
        return raw

    def sign_message(self, message: Union[str, bytes]) -> Signature:
        """Sign a personal message."""
        return sign_message(self._private_key, message)

    def encrypt(
        self,
        password: Union[str, bytes],
        options: Optional[KeystoreOptions] = None,
        random_source: RandomSource = secure_random_bytes,
    ) -> str:
        """Encrypt wallet to keystore JSON text."""
        from .crypto.keystore import encrypt_keystore
        return json.dumps(encrypt_keystore(self, password, options, random_source))

    async def encrypt_async(
        self,
        password: Union[str, bytes],
        options: Optional[KeystoreOptions] = None,
        random_source: RandomSource = secure_random_bytes,
    ) -> str:
        """Encrypt wallet to keystore JSON text in a worker thread."""
        from .crypto.keystore import encrypt_keystore_async
        return json.dumps(await encrypt_keystore_async(self, password, options, random_source))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wallet):
            return False
        return (
            self._private_key == other._private_key
            and self._mnemonic == other._mnemonic
            and self._path == other._path
        )

    def __hash__(self) -> int:
        return hash((self.address, self._path))

    def __repr__(self) -> str:
        if self._path:
            return f"Wallet({self.address}, path={self._path!r})"
        return f"Wallet({self.address})"


def derive_wallets(
    mnemonic: str,
    base_path: Union[str, DerivationPath] = "m/44'/60'/0'/0",
    count: int = 5,
    passphrase: str = "",
) -> List[Wallet]:
    """
    Derive ``count`` consecutive wallets under ``base_path``.

    Returns:
        Wallets at ``base_path/0`` .. ``base_path/count-1``
    """
    if count < 0:
        raise WalletError(f"Wallet count cannot be negative: {count}")

    base_path = DerivationPath.parse(base_path)
    account = HDNode.from_mnemonic(mnemonic, passphrase).derive_path(base_path)
    stored_mnemonic = None if passphrase else normalize_mnemonic(mnemonic)

    wallets = []
    for i in range(count):
        node = account.derive_child(i)
        wallets.append(Wallet(
            node.get_private_key(),
            node=node,
            mnemonic=stored_mnemonic,
            path=str(base_path / i),
        ))

    logger.info(f"Derived {count} wallets under {base_path}")
    return wallets
