"""Hierarchical Deterministic key derivation (BIP32) for keytree."""

import hashlib
import hmac
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Tuple, Union

from ..constants import (
    EXTENDED_KEY_VERSIONS,
    HARDENED_OFFSET,
    MASTER_KEY_HMAC_KEY,
    MAX_SEED_LENGTH,
    MIN_SEED_LENGTH,
    SECP256K1_N,
    Network,
)
from ..exceptions import (
    CryptoError,
    HardenedDerivationRequiresPrivateKeyError,
    InvalidDerivedKeyError,
    InvalidPathSyntaxError,
    NoPrivateKeyError,
    PathAppliesHardenedToPublicOnlyNodeError,
    SerializationError,
    ValidationError,
)
from ..types.common import Address, ChainCode, Fingerprint
from ..utils.encoding import decode_base58_check, encode_base58_check, hash160
from .bip39 import mnemonic_to_seed
from .keys import PrivateKey, PublicKey, public_key_to_address

__all__ = [
    "PathSegment",
    "DerivationPath",
    "HDNode",
    "from_seed",
    "from_mnemonic",
    "derive_child",
    "derive_path",
    "neuter",
    "address",
]

logger = logging.getLogger(__name__)

PATH_PATTERN = re.compile(r"m(/[0-9]+'?)*")
ZERO_FINGERPRINT = Fingerprint(b"\x00\x00\x00\x00")


def _hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


@dataclass(frozen=True)
class PathSegment:
    """One step of a derivation path."""

    index: int
    hardened: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.index < HARDENED_OFFSET:
            raise ValidationError(f"Path index out of range: {self.index}")

    @property
    def child_index(self) -> int:
        """Index as serialized in BIP32 (hardened bit included)."""
        return self.index + HARDENED_OFFSET if self.hardened else self.index

    def __str__(self) -> str:
        return f"{self.index}'" if self.hardened else str(self.index)


@dataclass(frozen=True)
class DerivationPath:
    """
    Parsed derivation path such as ``m/44'/60'/0'/0/0``.

    Paths are relative: ``m`` denotes whatever node the path is applied to.
    """

    segments: Tuple[PathSegment, ...] = ()

    @classmethod
    def parse(cls, path: Union[str, "DerivationPath"]) -> "DerivationPath":
        """
        Parse textual path.

        Raises:
            InvalidPathSyntaxError: If path does not match ``m(/[0-9]+'?)*``
                or an index is 2^31 or above
        """
        if isinstance(path, DerivationPath):
            return path
        if not isinstance(path, str) or not PATH_PATTERN.fullmatch(path):
            raise InvalidPathSyntaxError(str(path))

        segments = []
        for component in path.split("/")[1:]:
            hardened = component.endswith("'")
            index = int(component.rstrip("'"))
            if index >= HARDENED_OFFSET:
                raise InvalidPathSyntaxError(path, f"index {index} must be below 2^31")
            segments.append(PathSegment(index, hardened))

        return cls(tuple(segments))

    @property
    def has_hardened(self) -> bool:
        """Check if any segment is hardened."""
        return any(segment.hardened for segment in self.segments)

    def __truediv__(self, other: Union[int, str, PathSegment]) -> "DerivationPath":
        """Append a segment: ``path / 0`` or ``path / "44'"``."""
        if isinstance(other, PathSegment):
            segment = other
        elif isinstance(other, int):
            segment = PathSegment(other)
        elif isinstance(other, str):
            extra = DerivationPath.parse(f"m/{other}")
            return DerivationPath(self.segments + extra.segments)
        else:
            return NotImplemented
        return DerivationPath(self.segments + (segment,))

    def __iter__(self) -> Iterator[PathSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return "".join(["m"] + [f"/{segment}" for segment in self.segments])


@dataclass(frozen=True)
class HDNode:
    """
    HD wallet node (BIP32).

    Immutable: every derivation returns a new node. A node without
    ``private_key`` is public-only and can only derive non-hardened
    children.
    """

    private_key: Optional[bytes] = field(repr=False)
    public_key: bytes
    chain_code: ChainCode = field(repr=False)
    depth: int = 0
    parent_fingerprint: bytes = ZERO_FINGERPRINT
    index: int = 0
    network: Network = Network.MAINNET

    def __post_init__(self) -> None:
        if len(self.chain_code) != 32:
            raise ValidationError("Chain code must be 32 bytes")
        if len(self.public_key) != 33:
            raise ValidationError("Public key must be 33 bytes (compressed)")
        if len(self.parent_fingerprint) != 4:
            raise ValidationError("Parent fingerprint must be 4 bytes")
        if not 0 <= self.depth <= 255:
            raise ValidationError(f"Depth out of range: {self.depth}")
        if not 0 <= self.index <= 0xFFFFFFFF:
            raise ValidationError(f"Child index out of range: {self.index}")
        if self.private_key is not None:
            if PrivateKey(self.private_key).public_key().compressed != self.public_key:
                raise ValidationError("Public key does not match private key")

    @classmethod
    def from_seed(cls, seed: bytes, network: Network = Network.MAINNET) -> "HDNode":
        """Create master node from seed."""
        if not MIN_SEED_LENGTH <= len(seed) <= MAX_SEED_LENGTH:
            raise ValidationError(f"Seed must be between {MIN_SEED_LENGTH} and {MAX_SEED_LENGTH} bytes")

        h = _hmac_sha512(MASTER_KEY_HMAC_KEY, seed)

        private_key_bytes = h[:32]
        chain_code = h[32:]

        key_int = int.from_bytes(private_key_bytes, "big")
        if key_int == 0 or key_int >= SECP256K1_N:
            raise CryptoError("Invalid master key; use a different seed")

        public_key = PrivateKey(private_key_bytes).public_key().compressed

        node = cls(
            private_key=private_key_bytes,
            public_key=public_key,
            chain_code=chain_code,
            network=network
        )
        logger.debug(f"Created master node {node.fingerprint.hex()}")
        return node

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        passphrase: str = "",
        network: Network = Network.MAINNET
    ) -> "HDNode":
        """Create master node from a BIP39 mnemonic."""
        return cls.from_seed(mnemonic_to_seed(mnemonic, passphrase), network)

    @classmethod
    def from_extended_key(cls, extended_key: str) -> "HDNode":
        """
        Import an xprv/xpub (or tprv/tpub) string.

        Raises:
            SerializationError: If the key is malformed
        """
        try:
            data = decode_base58_check(extended_key)
        except ValidationError as e:
            raise SerializationError(f"Invalid extended key: {e.message}") from e

        if len(data) != 78:
            raise SerializationError(f"Extended key payload must be 78 bytes, got {len(data)}")

        version = data[0:4]
        depth = data[4]
        parent_fingerprint = data[5:9]
        index = int.from_bytes(data[9:13], "big")
        chain_code = data[13:45]
        key_data = data[45:78]

        for network, (private_version, public_version) in EXTENDED_KEY_VERSIONS.items():
            if version in (private_version, public_version):
                is_private = version == private_version
                break
        else:
            raise SerializationError(f"Unknown extended key version: {version.hex()}")

        if depth == 0 and (parent_fingerprint != ZERO_FINGERPRINT or index != 0):
            raise SerializationError("Master key must have zero parent fingerprint and index")

        try:
            if is_private:
                if key_data[0] != 0:
                    raise SerializationError("Private key data must start with 0x00")
                private_key = PrivateKey(key_data[1:])
                return cls(
                    private_key=private_key.secret,
                    public_key=private_key.public_key().compressed,
                    chain_code=chain_code,
                    depth=depth,
                    parent_fingerprint=parent_fingerprint,
                    index=index,
                    network=network,
                )
            return cls(
                private_key=None,
                public_key=PublicKey(key_data).compressed,
                chain_code=chain_code,
                depth=depth,
                parent_fingerprint=parent_fingerprint,
                index=index,
                network=network,
            )
        except ValidationError as e:
            raise SerializationError(f"Invalid extended key material: {e.message}") from e

    @property
    def identifier(self) -> bytes:
        """HASH160 of the public key."""
        return hash160(self.public_key)

    @property
    def fingerprint(self) -> Fingerprint:
        """First 4 bytes of the identifier."""
        return Fingerprint(self.identifier[:4])

    @property
    def hardened(self) -> bool:
        """Check if this node was derived with a hardened index."""
        return self.index >= HARDENED_OFFSET

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    @property
    def address(self) -> Address:
        """Account address of this node's public key."""
        return public_key_to_address(self.public_key)

    @property
    def extended_key(self) -> str:
        """Base58Check xprv (private nodes) or xpub (public-only nodes)."""
        private_version, public_version = EXTENDED_KEY_VERSIONS[self.network]
        if self.private_key is not None:
            version, key_data = private_version, b"\x00" + self.private_key
        else:
            version, key_data = public_version, self.public_key

        return encode_base58_check(
            version
            + bytes([self.depth])
            + self.parent_fingerprint
            + self.index.to_bytes(4, "big")
            + self.chain_code
            + key_data
        )

    @property
    def extended_public_key(self) -> str:
        """Base58Check xpub."""
        return self.neuter().extended_key

    def derive_child(self, index: int, hardened: bool = False) -> "HDNode":
        """
        Derive child node.

        Args:
            index: Child number below 2^31, or an already-hardened index
                (>= 2^31), which implies ``hardened``
            hardened: Use hardened derivation

        Raises:
            HardenedDerivationRequiresPrivateKeyError: Hardened child of a public-only node
            InvalidDerivedKeyError: Resulting key is invalid; retry with ``next_index``
        """
        if not 0 <= index <= 0xFFFFFFFF:
            raise ValidationError(f"Child index out of range: {index}")

        if index >= HARDENED_OFFSET:
            hardened = True
            child_index = index
        elif hardened:
            child_index = index + HARDENED_OFFSET
        else:
            child_index = index

        if hardened:
            if self.private_key is None:
                raise HardenedDerivationRequiresPrivateKeyError(child_index - HARDENED_OFFSET)
            data = b"\x00" + self.private_key + child_index.to_bytes(4, "big")
        else:
            data = self.public_key + child_index.to_bytes(4, "big")

        h = _hmac_sha512(self.chain_code, data)

        tweak = h[:32]
        child_chain_code = h[32:]

        tweak_int = int.from_bytes(tweak, "big")
        if tweak_int >= SECP256K1_N:
            raise InvalidDerivedKeyError(child_index, self.depth + 1)

        if self.private_key is not None:
            parent_key_int = int.from_bytes(self.private_key, "big")
            child_private_int = (parent_key_int + tweak_int) % SECP256K1_N

            if child_private_int == 0:
                raise InvalidDerivedKeyError(child_index, self.depth + 1)

            child_private_key = child_private_int.to_bytes(32, "big")
            child_public_key = PrivateKey(child_private_key).public_key().compressed
        else:
            child_private_key = None
            try:
                child_public_key = PublicKey(self.public_key).add_tweak(tweak).compressed
            except CryptoError as e:
                raise InvalidDerivedKeyError(child_index, self.depth + 1) from e

        return HDNode(
            private_key=child_private_key,
            public_key=child_public_key,
            chain_code=child_chain_code,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            index=child_index,
            network=self.network
        )

    def derive_path(self, path: Union[str, DerivationPath]) -> "HDNode":
        """
        Derive using a BIP32 path like ``m/44'/60'/0'/0/0``, relative to this node.

        Raises:
            InvalidPathSyntaxError: If path cannot be parsed
            PathAppliesHardenedToPublicOnlyNodeError: At the first hardened
                segment reached on a public-only node
        """
        path = DerivationPath.parse(path)

        node = self
        for position, segment in enumerate(path):
            if segment.hardened and node.private_key is None:
                raise PathAppliesHardenedToPublicOnlyNodeError(position, str(segment), segment.index)
            node = node.derive_child(segment.index, segment.hardened)

        logger.debug(f"Derived {path} from {self.fingerprint.hex()} (depth {node.depth})")
        return node

    def neuter(self) -> "HDNode":
        """Return a public-only copy for watch-only derivation."""
        return replace(self, private_key=None)

    def get_private_key(self) -> PrivateKey:
        """
        Get private key object.

        Raises:
            NoPrivateKeyError: If this is a public-only node
        """
        if self.private_key is None:
            raise NoPrivateKeyError("This is a public-only node")
        return PrivateKey(self.private_key)

    def get_public_key(self) -> PublicKey:
        """Get public key object."""
        return PublicKey(self.public_key)


def from_seed(seed: bytes, network: Network = Network.MAINNET) -> HDNode:
    """Create master node from seed."""
    return HDNode.from_seed(seed, network)


def from_mnemonic(mnemonic: str, passphrase: str = "", network: Network = Network.MAINNET) -> HDNode:
    """Create master node from a BIP39 mnemonic."""
    return HDNode.from_mnemonic(mnemonic, passphrase, network)


def derive_child(parent: HDNode, index: int, hardened: bool = False) -> HDNode:
    """Derive one child of ``parent``."""
    return parent.derive_child(index, hardened)


def derive_path(root: HDNode, path: Union[str, DerivationPath]) -> HDNode:
    """Fold ``derive_child`` over ``path`` starting at ``root``."""
    return root.derive_path(path)


def neuter(node: HDNode) -> HDNode:
    """Strip the private key from ``node``."""
    return node.neuter()


def address(node: HDNode) -> Address:
    """Account address of ``node``."""
    return node.address
