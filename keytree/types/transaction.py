"""Transaction-related type definitions for keytree."""

from dataclasses import dataclass
from typing import Optional, Union

from ..exceptions import ValidationError
from ..types.common import Wei

__all__ = [
    "Transaction",
    "Signature",
]


def _coerce_bytes(value: str) -> bytes:
    """Decode hex with optional 0x prefix."""
    try:
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    except ValueError as e:
        raise ValidationError(f"Invalid hex string: {value}") from e


@dataclass(frozen=True)
class Transaction:
    """
    Legacy (pre-EIP-2718) transaction.

    ``to`` is the 20-byte recipient or ``None`` (or empty) for contract creation.
    ``chain_id`` selects EIP-155 replay protection when set. Hex strings
    are accepted for ``to`` and ``data`` and normalized to bytes.
    """

    nonce: int = 0
    gas_price: Wei = Wei(0)
    gas_limit: int = 0
    to: Optional[Union[bytes, str]] = None
    value: Wei = Wei(0)
    data: Union[bytes, str] = b""
    chain_id: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.to, str):
            object.__setattr__(self, "to", _coerce_bytes(self.to))
        if self.to is not None and not self.to:
            object.__setattr__(self, "to", None)
        if isinstance(self.data, str):
            object.__setattr__(self, "data", _coerce_bytes(self.data))
        for name in ("nonce", "gas_price", "gas_limit", "value"):
            if not isinstance(getattr(self, name), int) or isinstance(getattr(self, name), bool):
                raise ValidationError(f"Transaction field {name} must be an integer")
        if self.chain_id is not None and not isinstance(self.chain_id, int):
            raise ValidationError("Transaction field chain_id must be an integer")

    @property
    def is_contract_creation(self) -> bool:
        """Check if transaction deploys a contract."""
        return self.to is None


@dataclass(frozen=True)
class Signature:
    """secp256k1 ECDSA signature with public key recovery id."""

    r: int
    s: int
    recovery_id: int

    def __post_init__(self) -> None:
        if self.recovery_id not in (0, 1, 2, 3):
            raise ValidationError(f"Invalid recovery id: {self.recovery_id}")

    @property
    def v(self) -> int:
        """Pre-EIP-155 ``v`` value (27 or 28)."""
        return 27 + self.recovery_id

    def eip155_v(self, chain_id: Optional[int]) -> int:
        """Get ``v`` for a transaction on ``chain_id`` (legacy when None)."""
        if chain_id is None:
            return self.v
        return chain_id * 2 + 35 + self.recovery_id

    def to_bytes(self) -> bytes:
        """Serialize as 65 bytes: r || s || v."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    def to_recoverable(self) -> bytes:
        """Serialize as 65 bytes: r || s || recovery_id (libsecp256k1 layout)."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.recovery_id])

    def hex(self) -> str:
        """Get 65-byte signature as 0x-prefixed hex."""
        return "0x" + self.to_bytes().hex()

    @classmethod
    def from_bytes(cls, data: Union[bytes, str]) -> "Signature":
        """
        Parse a 65-byte r || s || v signature.

        ``v`` may be 0/1 or 27/28.
        """
        if isinstance(data, str):
            data = _coerce_bytes(data)
        if len(data) != 65:
            raise ValidationError(f"Signature must be 65 bytes, got {len(data)}")
        v = data[64]
        if v >= 27:
            v -= 27
        return cls(
            r=int.from_bytes(data[:32], "big"),
            s=int.from_bytes(data[32:64], "big"),
            recovery_id=v,
        )

    @classmethod
    def from_v(cls, r: int, s: int, v: int) -> "Signature":
        """Build from a transaction ``v``; the chain id is discarded."""
        if v in (27, 28):
            return cls(r, s, v - 27)
        if v >= 35:
            return cls(r, s, (v - 35) % 2)
        raise ValidationError(f"Invalid signature v value: {v}")
