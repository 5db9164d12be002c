"""Transaction signing implementation for keytree."""

import logging
from typing import List, Optional, Tuple, Union

from ..constants import MAX_UINT256
from ..exceptions import FieldOutOfRangeError, SerializationError, ValidationError
from ..types.common import Address, Digest
from ..types.transaction import Signature, Transaction
from ..utils.encoding import decode_rlp, encode_rlp, hex_to_bytes, keccak256
from ..utils.validation import validate_uint
from .signature import SigningKey, recover_address, sign

__all__ = [
    "build_canonical_payload",
    "hash_payload",
    "serialize_transaction",
    "sign_transaction",
    "transaction_hash",
    "parse_transaction",
    "recover_sender",
]

logger = logging.getLogger(__name__)

# Largest chain id whose EIP-155 v still fits in 256 bits
MAX_CHAIN_ID = (MAX_UINT256 - 36) // 2


def _unsigned_fields(tx: Transaction) -> List[Union[int, bytes]]:
    """Validate and order the six legacy fields."""
    for name in ("nonce", "gas_price", "gas_limit", "value"):
        validate_uint(getattr(tx, name), name)

    if tx.to is None:
        to = b""
    elif len(tx.to) != 20:
        raise FieldOutOfRangeError("to", f"Recipient must be 20 bytes, got {len(tx.to)}")
    else:
        to = bytes(tx.to)

    return [tx.nonce, tx.gas_price, tx.gas_limit, to, tx.value, bytes(tx.data)]


def build_canonical_payload(tx: Transaction) -> bytes:
    """
    Serialize the signing payload of a transaction.

    RLP of ``[nonce, gasPrice, gasLimit, to, value, data]``, followed by
    ``[chainId, 0, 0]`` when ``chain_id`` is set (EIP-155).

    Raises:
        FieldOutOfRangeError: If a field does not fit its canonical width
    """
    fields = _unsigned_fields(tx)
    if tx.chain_id is not None:
        validate_uint(tx.chain_id, "chain_id", MAX_CHAIN_ID)
        fields += [tx.chain_id, 0, 0]
    return encode_rlp(fields)


def hash_payload(payload: bytes) -> Digest:
    """Keccak-256 of a canonical payload."""
    return Digest(keccak256(payload))


def serialize_transaction(tx: Transaction, signature: Optional[Signature] = None) -> bytes:
    """
    Serialize a transaction, signed when ``signature`` is given.

    Signed form is ``[..six fields.., v, r, s]``.
    """
    if signature is None:
        return build_canonical_payload(tx)

    if tx.chain_id is not None:
        validate_uint(tx.chain_id, "chain_id", MAX_CHAIN_ID)
    fields = _unsigned_fields(tx)
    fields += [signature.eip155_v(tx.chain_id), signature.r, signature.s]
    return encode_rlp(fields)


def sign_transaction(key: SigningKey, tx: Transaction) -> bytes:
    """
    Sign transaction and return serialized bytes.

    Composes payload -> hash -> sign -> serialize. Nonce and gas values
    come from ``tx`` as given.

    Raises:
        FieldOutOfRangeError: If a field does not fit its canonical width
        NoPrivateKeyError: If ``key`` is a public-only node
    """
    payload = build_canonical_payload(tx)
    signature = sign(key, hash_payload(payload))
    raw = serialize_transaction(tx, signature)

    logger.debug(f"Signed transaction nonce={tx.nonce} chain_id={tx.chain_id} ({len(raw)} bytes)")
    return raw


def transaction_hash(raw: bytes) -> bytes:
    """Hash identifying a signed transaction."""
    return keccak256(raw)


def _decode_uint(item: object, field: str) -> int:
    if not isinstance(item, bytes):
        raise SerializationError(f"Transaction field {field} must be a byte string")
    if item[:1] == b"\x00":
        raise SerializationError(f"Transaction field {field} has leading zeros")
    return int.from_bytes(item, "big")


def parse_transaction(raw: Union[bytes, str]) -> Tuple[Transaction, Optional[Signature]]:
    """
    Decode a serialized legacy transaction.

    Accepts the six-field unsigned form, the nine-field EIP-155 signing
    payload (``r = s = 0``) and signed transactions.

    Returns:
        Tuple of (transaction, signature or None)

    Raises:
        SerializationError: If bytes are not a legacy transaction
    """
    if isinstance(raw, str):
        raw = hex_to_bytes(raw)

    items = decode_rlp(raw)
    if not isinstance(items, list) or len(items) not in (6, 9):
        raise SerializationError("Transaction must be an RLP list of 6 or 9 items")

    nonce, gas_price, gas_limit = (
        _decode_uint(items[i], name) for i, name in enumerate(("nonce", "gas_price", "gas_limit"))
    )
    to, value, data = items[3], _decode_uint(items[4], "value"), items[5]

    if not isinstance(to, bytes) or len(to) not in (0, 20):
        raise SerializationError("Transaction recipient must be empty or 20 bytes")
    if not isinstance(data, bytes):
        raise SerializationError("Transaction data must be a byte string")

    fields = dict(
        nonce=nonce,
        gas_price=gas_price,
        gas_limit=gas_limit,
        to=to or None,
        value=value,
        data=data,
    )

    if len(items) == 6:
        return Transaction(**fields), None

    v, r, s = (_decode_uint(items[i], name) for i, name in zip((6, 7, 8), ("v", "r", "s")))

    if r == 0 and s == 0:
        return Transaction(chain_id=v, **fields), None

    if v in (27, 28):
        chain_id = None
    elif v >= 35:
        chain_id = (v - 35) // 2
    else:
        raise SerializationError(f"Invalid signature v value: {v}")

    try:
        signature = Signature.from_v(r, s, v)
    except ValidationError as e:
        raise SerializationError(e.message) from e

    return Transaction(chain_id=chain_id, **fields), signature


def recover_sender(raw: Union[bytes, str]) -> Address:
    """
    Recover the sender address of a signed transaction.

    Raises:
        SerializationError: If the transaction is unsigned or malformed
    """
    tx, signature = parse_transaction(raw)
    if signature is None:
        raise SerializationError("Transaction is not signed")
    return recover_address(hash_payload(build_canonical_payload(tx)), signature)
