"""
UTXO - identifier of an Unspent Transaction Output.

Conceptual Background:
---------------------
A UTXO is a discrete unit of value that can be spent exactly once. It is
located by the hash of the transaction that created it and the position
of the output within that transaction:

    utxo = (tx_hash, index)

The identifier carries no value or owner; those live in the TxOutput the
pool maps it to. Keeping the key a small immutable value means it can be
hashed, compared and sorted freely, and a pool copy never shares mutable
state with its source.

UTXO Lifecycle:
--------------
1. Minted as (tx_hash, i) when a transaction with output i is accepted
2. Present in the pool (spendable)
3. Referenced by an input of a later transaction
4. Removed from the pool when that transaction is accepted
"""

from dataclasses import dataclass

from scrooge.crypto import short_hex
from scrooge.utils.validation import validate_hash, validate_index


@dataclass(frozen=True, order=True)
class UTXO:
    """
    An unspent transaction output identifier.

    Attributes:
        tx_hash: Hash of the transaction that created the output
        index: Index within that transaction's outputs
    """
    tx_hash: bytes   # 32 bytes
    index: int       # >= 0

    def __post_init__(self):
        """Validate field constraints."""
        valid, error = validate_hash(self.tx_hash, "tx_hash")
        if not valid:
            raise ValueError(error)
        valid, error = validate_index(self.index)
        if not valid:
            raise ValueError(error)
        # bytearray is accepted on input but stored immutably
        if not isinstance(self.tx_hash, bytes):
            object.__setattr__(self, "tx_hash", bytes(self.tx_hash))

    def to_bytes(self) -> bytes:
        """
        Serialize identifier.

        Format: tx_hash(32) || index(4)
        """
        return self.tx_hash + self.index.to_bytes(4, byteorder="big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "UTXO":
        """Deserialize identifier."""
        if len(data) != 36:
            raise ValueError(f"UTXO data must be 36 bytes, got {len(data)}")
        return cls(data[:32], int.from_bytes(data[32:], byteorder="big"))

    def __repr__(self) -> str:
        return f"UTXO(tx={short_hex(self.tx_hash)}, idx={self.index})"
