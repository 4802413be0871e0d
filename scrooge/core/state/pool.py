"""
UTXO Pool - the set of currently spendable outputs.

The pool maps each UTXO identifier to the TxOutput it locates. It is the
authoritative record of spendable value: every key present is an output
that no accepted transaction has consumed yet.

Contract violations (adding an identifier twice, removing one that is
absent) mean the caller's bookkeeping is broken, so they raise
PoolInvariantError instead of being tolerated.
"""

from typing import Dict, Iterator, List, Optional

from scrooge.core.state.transaction import Transaction, TxOutput
from scrooge.core.state.utxo import UTXO
from scrooge.crypto import short_hex
from scrooge.utils.logger import get_logger

logger = get_logger("pool")


class UTXONotFoundError(KeyError):
    """Lookup of a UTXO that is not in the pool."""


class PoolInvariantError(RuntimeError):
    """Duplicate insert or removal of an absent UTXO."""


class UTXOPool:
    """
    Mapping of UTXO -> TxOutput.

    Attributes:
        _utxos: Internal dictionary of unspent outputs
    """

    def __init__(self, source: Optional["UTXOPool"] = None):
        """
        Create an empty pool, or an independent copy of ``source``.

        Keys and values are immutable, so copying the mapping is enough
        for the copy to share no mutable state with ``source``.
        """
        self._utxos: Dict[UTXO, TxOutput] = dict(source._utxos) if source is not None else {}

    def copy(self) -> "UTXOPool":
        return UTXOPool(self)

    # =========================================================================
    # Queries
    # =========================================================================

    def contains(self, utxo: UTXO) -> bool:
        """Check whether a UTXO is in the pool."""
        return utxo in self._utxos

    def get_tx_output(self, utxo: UTXO) -> TxOutput:
        """
        Look up the output a UTXO locates.

        Raises:
            UTXONotFoundError: If the UTXO is not in the pool
        """
        try:
            return self._utxos[utxo]
        except KeyError:
            raise UTXONotFoundError(utxo) from None

    def get_all_utxos(self) -> List[UTXO]:
        """All UTXOs in the pool, in insertion order."""
        return list(self._utxos)

    def get_balance(self, owner: bytes) -> int:
        """Total value held by ``owner``."""
        return sum(out.value for out in self._utxos.values() if out.owner == owner)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_utxo(self, utxo: UTXO, output: TxOutput) -> None:
        """
        Insert a new UTXO.

        Raises:
            PoolInvariantError: If the UTXO is already present
        """
        if utxo in self._utxos:
            raise PoolInvariantError(f"UTXO already in pool: {utxo!r}")
        self._utxos[utxo] = output

    def remove_utxo(self, utxo: UTXO) -> None:
        """
        Remove a spent UTXO.

        Raises:
            PoolInvariantError: If the UTXO is not present
        """
        if utxo not in self._utxos:
            raise PoolInvariantError(f"UTXO not in pool: {utxo!r}")
        del self._utxos[utxo]

    def add_transaction(self, tx: Transaction) -> List[UTXO]:
        """
        Insert UTXO(tx.tx_hash, i) -> output i for every output of ``tx``.

        Inputs are not touched; this is also how coinbase transactions seed
        a pool.

        Returns:
            The new UTXOs, in output order

        Raises:
            PoolInvariantError: If any new UTXO is already present. Nothing
                is inserted in that case.
        """
        if not tx.tx_hash:
            raise ValueError("Transaction must be finalized before its outputs enter a pool")
        created = [UTXO(tx.tx_hash, i) for i in range(len(tx.outputs))]
        for utxo in created:
            if utxo in self._utxos:
                raise PoolInvariantError(f"UTXO already in pool: {utxo!r}")
        for utxo, out in zip(created, tx.outputs):
            self.add_utxo(utxo, out)
        logger.debug(f"Added {len(created)} outputs of tx {short_hex(tx.tx_hash)}")
        return created

    # =========================================================================
    # Utility
    # =========================================================================

    def __contains__(self, utxo: object) -> bool:
        return utxo in self._utxos

    def __iter__(self) -> Iterator[UTXO]:
        return iter(list(self._utxos))

    def __len__(self) -> int:
        return len(self._utxos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UTXOPool):
            return NotImplemented
        return self._utxos == other._utxos

    def __repr__(self) -> str:
        return f"UTXOPool(size={len(self._utxos)})"

    def to_dict(self) -> dict:
        """JSON-friendly snapshot, sorted by UTXO for stable output."""
        return {
            "utxos": [
                {
                    "tx_hash": utxo.tx_hash.hex(),
                    "index": utxo.index,
                    "value": out.value,
                    "owner": out.owner.hex(),
                }
                for utxo, out in sorted(self._utxos.items())
            ]
        }

    def stats(self) -> dict:
        """Get pool statistics."""
        return {
            "utxo_count": len(self._utxos),
            "owner_count": len({out.owner for out in self._utxos.values()}),
            "total_value": sum(out.value for out in self._utxos.values()),
        }
