"""UTXO pool, transactions and the transaction handler"""
from scrooge.core.state.utxo import UTXO
from scrooge.core.state.transaction import (
    Transaction,
    TxInput,
    TxOutput,
    create_transfer,
    create_coinbase,
)
from scrooge.core.state.pool import UTXOPool, UTXONotFoundError, PoolInvariantError
from scrooge.core.state.handler import TxHandler

__all__ = [
    "UTXO",
    "Transaction",
    "TxInput",
    "TxOutput",
    "create_transfer",
    "create_coinbase",
    "UTXOPool",
    "UTXONotFoundError",
    "PoolInvariantError",
    "TxHandler",
]
